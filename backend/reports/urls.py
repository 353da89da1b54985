from django.urls import path

from .views import (
    InvoiceExportView, ReportDataView, ReportEntryView, ReportExportView,
    ReportPageView, ReportVillaGroupsView,
)

urlpatterns = [
    path("", ReportPageView.as_view(), name="report-page"),
    path("data/", ReportDataView.as_view(), name="report-data"),
    path("villas/", ReportVillaGroupsView.as_view(), name="report-villas"),
    path("entries/<int:entry_id>/", ReportEntryView.as_view(), name="report-entry"),
    path("export/", ReportExportView.as_view(), name="report-export"),
    path("invoice/<int:entry_id>/", InvoiceExportView.as_view(), name="report-invoice"),
]
