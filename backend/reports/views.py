import logging

from django.http import HttpResponse
from django.shortcuts import render
from django.views import View
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from core.responses import envelope
from users.permissions import IsAdminOrOwnerRole, get_request_identity
from .exporters import export_invoice_pdf, export_report_pdf, invoice_filename, report_filename
from .ledger import compute_financial_totals, default_date_range, search_entries
from .serializers import (
    EntryQuerySerializer, ExtraBedSerializer, FinancialReportSerializer, InvoiceQuerySerializer,
    LedgerEntrySerializer, ReportQuerySerializer, VillaGroupSerializer,
)
from .services import delete_entry, edit_entry_extra_bed, load_report, load_villa_groups, resolve_entry

logger = logging.getLogger(__name__)

REPORT_PARAMETERS = [
    OpenApiParameter("date_from", OpenApiTypes.DATE, OpenApiParameter.QUERY,
                     description="First check-in date (inclusive). Defaults to the first of the month."),
    OpenApiParameter("date_to", OpenApiTypes.DATE, OpenApiParameter.QUERY,
                     description="Last check-in date (inclusive). Defaults to today."),
]
SEARCH_PARAMETER = OpenApiParameter(
    "search", OpenApiTypes.STR, OpenApiParameter.QUERY,
    description="Case-insensitive match on visitor name, villa name or order id",
)
ORDER_ID_PARAMETER = OpenApiParameter(
    "order_id", OpenApiTypes.STR, OpenApiParameter.QUERY,
    description="Order id shown for the entry when the report was loaded",
)


def report_title(identity):
    if identity is not None and identity.is_owner:
        return "Your Villa Financial Report"
    return "Villa Financial Report"


def parse_report_query(query_params, serializer_class=ReportQuerySerializer):
    serializer = serializer_class(data=query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def pdf_response(content, filename):
    response = HttpResponse(content, content_type="application/pdf")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


class ReportPageView(View):
    """
    Server-rendered financial report. The request gate only lets admins and
    owners through, so ``request.identity`` is always set here.
    """
    template_name = "reports/report.html"

    def get(self, request, *args, **kwargs):
        identity = request.identity
        query = ReportQuerySerializer(data=request.GET)
        params = query.validated_data if query.is_valid() else {}

        report = load_report(params.get("date_from"), params.get("date_to"))
        entries = search_entries(report.entries, params.get("search"))
        groups = load_villa_groups(identity, report.date_from, report.date_to)

        context = {
            "title": report_title(identity),
            "identity": identity,
            "report": report,
            "entries": entries,
            "totals": compute_financial_totals(entries),
            "groups": groups,
            "search": params.get("search", ""),
            "errors": query.errors,
        }
        return render(request, self.template_name, context)


class ReportAPIView(APIView):
    permission_classes = [IsAuthenticated, IsAdminOrOwnerRole]


class ReportDataView(ReportAPIView):

    @extend_schema(
        tags=["report"],
        summary="Ledger, summary and paid-only totals for a period",
        parameters=REPORT_PARAMETERS + [SEARCH_PARAMETER],
        responses={200: FinancialReportSerializer},
    )
    def get(self, request, *args, **kwargs):
        params = parse_report_query(request.query_params)
        report = load_report(params.get("date_from"), params.get("date_to"))
        entries = search_entries(report.entries, params.get("search"))

        data = FinancialReportSerializer({
            "date_from": report.date_from,
            "date_to": report.date_to,
            "entries": entries,
            "summary": report.summary,
            "totals": compute_financial_totals(entries),
        }).data
        return envelope(status.HTTP_200_OK, message="Report generated successfully", data=data)


class ReportVillaGroupsView(ReportAPIView):

    @extend_schema(
        tags=["report"],
        summary="Revenue per villa visible to the caller",
        parameters=REPORT_PARAMETERS,
        responses={200: VillaGroupSerializer(many=True)},
    )
    def get(self, request, *args, **kwargs):
        params = parse_report_query(request.query_params)
        default_from, default_to = default_date_range()
        report_from = params.get("date_from") or default_from
        report_to = params.get("date_to") or default_to

        groups = load_villa_groups(get_request_identity(request), report_from, report_to)
        return envelope(
            status.HTTP_200_OK,
            message="Villa summaries retrieved successfully",
            data=VillaGroupSerializer(groups, many=True).data,
        )


class ReportEntryView(ReportAPIView):
    """
    PATCH  → set extra bed count and price on the booking behind an entry
    DELETE → delete the booking behind an entry

    Entry ids are positions within the ledger of the given period, so the
    same ``date_from``/``date_to`` used to list the report must be passed,
    along with the entry's ``order_id``. A 409 means the position now points
    at another booking.
    """

    @extend_schema(
        tags=["report"],
        summary="Edit extra bed details of a ledger entry",
        parameters=REPORT_PARAMETERS + [ORDER_ID_PARAMETER],
        request=ExtraBedSerializer,
        responses={
            200: LedgerEntrySerializer,
            404: OpenApiResponse(description="Entry or booking not found"),
            409: OpenApiResponse(description="Entry no longer matches the order id"),
        },
    )
    def patch(self, request, entry_id, *args, **kwargs):
        params = parse_report_query(request.query_params, EntryQuerySerializer)
        serializer = ExtraBedSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        report = load_report(params.get("date_from"), params.get("date_to"))
        entry = edit_entry_extra_bed(
            report,
            entry_id,
            serializer.validated_data["extra_bed"],
            serializer.validated_data["price_extra_bed"],
            identity=get_request_identity(request),
            order_id=params["order_id"],
        )
        return envelope(
            status.HTTP_200_OK,
            message="Extra bed information updated successfully",
            data=LedgerEntrySerializer(entry).data,
        )

    @extend_schema(
        tags=["report"],
        summary="Delete the booking behind a ledger entry",
        parameters=REPORT_PARAMETERS + [ORDER_ID_PARAMETER],
        responses={
            200: OpenApiResponse(description="Booking deleted"),
            404: OpenApiResponse(description="Entry or booking not found"),
            409: OpenApiResponse(description="Entry no longer matches the order id"),
        },
    )
    def delete(self, request, entry_id, *args, **kwargs):
        params = parse_report_query(request.query_params, EntryQuerySerializer)
        report = load_report(params.get("date_from"), params.get("date_to"))
        entry = delete_entry(
            report, entry_id, identity=get_request_identity(request), order_id=params["order_id"]
        )

        return envelope(
            status.HTTP_200_OK,
            message="Booking deleted successfully",
            data={"id": entry.id, "order_id": entry.notes},
        )


class ReportExportView(ReportAPIView):

    @extend_schema(
        tags=["report"],
        summary="Download the financial report as PDF",
        parameters=REPORT_PARAMETERS + [SEARCH_PARAMETER],
        responses={(200, "application/pdf"): OpenApiTypes.BINARY},
    )
    def get(self, request, *args, **kwargs):
        params = parse_report_query(request.query_params)
        report = load_report(params.get("date_from"), params.get("date_to"))
        identity = get_request_identity(request)

        content = export_report_pdf(report, title=report_title(identity), search=params.get("search"))
        logger.info(f"Report exported by {identity.username if identity else 'unknown'}")
        return pdf_response(content, report_filename(report))


class InvoiceExportView(ReportAPIView):

    @extend_schema(
        tags=["report"],
        summary="Download the invoice of one ledger entry as PDF",
        parameters=REPORT_PARAMETERS + [ORDER_ID_PARAMETER],
        responses={
            (200, "application/pdf"): OpenApiTypes.BINARY,
            404: OpenApiResponse(description="Entry not found"),
            409: OpenApiResponse(description="Entry no longer matches the order id"),
        },
    )
    def get(self, request, entry_id, *args, **kwargs):
        params = parse_report_query(request.query_params, InvoiceQuerySerializer)
        report = load_report(params.get("date_from"), params.get("date_to"))
        entry = resolve_entry(report, entry_id, params.get("order_id"))

        content = export_invoice_pdf(entry)
        return pdf_response(content, invoice_filename(entry))
