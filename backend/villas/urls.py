from django.urls import path

from .views import VillaDetailView, VillaListCreateView

urlpatterns = [
    path("villas", VillaListCreateView.as_view(), name="villa-list-create"),
    path("villas/<int:pk>", VillaDetailView.as_view(), name="villa-detail"),
]
