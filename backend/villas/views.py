import logging

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import (
    OpenApiExample,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated

from core.responses import envelope
from .models import Villa
from .serializers import VillaSerializer, VillaStatusSerializer

logger = logging.getLogger(__name__)


@extend_schema(
    tags=["villa"],
    summary="List and create villas",
    responses={
        200: VillaSerializer(many=True),
        201: VillaSerializer,
        400: OpenApiResponse(description="Validation error"),
    },
    examples=[
        OpenApiExample(
            name="Create Villa",
            value={
                "name": "Villa Lembah Harau",
                "description": "Two bedroom villa facing the cliffs",
                "price": "1500000",
                "capacity": 4,
                "status": "available",
                "owner": "pak_datuak",
                "facilities": {"wifi": True, "parking": True, "pool": False},
                "images": [
                    {"url": "https://res.cloudinary.com/demo/image/upload/villas/harau.jpg", "public_id": "villas/harau"},
                ],
            },
            request_only=True,
        )
    ],
)
class VillaListCreateView(generics.GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = VillaSerializer
    queryset = Villa.objects.select_related("owner").prefetch_related("images").order_by("name")
    filterset_fields = ["status"]

    def get(self, request, *args, **kwargs):
        villas = self.filter_queryset(self.get_queryset())
        return envelope(
            status.HTTP_200_OK,
            message="Villas retrieved successfully",
            data=VillaSerializer(villas, many=True).data,
        )

    def post(self, request, *args, **kwargs):
        serializer = VillaSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        villa = serializer.save()

        logger.info(f"Villa {villa.id} ({villa.name}) created by {request.user.username}")
        return envelope(
            status.HTTP_201_CREATED,
            message="Villa created successfully",
            data=VillaSerializer(villa).data,
        )


@extend_schema(
    tags=["villa"],
    summary="Retrieve, update, patch status and delete a villa",
    responses={
        200: VillaSerializer,
        404: OpenApiResponse(description="Villa not found"),
    },
)
class VillaDetailView(generics.GenericAPIView):
    """
    GET    → villa details
    PUT    → update any villa field; ``images`` replaces the stored list
    PATCH  → update ``status`` only
    DELETE → remove the villa (its bookings are kept and become orphans)
    """
    permission_classes = [IsAuthenticated]
    serializer_class = VillaSerializer
    queryset = Villa.objects.select_related("owner").prefetch_related("images")

    def get_villa(self):
        return get_object_or_404(self.get_queryset(), pk=self.kwargs["pk"])

    def get(self, request, *args, **kwargs):
        villa = self.get_villa()
        return envelope(
            status.HTTP_200_OK,
            message="Villa retrieved successfully",
            data=VillaSerializer(villa).data,
        )

    def put(self, request, *args, **kwargs):
        villa = self.get_villa()
        serializer = VillaSerializer(villa, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        villa = serializer.save()

        logger.info(f"Villa {villa.id} updated by {request.user.username}")
        return envelope(
            status.HTTP_200_OK,
            message="Villa updated successfully",
            data=VillaSerializer(self.get_villa()).data,
        )

    @extend_schema(request=VillaStatusSerializer)
    def patch(self, request, *args, **kwargs):
        villa = self.get_villa()
        serializer = VillaStatusSerializer(villa, data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        logger.info(f"Villa {villa.id} status set to {villa.status} by {request.user.username}")
        return envelope(
            status.HTTP_200_OK,
            message="Villa status updated successfully",
            data=VillaSerializer(self.get_villa()).data,
        )

    def delete(self, request, *args, **kwargs):
        villa = self.get_villa()
        villa_id = villa.id
        villa.delete()

        logger.info(f"Villa {villa_id} deleted by {request.user.username}")
        return envelope(
            status.HTTP_200_OK,
            message="Villa deleted successfully",
            data={"id": villa_id},
        )
