# bookings/views.py
import logging

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiExample, extend_schema, extend_schema_view
from rest_framework import filters, status, viewsets
from rest_framework.permissions import IsAuthenticated

from core.responses import envelope
from users.permissions import IsAdminOrStaffRole
from .models import Booking
from .serializers import BookingPaymentSerializer, BookingSerializer

logger = logging.getLogger(__name__)


@extend_schema_view(
    list=extend_schema(summary="List bookings", tags=["booking"]),
    retrieve=extend_schema(summary="Retrieve a booking", tags=["booking"]),
    create=extend_schema(
        summary="Create a booking",
        tags=["booking"],
        examples=[
            OpenApiExample(
                "Create Booking Example",
                value={
                    "villa": 1,
                    "check_in_date": "2025-07-10",
                    "check_out_date": "2025-07-12",
                    "guests": 2,
                    "name": "Rina Putri",
                    "email": "rina@example.com",
                    "phone": "081234567890",
                },
                request_only=True,
            )
        ],
    ),
    partial_update=extend_schema(
        summary="Update payment details of a booking",
        tags=["booking"],
        request=BookingPaymentSerializer,
    ),
    destroy=extend_schema(summary="Delete a booking (admin or staff)", tags=["booking"]),
)
class BookingViewSet(viewsets.ModelViewSet):
    queryset = Booking.objects.all().select_related("villa")
    serializer_class = BookingSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    # Filtering & search
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ["villa", "payment_status", "check_in_date"]
    search_fields = ["name", "email", "order_id"]

    def get_permissions(self):
        if self.action == "destroy":
            return [IsAuthenticated(), IsAdminOrStaffRole()]
        return super().get_permissions()

    def get_serializer_class(self):
        if self.action == "partial_update":
            return BookingPaymentSerializer
        return BookingSerializer

    def list(self, request, *args, **kwargs):
        bookings = self.filter_queryset(self.get_queryset())
        return envelope(
            status.HTTP_200_OK,
            message="Bookings retrieved successfully",
            data=BookingSerializer(bookings, many=True).data,
        )

    def retrieve(self, request, *args, **kwargs):
        booking = self.get_object()
        return envelope(
            status.HTTP_200_OK,
            message="Booking retrieved successfully",
            data=BookingSerializer(booking).data,
        )

    def create(self, request, *args, **kwargs):
        serializer = BookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = serializer.save()

        logger.info(f"Booking {booking.order_id} created for villa {booking.villa_id} by {request.user.username}")
        return envelope(
            status.HTTP_201_CREATED,
            message="Booking created successfully",
            data=BookingSerializer(booking).data,
        )

    def partial_update(self, request, *args, **kwargs):
        booking = self.get_object()
        serializer = BookingPaymentSerializer(booking, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        booking = serializer.save()

        logger.info(
            f"Booking {booking.order_id} updated by {request.user.username}: "
            f"{', '.join(sorted(serializer.validated_data)) or 'no fields'}"
        )
        return envelope(
            status.HTTP_200_OK,
            message="Booking updated successfully",
            data=BookingSerializer(booking).data,
        )

    def destroy(self, request, *args, **kwargs):
        booking = self.get_object()
        booking_id, order_id = booking.id, booking.order_id
        booking.delete()

        logger.info(f"Booking {order_id} deleted by {request.user.username}")
        return envelope(
            status.HTTP_200_OK,
            message="Booking deleted successfully",
            data={"id": booking_id, "order_id": order_id},
        )
