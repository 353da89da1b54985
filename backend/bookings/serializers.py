from rest_framework import serializers

from villas.models import Villa
from .models import Booking


class BookingSerializer(serializers.ModelSerializer):
    villa = serializers.PrimaryKeyRelatedField(
        queryset=Villa.objects.all(),
        error_messages={
            "required": "Villa is required",
            "null": "Villa is required",
            "does_not_exist": "Villa {pk_value} does not exist",
        },
    )
    villa_name = serializers.SerializerMethodField()
    nights = serializers.IntegerField(read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "villa",
            "villa_name",
            "check_in_date",
            "check_out_date",
            "nights",
            "guests",
            "name",
            "email",
            "phone",
            "order_id",
            "payment_id",
            "payment_status",
            "amount",
            "extra_bed",
            "price_extra_bed",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "order_id", "villa_name", "nights", "created_at", "updated_at"]
        extra_kwargs = {
            "guests": {
                "min_value": 1,
                "max_value": Booking.MAX_GUESTS,
                "error_messages": {
                    "min_value": "At least 1 guest is required",
                    "max_value": f"Maximum {Booking.MAX_GUESTS} guests allowed",
                },
            },
            "name": {"error_messages": {"blank": "Name is required"}},
            "phone": {"error_messages": {"blank": "Phone number is required"}},
            "email": {"error_messages": {"invalid": "Invalid email address"}},
            "payment_status": {"required": False},
            "payment_id": {"required": False},
            "amount": {"required": False},
        }

    def get_villa_name(self, obj):
        # Orphaned bookings keep their villa id but resolve to nothing
        try:
            villa = obj.villa
        except Villa.DoesNotExist:
            villa = None
        return villa.name if villa else None

    def validate(self, data):
        check_in = data.get("check_in_date")
        check_out = data.get("check_out_date")

        if check_in and check_out and check_out <= check_in:
            raise serializers.ValidationError(
                {"check_out_date": "Check-out date must be after check-in date"}
            )
        return data


class BookingPaymentSerializer(serializers.ModelSerializer):
    """Partial update of the payment-related fields of a booking."""

    class Meta:
        model = Booking
        fields = ["amount", "extra_bed", "price_extra_bed", "payment_status", "payment_id"]
        extra_kwargs = {field: {"required": False} for field in fields}

    def validate_amount(self, value):
        if value < 0:
            raise serializers.ValidationError("Amount cannot be negative")
        return value

    def validate_price_extra_bed(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Extra bed price cannot be negative")
        return value
