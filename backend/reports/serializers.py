from rest_framework import serializers


class ReportQuerySerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    search = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, data):
        date_from = data.get("date_from")
        date_to = data.get("date_to")
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({"date_to": "End date must not be before start date"})
        return data


class EntryQuerySerializer(ReportQuerySerializer):
    """Period plus the order id the caller saw at the entry's position."""
    order_id = serializers.CharField(
        error_messages={"required": "Order id is required", "blank": "Order id is required"},
    )


class InvoiceQuerySerializer(ReportQuerySerializer):
    order_id = serializers.CharField(required=False)


class ExtraBedSerializer(serializers.Serializer):
    extra_bed = serializers.IntegerField(min_value=0)
    price_extra_bed = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)


class LedgerEntrySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    date_in = serializers.DateField()
    date_out = serializers.DateField()
    visitor_name = serializers.CharField()
    person_in_charge = serializers.CharField()
    deposite = serializers.DecimalField(max_digits=14, decimal_places=2)
    villa = serializers.CharField()
    capacity = serializers.IntegerField()
    guests = serializers.IntegerField()
    villa_capacity = serializers.IntegerField(allow_null=True)
    extra_bed = serializers.IntegerField()
    price_extra_bed = serializers.DecimalField(max_digits=14, decimal_places=2)
    villa_price = serializers.DecimalField(max_digits=14, decimal_places=2)
    owner_share = serializers.DecimalField(max_digits=14, decimal_places=2)
    manager_share = serializers.DecimalField(max_digits=14, decimal_places=2)
    notes = serializers.CharField()
    payment_status = serializers.CharField()


class SummarySerializer(serializers.Serializer):
    total_revenue = serializers.DecimalField(max_digits=16, decimal_places=2)
    total_bookings = serializers.IntegerField()
    average_booking_value = serializers.DecimalField(max_digits=16, decimal_places=2)
    occupancy_rate = serializers.FloatField()


class TotalsSerializer(serializers.Serializer):
    deposite = serializers.DecimalField(max_digits=16, decimal_places=2)
    extra_bed = serializers.IntegerField()
    price_extra_bed = serializers.DecimalField(max_digits=16, decimal_places=2)
    villa_price = serializers.DecimalField(max_digits=16, decimal_places=2)
    owner_share = serializers.DecimalField(max_digits=16, decimal_places=2)
    manager_share = serializers.DecimalField(max_digits=16, decimal_places=2)


class FinancialReportSerializer(serializers.Serializer):
    date_from = serializers.DateField()
    date_to = serializers.DateField()
    entries = LedgerEntrySerializer(many=True)
    summary = SummarySerializer()
    totals = TotalsSerializer()


class GroupBookingSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    order_id = serializers.CharField()
    name = serializers.CharField()
    check_in_date = serializers.DateField()
    check_out_date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    payment_status = serializers.CharField()


class VillaGroupSerializer(serializers.Serializer):
    villa_id = serializers.IntegerField(allow_null=True)
    villa_name = serializers.CharField()
    total_revenue = serializers.DecimalField(max_digits=16, decimal_places=2)
    total_bookings = serializers.IntegerField()
    average_booking_value = serializers.DecimalField(max_digits=16, decimal_places=2)
    bookings = GroupBookingSerializer(many=True)
