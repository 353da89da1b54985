# dashboard/serializers.py
from rest_framework import serializers


class VillaBookingCountSerializer(serializers.Serializer):
    villa_id = serializers.IntegerField()
    villa_name = serializers.CharField()
    bookings = serializers.IntegerField()


class UpcomingCheckInSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField()
    order_id = serializers.CharField()
    guest_name = serializers.CharField()
    villa_name = serializers.CharField()
    nights = serializers.IntegerField()
    guests = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    payment_status = serializers.CharField()
    check_in_date = serializers.DateField()


class DashboardSerializer(serializers.Serializer):
    today_date = serializers.DateField()
    total_villas = serializers.IntegerField()
    total_bookings = serializers.IntegerField()
    bookings_per_villa = VillaBookingCountSerializer(many=True)
    today_checkin_count = serializers.IntegerField()
    today_checkout_count = serializers.IntegerField()
    upcoming_checkins = UpcomingCheckInSerializer(many=True)
