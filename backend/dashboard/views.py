from django.db.models import Count
from django.shortcuts import render
from django.utils import timezone
from django.views import View
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.views import APIView

from bookings.models import Booking
from core.responses import envelope
from reports.ledger import UNKNOWN_VILLA
from villas.models import Villa
from .serializers import DashboardSerializer

UPCOMING_LIMIT = 5


def bookings_per_villa():
    villas = Villa.objects.annotate(booking_count=Count("bookings")).order_by("name")
    return [
        {"villa_id": villa.id, "villa_name": villa.name, "bookings": villa.booking_count}
        for villa in villas
    ]


def upcoming_checkins(today, limit=UPCOMING_LIMIT):
    bookings = (
        Booking.objects.filter(check_in_date__gte=today)
        .select_related("villa")
        .order_by("check_in_date", "id")[:limit]
    )

    upcoming = []
    for booking in bookings:
        upcoming.append({
            "booking_id": booking.id,
            "order_id": booking.order_id,
            "guest_name": booking.name,
            "villa_name": booking.villa.name if booking.villa else UNKNOWN_VILLA,
            "nights": booking.nights,
            "guests": booking.guests,
            "amount": booking.amount,
            "payment_status": booking.payment_status,
            "check_in_date": booking.check_in_date,
        })
    return upcoming


def collect_widgets(today=None):
    today = today or timezone.localdate()
    return {
        "today_date": today,
        "total_villas": Villa.objects.count(),
        "total_bookings": Booking.objects.count(),
        "bookings_per_villa": bookings_per_villa(),
        "today_checkin_count": Booking.objects.filter(check_in_date=today).count(),
        "today_checkout_count": Booking.objects.filter(check_out_date=today).count(),
        "upcoming_checkins": upcoming_checkins(today),
    }


class DashboardWidgetsView(APIView):

    @extend_schema(tags=["dashboard"], summary="Dashboard widgets", responses={200: DashboardSerializer})
    def get(self, request):
        return envelope(
            status.HTTP_200_OK,
            message="Dashboard retrieved successfully",
            data=DashboardSerializer(collect_widgets()).data,
        )


class HomePageView(View):
    template_name = "dashboard/home.html"

    def get(self, request, *args, **kwargs):
        context = {
            "identity": request.identity,
            **collect_widgets(),
        }
        return render(request, self.template_name, context)
