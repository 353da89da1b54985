from datetime import date, timedelta
from unittest import mock

from rest_framework import status
from rest_framework.test import APITestCase

from core.testing import SessionMixin, create_booking, create_user, create_villa
from users.models import UserProfile

TODAY = date(2025, 7, 10)


@mock.patch("dashboard.views.timezone.localdate", return_value=TODAY)
class DashboardTests(SessionMixin, APITestCase):

    def setUp(self):
        self.staff = create_user("staff", role=UserProfile.Role.STAFF)
        owner = create_user("owner", role=UserProfile.Role.OWNER)
        self.harau = create_villa(owner, name="Villa Harau")
        self.sarasah = create_villa(owner, name="Villa Sarasah")

        create_booking(self.harau, check_in=TODAY - timedelta(days=2), check_out=TODAY)
        create_booking(self.harau, check_in=TODAY, check_out=TODAY + timedelta(days=1), name="Today")
        for offset in range(1, 7):
            create_booking(
                self.sarasah,
                check_in=TODAY + timedelta(days=offset),
                check_out=TODAY + timedelta(days=offset + 2),
                name=f"Guest {offset}",
            )
        self.login(self.staff)

    def test_widgets(self, _localdate):
        response = self.client.get("/api/dashboard/widgets")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data["data"]
        self.assertEqual(data["total_villas"], 2)
        self.assertEqual(data["total_bookings"], 8)
        self.assertEqual(
            [(row["villa_name"], row["bookings"]) for row in data["bookings_per_villa"]],
            [("Villa Harau", 2), ("Villa Sarasah", 6)],
        )
        self.assertEqual(data["today_checkin_count"], 1)
        self.assertEqual(data["today_checkout_count"], 1)
        self.assertEqual(
            [row["guest_name"] for row in data["upcoming_checkins"]],
            ["Today", "Guest 1", "Guest 2", "Guest 3", "Guest 4"],
        )
        self.assertEqual(data["upcoming_checkins"][1]["nights"], 2)

    def test_home_page(self, _localdate):
        response = self.client.get("/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertContains(response, "Welcome, staff")
        self.assertContains(response, "Villa Sarasah")
        self.assertNotContains(response, 'href="/report/"')

    def test_home_page_requires_login(self, _localdate):
        self.logout()

        response = self.client.get("/")

        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        self.assertEqual(response["Location"], "/login?callbackUrl=%2F")
