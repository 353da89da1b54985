from datetime import date
from decimal import Decimal
from unittest import mock

from django.test import SimpleTestCase
from rest_framework import status
from rest_framework.test import APITestCase

from bookings.models import Booking, generate_order_id
from core.testing import SessionMixin, create_booking, create_user, create_villa
from users.models import UserProfile


class OrderIdTests(SimpleTestCase):

    def test_format(self):
        with mock.patch("bookings.models.time.time", return_value=1720569600.123), \
                mock.patch("bookings.models.random.randint", return_value=42):
            self.assertEqual(generate_order_id(), "ORDER-1720569600123-42")

    def test_random_suffix_range(self):
        for _ in range(50):
            self.assertRegex(generate_order_id(), r"^ORDER-\d{13}-\d{1,3}$")


class BookingAPITests(SessionMixin, APITestCase):

    def setUp(self):
        self.admin = create_user("admin", role=UserProfile.Role.ADMIN)
        self.staff = create_user("staff", role=UserProfile.Role.STAFF)
        self.owner = create_user("owner", role=UserProfile.Role.OWNER)
        self.villa = create_villa(self.owner)
        self.login(self.staff)

    def payload(self, **overrides):
        data = {
            "villa": self.villa.id,
            "check_in_date": "2025-07-10",
            "check_out_date": "2025-07-12",
            "guests": 2,
            "name": "Rina Putri",
            "email": "rina@example.com",
            "phone": "081234567890",
        }
        data.update(overrides)
        return data

    def test_create_applies_defaults(self):
        response = self.client.post("/api/bookings", self.payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data["data"]
        self.assertRegex(data["order_id"], r"^ORDER-\d+-\d{1,3}$")
        self.assertEqual(data["payment_status"], "pending")
        self.assertEqual(data["payment_id"], "")
        self.assertEqual(data["amount"], "0.00")
        self.assertEqual(data["villa_name"], "Villa Harau")
        self.assertEqual(data["nights"], 2)

    def test_client_cannot_choose_order_id(self):
        response = self.client.post("/api/bookings", self.payload(order_id="ORDER-1-1"), format="json")

        self.assertNotEqual(response.data["data"]["order_id"], "ORDER-1-1")

    def test_order_ids_are_unique(self):
        with mock.patch("bookings.models.generate_order_id", side_effect=["ORDER-1-1", "ORDER-1-1", "ORDER-1-2"]):
            first = create_booking(self.villa)
            second = create_booking(self.villa)

        self.assertEqual(first.order_id, "ORDER-1-1")
        self.assertEqual(second.order_id, "ORDER-1-2")

    def test_create_validation(self):
        cases = {
            "check-out before check-in": (
                self.payload(check_out_date="2025-07-10"), "Check-out date must be after check-in date"
            ),
            "no guests": (self.payload(guests=0), "At least 1 guest is required"),
            "too many guests": (self.payload(guests=11), "Maximum 10 guests allowed"),
            "bad email": (self.payload(email="rina"), "Invalid email address"),
            "unknown villa": (self.payload(villa=9999), "Villa 9999 does not exist"),
        }
        for name, (payload, error) in cases.items():
            with self.subTest(name):
                response = self.client.post("/api/bookings", payload, format="json")
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertEqual(response.data["error"], error)
        self.assertFalse(Booking.objects.exists())

    def test_list_filters(self):
        paid = create_booking(self.villa, payment_status="paid")
        create_booking(self.villa, check_in=date(2025, 8, 1), check_out=date(2025, 8, 3), payment_status="pending")

        by_status = self.client.get("/api/bookings", {"payment_status": "paid"})
        by_date = self.client.get("/api/bookings", {"check_in_date": "2025-07-10"})

        self.assertEqual([b["id"] for b in by_status.data["data"]], [paid.id])
        self.assertEqual([b["id"] for b in by_date.data["data"]], [paid.id])

    def test_orphan_booking_still_listed(self):
        orphan = create_booking(9999)

        response = self.client.get("/api/bookings")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        row = response.data["data"][0]
        self.assertEqual(row["id"], orphan.id)
        self.assertEqual(row["villa"], 9999)
        self.assertIsNone(row["villa_name"])

    def test_patch_updates_payment_fields_only(self):
        booking = create_booking(self.villa, payment_status="pending")

        response = self.client.patch(
            f"/api/bookings/{booking.id}",
            {
                "amount": "1750000",
                "extra_bed": 1,
                "price_extra_bed": "150000",
                "payment_status": "paid",
                "payment_id": "PAY-123",
                "name": "Someone Else",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        booking.refresh_from_db()
        self.assertEqual(booking.amount, Decimal("1750000"))
        self.assertEqual(booking.extra_bed, 1)
        self.assertEqual(booking.price_extra_bed, Decimal("150000"))
        self.assertEqual(booking.payment_status, "paid")
        self.assertEqual(booking.payment_id, "PAY-123")
        self.assertEqual(booking.name, "Rina Putri")

    def test_put_is_not_allowed(self):
        booking = create_booking(self.villa)

        response = self.client.put(f"/api/bookings/{booking.id}", self.payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

    def test_delete_requires_admin_or_staff(self):
        booking = create_booking(self.villa)

        self.login(self.owner)
        denied = self.client.delete(f"/api/bookings/{booking.id}")
        self.assertEqual(denied.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Booking.objects.filter(id=booking.id).exists())

        self.login(self.staff)
        response = self.client.delete(f"/api/bookings/{booking.id}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["order_id"], booking.order_id)
        self.assertFalse(Booking.objects.filter(id=booking.id).exists())

    def test_missing_booking(self):
        response = self.client.get("/api/bookings/9999")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["statusCode"], 404)
