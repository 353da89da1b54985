from decimal import Decimal

from rest_framework import status
from rest_framework.test import APITestCase

from bookings.models import Booking
from core.testing import SessionMixin, create_booking, create_user, create_villa
from users.models import UserProfile
from villas.models import Villa, VillaImage

IMAGE = {"url": "https://res.cloudinary.com/demo/image/upload/villas/harau.jpg", "public_id": "villas/harau"}


class VillaAPITests(SessionMixin, APITestCase):

    def setUp(self):
        self.admin = create_user("admin", role=UserProfile.Role.ADMIN)
        self.owner = create_user("pak_datuak", role=UserProfile.Role.OWNER)
        self.login(self.admin)

    def payload(self, **overrides):
        data = {
            "name": "Villa Lembah Harau",
            "description": "Two bedroom villa facing the cliffs",
            "price": "1500000",
            "capacity": 4,
            "status": "available",
            "owner": "pak_datuak",
            "facilities": {"wifi": True, "pool": True},
            "images": [IMAGE],
        }
        data.update(overrides)
        return data

    def test_create_villa(self):
        response = self.client.post("/api/villas", self.payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data["data"]
        self.assertEqual(data["owner"], "pak_datuak")
        self.assertEqual(data["price"], "1500000.00")
        self.assertEqual(data["facilities"], {
            "bathroom": False, "wifi": True, "bed": False, "parking": False,
            "kitchen": False, "ac": False, "tv": False, "pool": True,
        })
        self.assertEqual([image["public_id"] for image in data["images"]], ["villas/harau"])
        self.assertEqual(Villa.objects.get().owner, self.owner)

    def test_create_validation(self):
        cases = {
            "no images": (self.payload(images=[]), "At least one image is required"),
            "zero price": (self.payload(price="0"), "Price must be a positive number"),
            "zero capacity": (self.payload(capacity=0), "Capacity must be a positive integer"),
            "unknown owner": (self.payload(owner="nobody"), "Owner nobody does not exist"),
            "bad status": (
                self.payload(status="closed"), '"closed" is not a valid choice.'
            ),
        }
        for name, (payload, error) in cases.items():
            with self.subTest(name):
                response = self.client.post("/api/villas", payload, format="json")
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertEqual(response.data, {"statusCode": 400, "error": error})
        self.assertFalse(Villa.objects.exists())

    def test_list_and_filter_by_status(self):
        create_villa(self.owner, name="Villa A")
        create_villa(self.owner, name="Villa B", status=Villa.Status.MAINTENANCE)

        everything = self.client.get("/api/villas")
        maintenance = self.client.get("/api/villas", {"status": "maintenance"})

        self.assertEqual([v["name"] for v in everything.data["data"]], ["Villa A", "Villa B"])
        self.assertEqual([v["name"] for v in maintenance.data["data"]], ["Villa B"])

    def test_put_merges_facilities_and_replaces_images(self):
        villa = create_villa(self.owner, facilities={"wifi": True})
        kept = villa.images.get()
        new_image = {"url": "https://res.cloudinary.com/demo/image/upload/villas/new.jpg", "public_id": "villas/new"}

        response = self.client.put(
            f"/api/villas/{villa.id}",
            {
                "price": "2000000",
                "facilities": {"ac": True},
                "images": [{"url": kept.url, "public_id": kept.public_id}, new_image],
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        villa.refresh_from_db()
        self.assertEqual(villa.price, Decimal("2000000"))
        self.assertTrue(villa.facilities["wifi"])
        self.assertTrue(villa.facilities["ac"])
        self.assertEqual(
            list(villa.images.values_list("public_id", flat=True)), [kept.public_id, "villas/new"]
        )

    def test_patch_updates_status_only(self):
        villa = create_villa(self.owner)

        response = self.client.patch(
            f"/api/villas/{villa.id}", {"status": "booked", "name": "Ignored"}, format="json"
        )
        invalid = self.client.patch(f"/api/villas/{villa.id}", {"status": "closed"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["status"], "booked")
        self.assertEqual(response.data["data"]["name"], "Villa Harau")
        self.assertEqual(invalid.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            invalid.data["error"], "Status must be either 'available', 'booked', or 'maintenance'"
        )

    def test_delete_keeps_bookings_as_orphans(self):
        villa = create_villa(self.owner)
        booking = create_booking(villa)

        response = self.client.delete(f"/api/villas/{villa.id}")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Villa.objects.filter(id=villa.id).exists())
        self.assertFalse(VillaImage.objects.exists())
        self.assertEqual(Booking.objects.get(id=booking.id).villa_id, villa.id)

    def test_missing_villa(self):
        response = self.client.get("/api/villas/9999")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["statusCode"], 404)

    def test_requires_session(self):
        self.logout()

        response = self.client.get("/api/villas")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json(), {"error": "Unauthorized", "message": "Authentication required"})
