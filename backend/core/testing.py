"""Helpers shared by the app test suites."""
from datetime import date
from decimal import Decimal

from django.conf import settings
from django.contrib.auth.models import User

from bookings.models import Booking
from users.models import UserProfile
from users.tokens import issue_session_token
from villas.models import Villa, VillaImage

PASSWORD = "secret123"


def create_user(username, role=UserProfile.Role.ADMIN, password=PASSWORD):
    user = User.objects.create_user(username=username, password=password)
    UserProfile.objects.create(user=user, role=role)
    return user


def create_villa(owner, name="Villa Harau", price="1500000", capacity=4, **kwargs):
    villa = Villa.objects.create(
        name=name,
        description=kwargs.pop("description", "Villa at the foot of the Harau cliffs"),
        price=Decimal(price),
        capacity=capacity,
        owner=owner,
        **kwargs,
    )
    VillaImage.objects.create(
        villa=villa,
        url=f"https://res.cloudinary.com/demo/image/upload/villas/{villa.pk}.jpg",
        public_id=f"villas/{villa.pk}",
    )
    return villa


def create_booking(villa, check_in=date(2025, 7, 10), check_out=date(2025, 7, 12), **kwargs):
    defaults = {
        "guests": 2,
        "name": "Rina Putri",
        "email": "rina@example.com",
        "phone": "081234567890",
        "amount": Decimal("1000000"),
        "payment_status": Booking.PaymentStatus.PAID,
    }
    defaults.update(kwargs)
    villa_id = villa.pk if isinstance(villa, Villa) else villa
    return Booking.objects.create(
        villa_id=villa_id, check_in_date=check_in, check_out_date=check_out, **defaults
    )


class SessionMixin:
    """Log a test client in by planting a session cookie."""

    def login(self, user, client=None):
        client = client or self.client
        client.cookies[settings.SESSION_COOKIE_NAME_GATE] = issue_session_token(user)
        return client

    def logout(self, client=None):
        client = client or self.client
        client.cookies.pop(settings.SESSION_COOKIE_NAME_GATE, None)
        return client
