import random
import time

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from villas.models import Villa


def generate_order_id():
    """``ORDER-<epoch millis>-<0..999>``, the public reference of a booking."""
    return f"ORDER-{int(time.time() * 1000)}-{random.randint(0, 999)}"


def generate_unique_order_id():
    order_id = generate_order_id()
    while Booking.objects.filter(order_id=order_id).exists():
        order_id = generate_order_id()
    return order_id


class Booking(models.Model):
    class PaymentStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        PAID = "paid", "Paid"

    MAX_GUESTS = 10

    # Informal reference: deleting a villa leaves its bookings in place
    villa = models.ForeignKey(
        Villa,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        related_name="bookings",
    )

    # Stay details
    check_in_date = models.DateField()
    check_out_date = models.DateField()
    guests = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(MAX_GUESTS)]
    )

    # Guest contact
    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=50)

    # Payment info
    order_id = models.CharField(max_length=64, unique=True, editable=False)
    payment_id = models.CharField(max_length=255, blank=True, default="")
    # Free-form in practice; "pending" and "paid" are the values the report knows
    payment_status = models.CharField(max_length=50, default=PaymentStatus.PENDING)
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    extra_bed = models.PositiveIntegerField(null=True, blank=True)
    price_extra_bed = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "bookings"
        ordering = ["id"]

    def __str__(self):
        return f"Booking {self.order_id} ({self.name})"

    @property
    def nights(self):
        return (self.check_out_date - self.check_in_date).days

    def save(self, *args, **kwargs):
        """Assign a fresh order id on first save."""
        if not self.order_id:
            self.order_id = generate_unique_order_id()
        super().save(*args, **kwargs)
