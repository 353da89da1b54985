from django.contrib.auth.models import User
from django.db import models

FACILITY_FLAGS = ("bathroom", "wifi", "bed", "parking", "kitchen", "ac", "tv", "pool")


def default_facilities():
    return {flag: False for flag in FACILITY_FLAGS}


class Villa(models.Model):
    class Status(models.TextChoices):
        AVAILABLE = "available", "Available"
        BOOKED = "booked", "Booked"
        MAINTENANCE = "maintenance", "Maintenance"

    # Basic Information
    name = models.CharField(max_length=255, help_text="Villa Name")
    description = models.TextField()
    price = models.DecimalField(max_digits=14, decimal_places=2, help_text="Price per night")
    capacity = models.PositiveIntegerField(help_text="Maximum number of guests")
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.AVAILABLE,
    )

    owner = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="villas",
        help_text="Owner account; receives the owner share of the revenue",
    )
    facilities = models.JSONField(
        default=default_facilities,
        help_text="Boolean flags: bathroom, wifi, bed, parking, kitchen, ac, tv, pool",
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "villas"

    def __str__(self):
        return self.name


class VillaImage(models.Model):
    """An image already hosted on the media service."""
    villa = models.ForeignKey(Villa, on_delete=models.CASCADE, related_name="images")
    url = models.URLField(max_length=500)
    public_id = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "villa_images"
        ordering = ["id"]

    def __str__(self):
        return self.url
