from decimal import Decimal

from django.contrib.auth.models import User
from django.db import transaction
from rest_framework import serializers

from .models import FACILITY_FLAGS, Villa, VillaImage, default_facilities


class FacilitiesSerializer(serializers.Serializer):
    bathroom = serializers.BooleanField(default=False)
    wifi = serializers.BooleanField(default=False)
    bed = serializers.BooleanField(default=False)
    parking = serializers.BooleanField(default=False)
    kitchen = serializers.BooleanField(default=False)
    ac = serializers.BooleanField(default=False)
    tv = serializers.BooleanField(default=False)
    pool = serializers.BooleanField(default=False)


class VillaImageSerializer(serializers.ModelSerializer):
    class Meta:
        model = VillaImage
        fields = ["id", "url", "public_id"]
        read_only_fields = ["id"]


class VillaSerializer(serializers.ModelSerializer):
    owner = serializers.SlugRelatedField(
        slug_field="username",
        queryset=User.objects.all(),
        error_messages={
            "required": "Owner is required",
            "null": "Owner is required",
            "does_not_exist": "Owner {value} does not exist",
        },
    )
    facilities = FacilitiesSerializer(required=False)
    images = VillaImageSerializer(many=True)

    class Meta:
        model = Villa
        fields = [
            "id",
            "name",
            "description",
            "price",
            "capacity",
            "status",
            "owner",
            "facilities",
            "images",  # Nested list of hosted images
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {
            "name": {"error_messages": {"blank": "Villa name is required", "required": "Villa name is required"}},
            "description": {"error_messages": {"blank": "Description is required", "required": "Description is required"}},
            "capacity": {"min_value": 1, "error_messages": {"min_value": "Capacity must be a positive integer"}},
        }

    def validate_price(self, value):
        if value <= Decimal("0"):
            raise serializers.ValidationError("Price must be a positive number")
        return value

    def validate_images(self, images):
        if not images:
            raise serializers.ValidationError("At least one image is required")
        return images

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["facilities"] = {
            flag: bool((instance.facilities or {}).get(flag, False)) for flag in FACILITY_FLAGS
        }
        return data

    @transaction.atomic
    def create(self, validated_data):
        images_data = validated_data.pop("images")
        facilities = {**default_facilities(), **validated_data.pop("facilities", {})}

        villa = Villa.objects.create(facilities=facilities, **validated_data)
        for image in images_data:
            VillaImage.objects.create(villa=villa, **image)

        return villa

    @transaction.atomic
    def update(self, instance, validated_data):
        images_data = validated_data.pop("images", None)
        facilities = validated_data.pop("facilities", None)

        # Update basic fields
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if facilities is not None:
            instance.facilities = {**default_facilities(), **(instance.facilities or {}), **facilities}
        instance.save()

        # The submitted list already merges retained images with new uploads
        if images_data is not None:
            instance.images.all().delete()
            for image in images_data:
                VillaImage.objects.create(villa=instance, **image)

        return instance


class VillaStatusSerializer(serializers.ModelSerializer):
    class Meta:
        model = Villa
        fields = ["status"]
        extra_kwargs = {
            "status": {
                "required": True,
                "error_messages": {
                    "invalid_choice": "Status must be either 'available', 'booked', or 'maintenance'",
                },
            },
        }
