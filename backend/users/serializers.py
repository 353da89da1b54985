# users/serializers.py
from django.contrib.auth import authenticate
from django.contrib.auth.models import User
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from drf_spectacular.utils import OpenApiExample, extend_schema_field, extend_schema_serializer
from rest_framework import serializers

from .exceptions import InvalidCredentials
from .models import UserProfile, get_user_role


def check_password_rules(value, user=None):
    """Run Django's password validators and re-raise as a DRF error."""
    try:
        validate_password(value, user)
    except ValidationError as e:
        raise serializers.ValidationError(list(e.messages))
    return value


@extend_schema_serializer(
    examples=[
        OpenApiExample(
            'Login Request',
            value={
                "username": "admin",
                "password": "secret123"
            },
            request_only=True,
        )
    ]
)
class LoginSerializer(serializers.Serializer):
    username = serializers.CharField(error_messages={"required": "Username is required", "blank": "Username is required"})
    password = serializers.CharField(
        trim_whitespace=False,
        write_only=True,
        error_messages={"required": "Password is required", "blank": "Password is required"},
    )

    def validate(self, attrs):
        user = authenticate(
            request=self.context.get("request"),
            username=attrs["username"],
            password=attrs["password"],
        )
        if user is None:
            raise InvalidCredentials()

        attrs["user"] = user
        return attrs


class SessionUserSerializer(serializers.Serializer):
    """The ``{id, username, role}`` body returned by a successful login."""
    id = serializers.IntegerField()
    username = serializers.CharField()
    role = serializers.CharField()


@extend_schema_serializer(
    examples=[
        OpenApiExample(
            'User Response',
            value={
                "id": 1,
                "username": "johndoe",
                "role": "owner",
                "date_joined": "2025-01-01T12:00:00Z",
                "created_by": "admin"
            },
            response_only=True,
        )
    ]
)
class UserSerializer(serializers.ModelSerializer):
    """Public user representation. The password hash is never exposed."""
    role = serializers.SerializerMethodField()
    created_by = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "username", "role", "date_joined", "created_by"]

    @extend_schema_field(serializers.CharField())
    def get_role(self, obj):
        return get_user_role(obj)

    @extend_schema_field(serializers.CharField(allow_null=True))
    def get_created_by(self, obj):
        try:
            profile = obj.profile
            if profile.created_by:
                return profile.created_by.username
        except UserProfile.DoesNotExist:
            pass
        return None


@extend_schema_serializer(
    examples=[
        OpenApiExample(
            'Create User Request',
            value={
                "username": "johndoe",
                "password": "secure123",
                "role": "staff"
            },
            request_only=True,
        )
    ]
)
class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    role = serializers.ChoiceField(
        choices=UserProfile.Role.choices,
        error_messages={"invalid_choice": "Role must be either 'admin', 'staff' or 'owner'"},
    )

    class Meta:
        model = User
        fields = ["username", "password", "role"]

    def validate_password(self, value):
        return check_password_rules(value)

    def create(self, validated_data):
        role = validated_data.pop("role")
        request = self.context.get("request")
        creator = request.user if request and request.user.is_authenticated else None

        user = User.objects.create_user(
            username=validated_data["username"],
            password=validated_data["password"],
        )
        UserProfile.objects.create(user=user, role=role, created_by=creator)
        return user


class UserUpdateSerializer(serializers.ModelSerializer):
    """Profile edit: username and role. Passwords go through ChangePasswordSerializer."""
    role = serializers.ChoiceField(choices=UserProfile.Role.choices, required=False)

    class Meta:
        model = User
        fields = ["username", "role"]
        extra_kwargs = {"username": {"required": False}}

    def update(self, instance, validated_data):
        role = validated_data.pop("role", None)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()

        if role is not None:
            profile, _ = UserProfile.objects.get_or_create(user=instance)
            profile.role = role
            profile.save(update_fields=["role", "updated_at"])

        return instance


class ChangePasswordSerializer(serializers.Serializer):
    """Serializer for changing a user's password"""
    password = serializers.CharField(
        write_only=True,
        trim_whitespace=False,
        error_messages={"required": "New password is required", "blank": "New password is required"},
    )

    def validate_password(self, value):
        return check_password_rules(value, self.context.get("user"))

    def save(self):
        user = self.context["user"]
        user.set_password(self.validated_data["password"])
        user.save(update_fields=["password"])
        return user
