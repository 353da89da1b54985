import logging

from django.contrib.auth.models import User
from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import generics, permissions, status
from rest_framework.exceptions import PermissionDenied

from core.responses import envelope
from ..permissions import IsAdminRole, get_request_identity
from ..serializers import (
    ChangePasswordSerializer, UserCreateSerializer, UserSerializer, UserUpdateSerializer,
)

logger = logging.getLogger(__name__)


class UserListCreateView(generics.GenericAPIView):
    """
    GET  → list all users (any authenticated role)
    POST → create a user (admin only)
    """
    queryset = User.objects.select_related("profile", "profile__created_by").order_by("username")
    serializer_class = UserSerializer

    def get_permissions(self):
        if self.request.method == "POST":
            return [permissions.IsAuthenticated(), IsAdminRole()]
        return [permissions.IsAuthenticated()]

    @extend_schema(
        operation_id='list_users',
        summary="Get All Users",
        parameters=[
            OpenApiParameter(
                name='search',
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                description='Search in username'
            ),
        ],
        responses={200: UserSerializer(many=True)},
        tags=['User Management']
    )
    def get(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(username__icontains=search)

        return envelope(
            status.HTTP_200_OK,
            message="Users retrieved successfully",
            data=UserSerializer(queryset, many=True).data,
        )

    @extend_schema(
        operation_id='create_user',
        summary="Create User",
        description="Admins create accounts for admin, staff and owner roles.",
        request=UserCreateSerializer,
        responses={
            201: UserSerializer,
            400: OpenApiResponse(description="Validation errors"),
            403: OpenApiResponse(description="Admin role required"),
        },
        tags=['User Management']
    )
    def post(self, request, *args, **kwargs):
        serializer = UserCreateSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info(f"User {user.username} created by {request.user.username}")
        return envelope(
            status.HTTP_201_CREATED,
            message="User created successfully",
            data=UserSerializer(user).data,
        )


class UserDetailView(generics.GenericAPIView):
    """
    GET    → user details
    PUT    → edit username (own account, any account as admin) / role (admin only)
    PATCH  → change password (own account, any account as admin)
    DELETE → remove the user (admin only)
    """
    queryset = User.objects.select_related("profile", "profile__created_by")
    serializer_class = UserSerializer
    lookup_field = 'id'

    def get_permissions(self):
        if self.request.method == "DELETE":
            return [permissions.IsAuthenticated(), IsAdminRole()]
        return [permissions.IsAuthenticated()]

    def get_user(self):
        return get_object_or_404(self.get_queryset(), id=self.kwargs["id"])

    def check_can_edit(self, user, message):
        identity = get_request_identity(self.request)
        if not identity.is_admin and identity.id != user.id:
            raise PermissionDenied(message)
        return identity

    @extend_schema(
        operation_id='retrieve_user',
        summary="Get User Details",
        responses={200: UserSerializer, 404: OpenApiResponse(description="User not found")},
        tags=['User Management']
    )
    def get(self, request, *args, **kwargs):
        user = self.get_user()
        return envelope(
            status.HTTP_200_OK,
            message="User details retrieved successfully",
            data=UserSerializer(user).data,
        )

    @extend_schema(
        operation_id='update_user',
        summary="Update User",
        request=UserUpdateSerializer,
        responses={
            200: UserSerializer,
            403: OpenApiResponse(description="Admin role required"),
            404: OpenApiResponse(description="User not found"),
        },
        tags=['User Management']
    )
    def put(self, request, *args, **kwargs):
        user = self.get_user()
        identity = self.check_can_edit(user, "You can only edit your own account")
        if "role" in request.data and not identity.is_admin:
            raise PermissionDenied("Only admins can change roles")

        serializer = UserUpdateSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info(f"User {user.id} updated by {request.user.username}")
        return envelope(
            status.HTTP_200_OK,
            message="User updated successfully",
            data=UserSerializer(user).data,
        )

    @extend_schema(
        operation_id='change_user_password',
        summary="Change User Password",
        request=ChangePasswordSerializer,
        responses={
            200: OpenApiTypes.OBJECT,
            400: OpenApiResponse(description="Password missing or too short"),
            403: OpenApiResponse(description="Admin role required"),
            404: OpenApiResponse(description="User not found"),
        },
        tags=['User Management']
    )
    def patch(self, request, *args, **kwargs):
        user = self.get_user()
        self.check_can_edit(user, "Only admins can change another user's password")

        serializer = ChangePasswordSerializer(data=request.data, context={"user": user})
        serializer.is_valid(raise_exception=True)
        serializer.save()

        logger.info(f"Password changed for user {user.id} by {request.user.username}")
        return envelope(
            status.HTTP_200_OK,
            message="Password updated successfully",
            data={"success": True},
        )

    @extend_schema(
        operation_id='delete_user',
        summary="Delete User",
        responses={
            200: OpenApiTypes.OBJECT,
            403: OpenApiResponse(description="Admin role required"),
            404: OpenApiResponse(description="User not found"),
        },
        tags=['User Management']
    )
    def delete(self, request, *args, **kwargs):
        user = self.get_user()
        user_id = user.id
        user.delete()

        logger.info(f"User {user_id} deleted by {request.user.username}")
        return envelope(
            status.HTTP_200_OK,
            message="User deleted successfully",
            data={"id": user_id},
        )
