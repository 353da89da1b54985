# users/views/auth.py
import logging

from django.conf import settings
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views import View
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import permissions, serializers, status
from rest_framework.views import APIView

from core.responses import envelope
from users.exceptions import InvalidCredentials
from users.identity import Identity
from users.serializers import LoginSerializer, SessionUserSerializer
from users.tokens import clear_session_cookie, issue_session_token, set_session_cookie

logger = logging.getLogger(__name__)


class LoginView(APIView):
    """
    User login with username and password.
    Sets the session cookie and returns ``{id, username, role}``.
    """
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        tags=["Authentication"],
        summary="User login",
        description="Login with username and password. The session is returned as an HTTP-only cookie.",
        request=LoginSerializer,
        responses={
            200: SessionUserSerializer,
            400: OpenApiResponse(description="Missing username or password"),
            401: OpenApiResponse(description="Invalid credentials"),
        },
    )
    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data, context={"request": request})
        try:
            serializer.is_valid(raise_exception=True)
        except (serializers.ValidationError, InvalidCredentials):
            logger.info(f"Login failed for username={request.data.get('username')!r}")
            raise

        user = serializer.validated_data["user"]
        identity = Identity.from_user(user)
        logger.info(f"Login successful for {identity.username} ({identity.role})")

        response = envelope(
            status.HTTP_200_OK,
            message="Login successful",
            data=SessionUserSerializer(identity).data,
        )
        return set_session_cookie(response, issue_session_token(user))


class LogoutView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        tags=["Authentication"],
        summary="User logout",
        description="Clear the session cookie",
        request=None,
        responses={200: OpenApiResponse(description="Logout successful")},
    )
    def post(self, request):
        logger.info(f"Logout for {request.user.username}")
        response = envelope(status.HTTP_200_OK, message="Logged out successfully")
        return clear_session_cookie(response)


class LoginPageView(View):
    """
    Server-rendered login form. After a successful login the browser goes
    back to ``callbackUrl`` when it is a local URL.
    """
    template_name = "users/login.html"

    def get_callback_url(self, request):
        callback_url = request.POST.get("callbackUrl") or request.GET.get("callbackUrl")
        if callback_url and url_has_allowed_host_and_scheme(
            callback_url, allowed_hosts={request.get_host()}, require_https=request.is_secure()
        ):
            return callback_url
        return settings.HOME_URL

    def get(self, request):
        return render(request, self.template_name, {
            "callback_url": self.get_callback_url(request),
            "error": request.GET.get("error"),
        })

    def post(self, request):
        serializer = LoginSerializer(data=request.POST, context={"request": request})
        try:
            serializer.is_valid(raise_exception=True)
        except (serializers.ValidationError, InvalidCredentials):
            logger.info(f"Login page: failed login for username={request.POST.get('username')!r}")
            return render(request, self.template_name, {
                "callback_url": self.get_callback_url(request),
                "error": "Invalid username or password",
                "username": request.POST.get("username", ""),
            }, status=status.HTTP_401_UNAUTHORIZED)

        user = serializer.validated_data["user"]
        logger.info(f"Login page: login successful for {user.username}")
        response = redirect(self.get_callback_url(request))
        return set_session_cookie(response, issue_session_token(user))
