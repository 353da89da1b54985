from django.conf import settings
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import Token

from .identity import Identity
from .models import UserProfile, get_user_role


class SessionToken(Token):
    """Signed session credential carried in the HTTP-only session cookie."""
    token_type = "session"
    lifetime = settings.SESSION_TOKEN_LIFETIME

    @classmethod
    def for_user(cls, user):
        token = super().for_user(user)
        token["username"] = user.username
        token["role"] = get_user_role(user)
        return token

    def to_identity(self):
        return Identity(
            id=int(self[api_settings.USER_ID_CLAIM]),
            username=self["username"],
            role=self.get("role") or UserProfile.DEFAULT_ROLE,
        )


def issue_session_token(user):
    return str(SessionToken.for_user(user))


def read_session_token(raw_token):
    """
    Decode and verify a session token string.

    Raises ``TokenError`` when the token is malformed, tampered with or expired,
    and ``KeyError``/``ValueError`` when the identity claims are missing.
    """
    return SessionToken(raw_token).to_identity()


def set_session_cookie(response, token):
    response.set_cookie(
        settings.SESSION_COOKIE_NAME_GATE,
        token,
        max_age=int(settings.SESSION_TOKEN_LIFETIME.total_seconds()),
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="Strict",
    )
    return response


def clear_session_cookie(response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME_GATE, samesite="Strict")
    return response
