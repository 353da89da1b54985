import logging
from urllib.parse import urlencode

from django.conf import settings
from django.http import HttpResponseRedirect, JsonResponse
from rest_framework_simplejwt.exceptions import TokenError

from .tokens import read_session_token

logger = logging.getLogger(__name__)


class RequestGateMiddleware:
    """
    Authenticate every request before it reaches a view.

    - Static assets and public paths (login, registration, auth endpoints)
      pass through untouched.
    - Protected API paths without a valid session answer 401 JSON; protected
      pages redirect to the login page with a ``callbackUrl``.
    - With a valid session the caller's ``Identity`` is attached as
      ``request.identity``.
    - Role restricted path groups (``/report``) redirect other roles home.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path_info

        if self.is_static_path(path) or self.is_public_path(path):
            return self.get_response(request)

        identity = self.get_identity(request)
        if identity is None:
            return self.reject(request)

        request.identity = identity

        allowed_roles = self.get_allowed_roles(path)
        if allowed_roles is not None and identity.role not in allowed_roles:
            logger.info(
                "Role %s denied for %s (user %s), redirecting home",
                identity.role, path, identity.username,
            )
            return HttpResponseRedirect(settings.HOME_URL)

        return self.get_response(request)

    @staticmethod
    def matches(path, prefix):
        return path == prefix or path.startswith(prefix.rstrip("/") + "/")

    def is_public_path(self, path):
        return any(self.matches(path, public) for public in settings.GATE_PUBLIC_PATHS)

    def is_static_path(self, path):
        return any(path.startswith(static) for static in settings.GATE_STATIC_PATHS)

    def is_api_path(self, path):
        return path.startswith("/api/")

    def get_allowed_roles(self, path):
        for prefix, roles in settings.GATE_ROLE_RESTRICTED_PATHS.items():
            if self.matches(path, prefix):
                return roles
        return None

    def get_identity(self, request):
        """Decode the session cookie; any failure counts as no session."""
        raw_token = request.COOKIES.get(settings.SESSION_COOKIE_NAME_GATE)
        if not raw_token:
            return None

        try:
            return read_session_token(raw_token)
        except TokenError as e:
            logger.warning(f"Rejected session token on {request.path_info}: {e}")
        except Exception:
            logger.exception(f"Session token validation failed on {request.path_info}")
        return None

    def reject(self, request):
        path = request.path_info
        logger.debug(f"Unauthenticated request to {path}")

        if self.is_api_path(path):
            return JsonResponse(
                {"error": "Unauthorized", "message": "Authentication required"},
                status=401,
            )

        query = urlencode({"callbackUrl": request.get_full_path()})
        return HttpResponseRedirect(f"{settings.LOGIN_URL}?{query}")
