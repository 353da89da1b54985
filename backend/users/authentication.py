from django.contrib.auth.models import User
from rest_framework import authentication, exceptions


class GateIdentityAuthentication(authentication.BaseAuthentication):
    """
    DRF authentication backed by the request gate.

    The gate has already verified the session cookie; this resolves the
    attached ``Identity`` to its ``User`` row so DRF permissions work, and
    exposes the identity itself as ``request.auth``.
    """

    def authenticate(self, request):
        identity = getattr(request._request, "identity", None)
        if identity is None:
            return None

        user = User.objects.select_related("profile").filter(pk=identity.id).first()
        if user is None or not user.is_active:
            raise exceptions.AuthenticationFailed("User account no longer exists or is inactive")

        return (user, identity)

    def authenticate_header(self, request):
        return 'Cookie realm="api"'
