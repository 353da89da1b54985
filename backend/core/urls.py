"""
URL configuration for the Gonjong Harau back office.

API routes live under ``/api/`` without trailing slashes; the financial
report lives under ``/report/``. Every route except the login endpoints
sits behind ``users.middleware.RequestGateMiddleware``.
"""

from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

from dashboard.views import HomePageView
from users.views.auth import LoginPageView

urlpatterns = [
    # Pages
    path("", HomePageView.as_view(), name="home"),
    path("login", LoginPageView.as_view(), name="login-page"),
    path("report/", include("reports.urls")),
    # API Documentation
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path(
        "api/docs/",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="swagger-ui",
    ),
    path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    # API
    path("api/", include("users.urls")),
    path("api/", include("villas.urls")),
    path("api/", include("bookings.urls")),
    path("api/dashboard/", include("dashboard.urls")),
]
