from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import BookingViewSet

router = SimpleRouter(trailing_slash=False)
router.register(r"bookings", BookingViewSet, basename="booking")

urlpatterns = [
    path("", include(router.urls)),
]
