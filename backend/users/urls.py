# users/urls.py
from django.urls import path

from .views.auth import LoginView, LogoutView
from .views.users import UserDetailView, UserListCreateView

urlpatterns = [
    # Authentication endpoints
    path("login", LoginView.as_view(), name="login"),
    path("logout", LogoutView.as_view(), name="logout"),

    # User management endpoints
    path("users", UserListCreateView.as_view(), name="user-list"),
    path("users/<int:id>", UserDetailView.as_view(), name="user-detail"),
]
