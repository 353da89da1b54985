from django.contrib.auth.models import User
from django.db import models


class UserProfile(models.Model):
    class Role(models.TextChoices):
        ADMIN = "admin", "Admin"
        STAFF = "staff", "Staff"
        OWNER = "owner", "Owner"

    # Role carried in the session identity when the profile has none
    DEFAULT_ROLE = "user"

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        blank=True,
        default="",
        help_text="Access role: admin, staff or owner"
    )
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_users',
        help_text="Admin who created this account"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'user_profiles'

    def __str__(self):
        return f"{self.user.username} - {self.role or self.DEFAULT_ROLE}"


def get_user_role(user):
    """Return the user's role, falling back to ``user`` when no role is stored."""
    try:
        return user.profile.role or UserProfile.DEFAULT_ROLE
    except UserProfile.DoesNotExist:
        return UserProfile.DEFAULT_ROLE
