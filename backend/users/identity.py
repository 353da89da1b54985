from dataclasses import dataclass

from .models import UserProfile, get_user_role


@dataclass(frozen=True)
class Identity:
    """
    The caller of a request as asserted by its session token.

    The request gate builds one per authenticated request and attaches it to
    the request; services take it as an explicit argument.
    """
    id: int
    username: str
    role: str = UserProfile.DEFAULT_ROLE

    @classmethod
    def from_user(cls, user):
        return cls(id=user.pk, username=user.username, role=get_user_role(user))

    @property
    def is_admin(self):
        return self.role == UserProfile.Role.ADMIN

    @property
    def is_owner(self):
        return self.role == UserProfile.Role.OWNER

    def has_role(self, *roles):
        return self.role in roles
