from rest_framework.permissions import BasePermission

from .models import User


class HasRole(BasePermission):
    """
    Allow access only to users whose role is in `allowed_roles`.
    Superusers automatically pass.
    """

    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.user.is_superuser:
            return True
        return request.user.role in self.allowed_roles


class IsTourist(HasRole):
    allowed_roles = {User.TOURIST}


class IsBookingManager(HasRole):
    allowed_roles = {User.SUPER_ADMIN, User.ADMIN, User.GUIDE}


class IsAdministrator(HasRole):
    allowed_roles = {User.SUPER_ADMIN, User.ADMIN}
