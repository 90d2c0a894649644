"""
Resolve an authenticated user into the role variant the booking code works with.

Resolution happens once per request at the view boundary; everything below it
receives a concrete actor and never looks at `User.role` again.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from rest_framework.exceptions import PermissionDenied

from .models import Guide, Tourist, User


@dataclass(frozen=True)
class TouristActor:
    user: User
    tourist: Tourist


@dataclass(frozen=True)
class GuideActor:
    user: User
    guide: Guide


@dataclass(frozen=True)
class AdminActor:
    user: User


Actor = Union[TouristActor, GuideActor, AdminActor]

ADMIN_ROLES = {User.SUPER_ADMIN, User.ADMIN}


def resolve_actor(user: User) -> Actor:
    if user.is_superuser or user.role in ADMIN_ROLES:
        return AdminActor(user=user)

    if user.role == User.TOURIST:
        tourist = Tourist.objects.filter(user=user).first()
        if tourist is None:
            raise PermissionDenied("Tourist profile not found or is unavailable.")
        return TouristActor(user=user, tourist=tourist)

    if user.role == User.GUIDE:
        guide = Guide.objects.filter(user=user).first()
        if guide is None:
            raise PermissionDenied("Guide profile not found or is unavailable.")
        return GuideActor(user=user, guide=guide)

    raise PermissionDenied("Unknown role.")


class ActorMixin:
    """Attach `self.actor` to a DRF view once authentication has run."""

    actor: Actor

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.actor = resolve_actor(request.user)
