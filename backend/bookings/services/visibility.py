from functools import singledispatch

from django.db.models import Q, QuerySet
from rest_framework.exceptions import PermissionDenied

from accounts.roles import AdminActor, GuideActor, TouristActor


@singledispatch
def visible_bookings(actor, queryset: QuerySet) -> QuerySet:
    raise PermissionDenied("Unknown role.")


@visible_bookings.register
def _(actor: TouristActor, queryset: QuerySet) -> QuerySet:
    return queryset.filter(tourist=actor.tourist)


@visible_bookings.register
def _(actor: GuideActor, queryset: QuerySet) -> QuerySet:
    return queryset.filter(Q(guide=actor.guide) | Q(listing__guide=actor.guide))


@visible_bookings.register
def _(actor: AdminActor, queryset: QuerySet) -> QuerySet:
    return queryset
