from django.contrib import admin

from core.admin import SoftDeleteAdmin
from .models import Listing


@admin.register(Listing)
class ListingAdmin(SoftDeleteAdmin):
    list_display = ("title", "guide", "location", "price_cents", "is_deleted")
    list_filter = ("is_deleted",)
    search_fields = ("title", "location", "guide__name")
