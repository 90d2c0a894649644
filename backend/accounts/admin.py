from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from core.admin import SoftDeleteAdmin
from .models import Guide, Tourist, User


@admin.register(User)
class AccountUserAdmin(UserAdmin):
    list_display = ("email", "display_name", "role", "is_staff")
    list_filter = ("role", "is_staff", "is_superuser")
    fieldsets = UserAdmin.fieldsets + (("Role", {"fields": ("display_name", "role")}),)


@admin.register(Tourist)
class TouristAdmin(SoftDeleteAdmin):
    list_display = ("name", "email", "is_deleted", "updated_at")
    search_fields = ("name", "email")


@admin.register(Guide)
class GuideAdmin(SoftDeleteAdmin):
    list_display = ("name", "email", "fee_cents", "is_available", "is_deleted")
    list_filter = ("is_available", "is_deleted")
    search_fields = ("name", "email")
