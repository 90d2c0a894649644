from django.contrib.auth.models import AbstractUser
from django.db import models

from core.models import SoftDeleteModel


class User(AbstractUser):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    GUIDE = "GUIDE"
    TOURIST = "TOURIST"
    ROLES = [
        (SUPER_ADMIN, "Super admin"),
        (ADMIN, "Admin"),
        (GUIDE, "Guide"),
        (TOURIST, "Tourist"),
    ]

    display_name = models.CharField(max_length=120, blank=True)
    role = models.CharField(max_length=20, choices=ROLES, default=TOURIST)


class Tourist(SoftDeleteModel):
    user = models.OneToOneField("User", on_delete=models.CASCADE, related_name="tourist")
    name = models.CharField(max_length=200)
    email = models.EmailField(unique=True)
    profile_photo = models.URLField(blank=True)
    contact_number = models.CharField(max_length=30, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name", "id"]

    def __str__(self):
        return self.name or self.email


class Guide(SoftDeleteModel):
    user = models.OneToOneField("User", on_delete=models.CASCADE, related_name="guide")
    name = models.CharField(max_length=200)
    email = models.EmailField(unique=True)
    profile_photo = models.URLField(blank=True)
    fee_cents = models.PositiveIntegerField(default=0)
    is_available = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name", "id"]

    def __str__(self):
        return self.name or self.email
