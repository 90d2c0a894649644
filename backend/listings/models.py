from django.db import models

from core.models import SoftDeleteModel


class Listing(SoftDeleteModel):
    """A tour offered by a single guide at a fixed price."""

    guide = models.ForeignKey("accounts.Guide", on_delete=models.CASCADE, related_name="listings")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=200)
    price_cents = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "id"]

    def __str__(self):
        return f"{self.title} @ {self.location}"
