from django.contrib import admin


@admin.action(description="Soft delete selected rows")
def soft_delete_selected(modeladmin, request, queryset):
    for obj in queryset:
        obj.soft_delete()


@admin.action(description="Restore selected rows")
def restore_selected(modeladmin, request, queryset):
    for obj in queryset:
        obj.restore()


class SoftDeleteAdmin(admin.ModelAdmin):
    """Admin that shows soft-deleted rows and offers mark/restore actions."""

    actions = [soft_delete_selected, restore_selected]

    def get_queryset(self, request):
        return self.model.all_objects.all()
