# audit/admin.py

from django.contrib import admin

from audit.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("timestamp", "store", "action", "actor_name")
    list_filter = ("action", "store")
    search_fields = ("action", "details", "actor_name")
    readonly_fields = ("id", "store", "timestamp", "actor_id", "actor_name", "action", "details")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
