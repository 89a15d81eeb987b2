from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'action', 'content_type', 'object_repr', 'user_name', 'ip_address')
    list_filter = ('action', 'content_type')
    search_fields = ('object_repr', 'object_id', 'user_name', 'user_email', 'change_reason')
    readonly_fields = [f.name for f in AuditLog._meta.fields] + ['changes_summary']

    @admin.display(description='Field changes')
    def changes_summary(self, obj):
        return obj.get_changes_display()

    def has_add_permission(self, request):
        return False
