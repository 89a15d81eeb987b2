# invitations/admin.py

from django.contrib import admin
from django.utils.html import format_html

from .models import Invitation


@admin.register(Invitation)
class InvitationAdmin(admin.ModelAdmin):
    list_display = [
        'email',
        'community_name',
        'role',
        'status_badge',
        'inviter_name',
        'expires_at',
        'created_at',
    ]
    list_filter = ['status', 'role', 'created_at']
    search_fields = ['email', 'first_name', 'last_name', 'community_name', 'token']
    readonly_fields = ['token', 'code', 'replaced_by', 'accepted_by', 'accepted_at', 'created_at', 'updated_at']
    raw_id_fields = ['community', 'member', 'inviter']

    fieldsets = (
        ('Invitee', {
            'fields': ('email', 'first_name', 'last_name', 'role')
        }),
        ('Community', {
            'fields': ('community', 'community_name', 'member')
        }),
        ('Status', {
            'fields': ('status', 'expires_at', 'replaced_by', 'accepted_by', 'accepted_at')
        }),
        ('Sender', {
            'fields': ('inviter', 'inviter_name')
        }),
        ('Secrets', {
            'fields': ('token', 'code'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def status_badge(self, obj):
        colors = {
            'pending': 'orange',
            'accepted': 'green',
            'revoked': 'gray',
            'expired': 'red',
        }
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            colors.get(obj.status, 'black'),
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'
