# accounts/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User
from django.utils.html import format_html

from .models import Community, UserProfile


# =============================================================================
# COMMUNITY ADMIN
# =============================================================================

@admin.register(Community)
class CommunityAdmin(admin.ModelAdmin):
    list_display = [
        'name',
        'slug',
        'owner',
        'tier_settings',
        'currency',
        'subscription_badge',
        'roster_size',
        'created_at',
    ]
    list_filter = ['subscription_status', 'plan_id', 'country']
    search_fields = ['name', 'slug', 'owner__email']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['owner']

    fieldsets = (
        ('Community', {
            'fields': ('name', 'slug', 'owner', 'country', 'timezone')
        }),
        ('Tiers & Currency', {
            'fields': ('tier1_age', 'tier2_age', 'currency', 'currency_code')
        }),
        ('Subscription', {
            'fields': ('subscription_status', 'plan_id')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def tier_settings(self, obj):
        return f"{obj.tier1_age} / {obj.tier2_age}"
    tier_settings.short_description = 'Tier Ages'

    def subscription_badge(self, obj):
        color = 'green' if obj.subscription_status in ('active', 'trialing') else 'red'
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.get_subscription_status_display()
        )
    subscription_badge.short_description = 'Subscription'

    def roster_size(self, obj):
        return format_html('<span style="font-weight: bold;">{}</span>', obj.active_members_count)
    roster_size.short_description = 'Active Members'


# =============================================================================
# USER ADMIN WITH PROFILE INLINE
# =============================================================================

class UserProfileInline(admin.StackedInline):
    model = UserProfile
    can_delete = False
    verbose_name = 'Profile'
    verbose_name_plural = 'Profile'
    fk_name = 'user'

    fieldsets = (
        ('Profile', {
            'fields': ('display_name', 'photo', 'primary_community')
        }),
        ('Security', {
            'fields': ('failed_login_attempts', 'account_locked_until', 'last_login_at', 'last_activity'),
            'classes': ('collapse',)
        }),
    )
    readonly_fields = ['last_login_at', 'last_activity']


class CustomUserAdmin(BaseUserAdmin):
    inlines = [UserProfileInline]

    list_display = [
        'username',
        'email',
        'full_name',
        'communities_count',
        'is_active',
        'is_staff',
        'date_joined'
    ]

    def full_name(self, obj):
        return obj.get_full_name() or '-'
    full_name.short_description = 'Name'

    def communities_count(self, obj):
        profile = getattr(obj, 'profile', None)
        return profile.memberships.count() if profile else 0
    communities_count.short_description = 'Communities'


admin.site.unregister(User)
admin.site.register(User, CustomUserAdmin)
