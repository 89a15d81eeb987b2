# members/admin.py

from django.contrib import admin
from django.utils.html import format_html

from .models import Family, Member, Payment


# =============================================================================
# FAMILY ADMIN
# =============================================================================

@admin.register(Family)
class FamilyAdmin(admin.ModelAdmin):
    list_display = ['name', 'community', 'member_count', 'created_at']
    list_filter = ['community']
    search_fields = ['name', 'community__name']
    readonly_fields = ['created_at', 'updated_at']


# =============================================================================
# MEMBER ADMIN
# =============================================================================

class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    fields = ['contribution', 'amount', 'date', 'month']
    raw_id_fields = ['contribution']


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    list_display = [
        'name',
        'community',
        'family',
        'tier',
        'contribution',
        'role',
        'status_badge',
        'join_date',
    ]
    list_filter = ['status', 'role', 'gender', 'is_patriarch', 'community']
    search_fields = ['name', 'email', 'phone', 'family__name']
    readonly_fields = ['name', 'created_at', 'updated_at']
    raw_id_fields = ['community', 'family', 'user']
    inlines = [PaymentInline]

    fieldsets = (
        ('Personal Information', {
            'fields': ('community', 'first_name', 'middle_name', 'last_name', 'name', 'year_of_birth', 'gender')
        }),
        ('Family', {
            'fields': ('family', 'is_patriarch')
        }),
        ('Contact', {
            'fields': ('email', 'phone_country_code', 'phone')
        }),
        ('Dues', {
            'fields': ('tier', 'contribution')
        }),
        ('Membership', {
            'fields': ('join_date', 'role', 'status', 'user')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def status_badge(self, obj):
        color = 'green' if obj.status == 'active' else 'orange'
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'


# =============================================================================
# PAYMENT ADMIN
# =============================================================================

@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['member', 'contribution_name', 'amount', 'date', 'month']
    list_filter = ['date', 'member__community']
    search_fields = ['member__name', 'contribution__name']
    raw_id_fields = ['member', 'contribution']
    date_hierarchy = 'date'
