# contributions/admin.py

from django.contrib import admin

from .models import CustomContribution


@admin.register(CustomContribution)
class CustomContributionAdmin(admin.ModelAdmin):
    list_display = ['name', 'community', 'amount', 'frequency', 'tier_list', 'created_at']
    list_filter = ['frequency', 'community']
    search_fields = ['name', 'description', 'community__name']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['community']

    def tier_list(self, obj):
        return ', '.join(obj.tiers or []) or '-'
    tier_list.short_description = 'Tiers'
