# utils/templatetags/custom_filters.py

import calendar

from django import template

register = template.Library()


@register.filter
def money(value, currency=None):
    """
    Usage:
        {{ member.contribution|money:community.currency }}
    """
    from core.utils import format_money
    return format_money(value, currency)


@register.filter
def percent_of(value, total):
    """{{ paid|percent_of:expected }} -> whole-number percentage, 0 when total is 0"""
    try:
        total = float(total)
        return round(float(value) / total * 100) if total else 0
    except (TypeError, ValueError):
        return 0


@register.filter
def month_name(value):
    """1 -> 'January'; blank for anything outside 1-12"""
    try:
        value = int(value)
    except (TypeError, ValueError):
        return ''
    return calendar.month_name[value] if 1 <= value <= 12 else ''

