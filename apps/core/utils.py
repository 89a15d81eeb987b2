# core/utils.py

"""
Central utilities shared by the community apps: money formatting,
community-local dates, pagination and the HTMX/SweetAlert response helpers.
"""
from django.conf import settings
from django.core.paginator import Paginator
from django.http import HttpResponse
from django.utils import timezone
from decimal import Decimal, InvalidOperation
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# CURRENCY & MONEY FORMATTING
# =============================================================================

def format_money(amount, currency=None):
    """
    Format an amount with the community currency symbol.

    Args:
        amount: Decimal or numeric value to format
        currency: Currency symbol; falls back to the configured default

    Returns:
        str: e.g. '₦1,500.00'
    """
    symbol = settings.COMMUNITY_DEFAULTS['currency'] if currency is None else currency
    try:
        amount_decimal = Decimal(str(amount if amount is not None else 0))
    except (InvalidOperation, ValueError, TypeError):
        amount_decimal = Decimal('0')

    sign = '-' if amount_decimal < 0 else ''
    return f"{sign}{symbol}{abs(amount_decimal):,.2f}"


# =============================================================================
# TIMEZONE UTILITY FUNCTIONS
# =============================================================================

def get_community_timezone(community=None):
    """The community's operational timezone (UTC when unknown)"""
    name = getattr(community, 'timezone', None) or 'UTC'
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone '{name}' for community {community}; using UTC")
        return ZoneInfo('UTC')


def get_community_today(community=None):
    """
    Today's date in the community's timezone.

    Ages and elapsed months depend on the calendar date where the community
    lives, not on the server's UTC date.
    """
    return timezone.now().astimezone(get_community_timezone(community)).date()


# =============================================================================
# PAGINATION & FILTERING
# =============================================================================

def paginate_queryset(request, queryset, per_page=20):
    """
    (page_obj, paginator) for ?page=N. Junk or out-of-range page numbers
    land on the first or last page instead of raising.
    """
    paginator = Paginator(queryset, per_page)
    return paginator.get_page(request.GET.get('page')), paginator


def parse_filters(request, filter_keys):
    """{key: stripped value or None} for each key in request.GET"""
    return {key: request.GET.get(key, '').strip() or None for key in filter_keys}


# =============================================================================
# HTMX MODAL RESPONSES WITH SWEETALERT2
# =============================================================================
#
# static/js/htmx-modal.js reads these headers after every modal request:
#   HX-Alert-Message / HX-Alert-Type / HX-Alert-Title  SweetAlert toast
#   HX-Close-Modal: 'true'                              hide the modal
#   HX-Trigger: 'communityChanged'                      lists reload themselves

def _with_alert(response, message, alert_type, title=None, close_modal=True):
    if message:
        response['HX-Alert-Message'] = message
        response['HX-Alert-Type'] = alert_type
        if title:
            response['HX-Alert-Title'] = title
    if close_modal:
        response['HX-Close-Modal'] = 'true'
    return response


def create_success_response(html_content, message, title='Success'):
    return _with_alert(HttpResponse(html_content), message, 'success', title)


def create_error_response(message, title='Error', close_modal=True):
    """Error toast; pass close_modal=False to leave the form up for correction"""
    return _with_alert(HttpResponse(''), message, 'error', title, close_modal)


def create_redirect_response(redirect_url, message='', alert_type='success', title=None):
    """Navigate away (e.g. after deleting the row a detail page shows) and toast on arrival"""
    response = HttpResponse('')
    response['HX-Redirect'] = redirect_url
    return _with_alert(response, message, alert_type, title)


def create_result_response(result, html_content='', success_title='Success', error_title='Error'):
    """
    Map a members.services.ServiceResult onto the modal protocol. Failures
    keep the modal open; successes broadcast communityChanged.
    """
    if not result.success:
        return create_error_response(result.message, title=error_title, close_modal=False)

    response = create_success_response(html_content, result.message, title=success_title)
    response['HX-Trigger'] = 'communityChanged'
    return response
