# accounts/views.py

from django.shortcuts import render, redirect
from django.contrib.auth import login, logout, authenticate, update_session_auth_hash
from django.contrib.auth.decorators import login_required
from django.contrib.auth.models import User
from django.contrib import messages
from django.http import JsonResponse
from django.utils import timezone
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_POST, require_GET
import logging

from .models import UserProfile
from .forms import LoginForm, SignUpForm, ProfileForm, ChangePasswordForm, DeleteAccountForm
from .tokens import issue_api_token

logger = logging.getLogger(__name__)


def _safe_next_url(request):
    next_url = request.POST.get('next') or request.GET.get('next')
    if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        return next_url
    return None


def _failed_login_message(email):
    """Specific reason a sign-in failed, without revealing unknown accounts"""
    user = User.objects.filter(email__iexact=email).select_related('profile').first()
    if user is None:
        return "Invalid email or password."
    if not user.is_active:
        return "Your account has been disabled. Please contact support."
    profile = getattr(user, 'profile', None)
    if profile and profile.account_locked_until and profile.account_locked_until > timezone.now():
        return (
            "Your account has been locked due to multiple failed sign-in attempts. "
            "Please try again later."
        )
    return "Invalid email or password."


# =============================================================================
# AUTHENTICATION VIEWS
# =============================================================================

@never_cache
def login_view(request):
    """Handle user sign-in"""

    if request.user.is_authenticated:
        return redirect(_safe_next_url(request) or 'core:home')

    form = LoginForm(request, data=request.POST or None)

    if request.method == 'POST':
        # Run the backend directly so the failure reason can be reported
        email = request.POST.get('username', '').strip()
        password = request.POST.get('password', '')
        user = authenticate(request, username=email, password=password) if email and password else None

        if user is not None:
            login(request, user)

            if not request.POST.get('remember_me'):
                request.session.set_expiry(0)
            else:
                request.session.set_expiry(1209600)

            logger.info(f"User {user.email} signed in")
            return redirect(_safe_next_url(request) or 'core:home')

        if email and password:
            messages.error(request, _failed_login_message(email))
            logger.warning(f"Failed sign-in for: {email}")
        else:
            messages.error(request, "Please enter your email and password.")

    return render(request, 'accounts/login.html', {'form': form, 'next': _safe_next_url(request)})


def logout_view(request):
    """Handle user sign-out"""
    user_email = request.user.email if request.user.is_authenticated else 'Unknown'
    logout(request)
    messages.success(request, "You have been signed out.")
    logger.info(f"User {user_email} signed out")
    return redirect('accounts:login')


@never_cache
def signup_view(request):
    """Create an account, sign in and continue to community creation (or `next`)"""

    if request.user.is_authenticated:
        return redirect('core:home')

    if request.method == 'POST':
        form = SignUpForm(request.POST)

        if form.is_valid():
            user = form.save()
            login(request, user, backend='accounts.backends.EmailAuthBackend')
            logger.info(f"New user registered: {user.email}")
            messages.success(request, "Your account has been created.")
            return redirect(_safe_next_url(request) or 'core:create_community')
        messages.error(request, "Please correct the errors below.")
    else:
        form = SignUpForm(initial={'email': request.GET.get('email', '')})

    return render(request, 'accounts/signup.html', {'form': form, 'next': _safe_next_url(request)})


# =============================================================================
# PROFILE & SECURITY VIEWS
# =============================================================================

@login_required
def profile_view(request):
    """Display name, primary community and avatar"""

    user_profile, _ = UserProfile.objects.get_or_create(user=request.user)

    if request.method == 'POST':
        form = ProfileForm(request.POST, instance=user_profile)

        if form.is_valid():
            form.save()
            messages.success(request, 'Your profile has been updated.')
            logger.info(f"Profile updated for user: {request.user.email}")
            return redirect('accounts:profile')
        messages.error(request, 'Please correct the errors below.')
    else:
        form = ProfileForm(instance=user_profile)

    context = {
        'form': form,
        'password_form': ChangePasswordForm(request.user),
        'delete_form': DeleteAccountForm(),
        'user_profile': user_profile,
        'api_token': issue_api_token(request.user),
    }

    return render(request, 'accounts/profile.html', context)


@login_required
@require_POST
def change_password(request):
    form = ChangePasswordForm(request.user, request.POST)

    if form.is_valid():
        user = form.save()
        update_session_auth_hash(request, user)
        messages.success(request, 'Your password has been changed successfully.')
        logger.info(f"Password changed for user: {request.user.email}")
    else:
        for errors in form.errors.values():
            for error in errors:
                messages.error(request, error)

    return redirect('accounts:profile')


@login_required
@require_POST
def delete_account(request):
    """Delete the user, profile and avatar. Owners must hand over their communities first."""
    form = DeleteAccountForm(request.POST)

    if not form.is_valid():
        messages.error(request, "Type DELETE to confirm account deletion.")
        return redirect('accounts:profile')

    user = request.user
    if user.owned_communities.exists():
        messages.error(request, "You still own one or more communities. Delete or transfer them first.")
        return redirect('accounts:profile')

    profile = getattr(user, 'profile', None)
    if profile and profile.photo:
        profile.photo.delete(save=False)

    user.delete()

    logout(request)
    logger.info(f"Account deleted: {user.email}")
    messages.success(request, "Your account has been permanently deleted.")
    return redirect('accounts:login')


@login_required
@require_GET
def api_token(request):
    """Short-lived bearer token for the JSON API (avatar upload)"""
    return JsonResponse({'token': issue_api_token(request.user)})
