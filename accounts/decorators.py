import logging
from functools import wraps

from django.conf import settings

from careerconnect.api import json_error

logger = logging.getLogger(__name__)


def api_login_required(view_func):
    """Answer 401 JSON unless the bearer token resolved to a user."""
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if not request.user.is_authenticated:
            reason = getattr(request, "auth_error", None) or "Authentication required"
            return json_error(reason, status=401)
        return view_func(request, *args, **kwargs)
    return _wrapped


def is_admin_email(email: str | None) -> bool:
    return bool(email) and email.strip().lower() in settings.ADMIN_EMAILS


def admin_email_required(view_func):
    """Allow only users whose email is on the ADMIN_EMAILS allow-list."""
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        user = request.user
        if not user.is_authenticated:
            return json_error("Authentication required", status=401)
        try:
            allowed = is_admin_email(user.email)
        except Exception:
            logger.exception("Admin check failed: user_id=%s", user.pk)
            return json_error("Admin check failed", status=500)
        if not allowed:
            logger.warning("Admin access denied: email=%s path=%s", user.email, request.path)
            return json_error(
                "Admin access required. Your email is not authorized.",
                status=403,
                userEmail=user.email,
            )
        return view_func(request, *args, **kwargs)
    return _wrapped
