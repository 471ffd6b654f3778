import json
import logging

from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import PermissionDenied, ValidationError
from django.http import Http404

from .api import json_error, ApiBadRequest

logger = logging.getLogger(__name__)


def _is_api(request) -> bool:
    return request.path.startswith("/api/")


class BearerTokenMiddleware:
    """Resolve ``Authorization: Bearer <token>`` into ``request.user`` for API paths.

    Session cookies are ignored under /api/, so CSRF checks are skipped there.
    The reason a token was rejected is kept on ``request.auth_error`` so the
    login decorator can report it.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if _is_api(request):
            from accounts.tokens import TokenError, user_from_token

            request._dont_enforce_csrf_checks = True
            request.auth_error = None
            request.user = AnonymousUser()

            header = request.META.get("HTTP_AUTHORIZATION", "")
            if not header:
                request.auth_error = "No token, authorization denied"
            elif not header.startswith("Bearer "):
                request.auth_error = "Token is not valid"
            else:
                try:
                    request.user = user_from_token(header[len("Bearer "):].strip())
                except TokenError as exc:
                    request.auth_error = str(exc)
                    logger.info("Token rejected: path=%s reason=%s", request.path, exc)
        return self.get_response(request)


class ApiExceptionMiddleware:
    """Turn uncaught errors on API paths into JSON envelopes and log each call."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)
        if _is_api(request):
            logger.info("%s %s -> %s", request.method, request.path, response.status_code)
        return response

    def process_exception(self, request, exception):
        if not _is_api(request):
            return None
        if isinstance(exception, Http404):
            message = str(exception) if exception.args else "Not Found"
            return json_error(message, status=404)
        if isinstance(exception, PermissionDenied):
            logger.warning("Access denied: path=%s user=%s reason=%s", request.path, getattr(request.user, "pk", None), exception)
            return json_error(str(exception) or "Access denied", status=403)
        if isinstance(exception, ApiBadRequest):
            return json_error(str(exception), status=400, **exception.extra)
        if isinstance(exception, ValidationError):
            return json_error("; ".join(exception.messages), status=400)
        if isinstance(exception, json.JSONDecodeError):
            return json_error("Invalid JSON body", status=400)
        logger.exception("Unhandled API error: %s %s", request.method, request.path)
        return json_error("Server error", status=500)
