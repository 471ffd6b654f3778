import logging

logger = logging.getLogger(__name__)


def create_in_app_notification(
    user=None,
    title: str = "",
    message: str = "",
    url: str = "",
    *,
    email: str | None = None,
    type: str = "system",
    related_message=None,
    related_data: dict | None = None,
    is_conversational: bool = False,
):
    """Store an in-app notification; failures are logged, never raised."""
    try:
        from .models import Notification

        address = (email or getattr(user, "email", "") or "").strip().lower()
        if user is None and not address:
            return None
        return Notification.objects.create(
            user=user,
            user_email=address,
            type=type,
            title=(title or "")[:200],
            message=(message or title or "")[:1000],
            action_url=url or "",
            related_message=related_message,
            related_data=related_data or {},
            is_conversational=is_conversational,
        )
    except Exception:
        logger.exception("Failed to create in-app notification: title=%s", title)
        return None
