import logging

from django.http import Http404
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods

from accounts.decorators import api_login_required
from careerconnect.api import _paginate, _safe_bool, json_ok, page_params

from .models import Notification
from .serializers import notification_to_dict

logger = logging.getLogger(__name__)


def _own(request):
    return Notification.objects.for_user(request.user)


def _get_own_or_404(request, notification_id: int) -> Notification:
    notification = _own(request).filter(pk=notification_id).first()
    if notification is None:
        raise Http404("Notification not found")
    return notification


@require_GET
@api_login_required
def notification_list(request):
    qs = _own(request).live().select_related("related_message")
    if _safe_bool(request.GET.get("unreadOnly")):
        qs = qs.unread()
    page, limit = page_params(request, default_limit=20)
    paginator, page_obj = _paginate(qs, page, limit)
    return json_ok(
        {
            "notifications": [notification_to_dict(n) for n in page_obj.object_list],
            "pagination": {"total": paginator.count, "page": page_obj.number, "pages": paginator.num_pages},
        }
    )


@require_GET
@api_login_required
def unread_count(request):
    return json_ok({"count": _own(request).live().unread().count()})


@require_http_methods(["GET", "DELETE"])
@api_login_required
def notification_detail(request, notification_id: int):
    notification = _get_own_or_404(request, notification_id)
    if request.method == "DELETE":
        notification.delete()
        return json_ok(message="Notification deleted")
    notification.mark_as_read()
    return json_ok({"notification": notification_to_dict(notification)})


@require_http_methods(["PATCH"])
@api_login_required
def mark_read(request, notification_id: int):
    notification = _get_own_or_404(request, notification_id)
    notification.mark_as_read()
    return json_ok({"notification": notification_to_dict(notification)})


@require_http_methods(["PATCH"])
@api_login_required
def mark_all_read(request):
    updated = _own(request).unread().update(is_read=True, read_at=timezone.now())
    logger.info("Notifications marked read: user_id=%s count=%s", request.user.pk, updated)
    return json_ok({"message": "All notifications marked as read", "updated": updated})


@require_http_methods(["DELETE"])
@api_login_required
def delete_all(request):
    deleted, _ = _own(request).delete()
    logger.info("Notifications deleted: user_id=%s count=%s", request.user.pk, deleted)
    return json_ok({"message": "All notifications deleted", "deleted": deleted})
