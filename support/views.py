import csv
import logging
from datetime import timedelta
from functools import wraps

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q
from django.db.models.functions import TruncDate
from django.http import Http404, HttpResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from accounts.decorators import api_login_required, is_admin_email
from careerconnect.api import _paginate, _safe_bool, form_error, json_error, json_ok, page_params, payload
from companies.models import Company
from companies.utils import _client_ip

from .forms import ContactForm, MessageStatusForm, ReplyForm
from .models import ContactMessage, Reply, categories_for_departments
from .serializers import message_to_dict, reply_to_dict
from .utils import (
    active_staff_for,
    notify_company_owner,
    notify_replied,
    notify_status_changed,
    send_reply_email,
    send_status_email,
    send_submission_emails,
)

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "submittedAt": "created_at",
    "updatedAt": "updated_at",
    "name": "name",
    "email": "email",
}


def get_message_or_404(message_id: int) -> ContactMessage:
    msg = (
        ContactMessage.objects.alive()
        .select_related("assigned_to", "company")
        .prefetch_related("replies")
        .filter(pk=message_id)
        .first()
    )
    if msg is None:
        raise Http404("Message not found")
    return msg


def _now_stamp() -> str:
    return timezone.now().isoformat()


def support_access_required(view_func):
    """Platform admins, or active staff limited to their departments' categories."""
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        user = request.user
        if not user.is_authenticated:
            return json_error(getattr(request, "auth_error", None) or "Authentication required", status=401)
        request.support_admin = is_admin_email(user.email)
        request.support_staff = None if request.support_admin else active_staff_for(user)
        if not request.support_admin and request.support_staff is None:
            logger.warning("Support access denied: email=%s path=%s", user.email, request.path)
            return json_error(
                "Admin access required. Your email is not authorized.", status=403, userEmail=user.email
            )
        return view_func(request, *args, **kwargs)
    return _wrapped


def _scope(request, qs):
    staff = getattr(request, "support_staff", None)
    if staff is None:
        return qs
    return qs.for_staff(staff.departments_list())


def _can_support(request, msg) -> bool:
    if getattr(request, "support_admin", False):
        return True
    return _scope(request, ContactMessage.objects.filter(pk=msg.pk)).exists()


# -----------------------------
# Submit
# -----------------------------
@require_POST
def submit(request):
    """Public contact form. Signed in users get the message linked to their account."""
    form = ContactForm(payload(request))
    if not form.is_valid():
        return form_error(form)
    cd = form.cleaned_data
    user = request.user if request.user.is_authenticated else None

    company = None
    if cd.get("companyId"):
        company = Company.objects.select_related("owner").filter(pk=cd["companyId"], is_active=True).first()
        if company is None:
            return json_error("Company not found", status=404)
    owner = company.owner if company else None

    if owner is not None:
        existing = (
            ContactMessage.objects.alive()
            .filter(email__iexact=cd["email"], assigned_to=owner)
            .order_by("-last_activity_at")
            .first()
        )
        if existing is not None:
            with transaction.atomic():
                Reply.objects.create(
                    message=existing,
                    content=cd["message"],
                    sent_by=cd["email"],
                    sender_context=Reply.SenderContext.USER,
                    display_name=cd["name"],
                    is_read=False,
                )
                if not existing.company_id:
                    existing.company = company
                    existing.company_name = company.name
                existing.touch()
                existing.save()
            notify_company_owner(
                existing,
                title=f"New message from {cd['name']}",
                text=f"{cd['name']} sent a new message about \"{existing.subject}\"",
            )
            logger.info("Contact message appended: message_id=%s email=%s", existing.pk, cd["email"])
            return json_ok(
                {
                    "message": "Message added to existing conversation",
                    "data": {"id": existing.id, "hasExistingConversation": True},
                },
                status=201,
            )

    category = cd.get("category") or ContactMessage.Category.OTHER
    if company is not None and category == ContactMessage.Category.OTHER:
        category = ContactMessage.Category.PARTNERSHIP

    msg = ContactMessage.objects.create(
        name=cd["name"],
        email=cd["email"],
        user=user,
        subject=cd["subject"],
        message=cd["message"],
        category=category,
        priority=cd.get("priority") or ContactMessage.Priority.MEDIUM,
        assigned_to=owner,
        company=company,
        company_name=company.name if company else "",
        user_agent=request.META.get("HTTP_USER_AGENT", "")[:500],
        ip_address=_client_ip(request),
        page_url=(request.META.get("HTTP_REFERER") or "Direct")[:500],
    )
    logger.info("Contact message received: message_id=%s email=%s company_id=%s", msg.pk, msg.email, msg.company_id)

    if owner is not None:
        notify_company_owner(
            msg,
            title=f"New message from {msg.name}",
            text=f"{msg.name} sent you a message: \"{msg.subject}\"",
        )
    send_submission_emails(msg)

    return json_ok(
        {
            "message": "Thank you for contacting us! We will get back to you soon.",
            "data": {
                "id": msg.id,
                "name": msg.name,
                "email": msg.email,
                "subject": msg.subject,
                "submittedAt": msg.created_at.isoformat(),
            },
        },
        status=201,
    )


# -----------------------------
# Access checks
# -----------------------------
@require_GET
@api_login_required
def check_admin(request):
    user = request.user
    is_admin = is_admin_email(user.email)
    staff = active_staff_for(user)
    data = {
        "isAdmin": is_admin or staff is not None,
        "isStaff": staff is not None,
        "staff": {"name": staff.name, "departments": staff.departments_list()} if staff else None,
        "userEmail": user.email,
        "message": "Access granted" if (is_admin or staff) else "Your email is not authorized for admin access",
    }
    if is_admin:
        data["adminEmails"] = list(settings.ADMIN_EMAILS)
    return json_ok(data)


@require_GET
@api_login_required
def check_staff(request):
    staff = active_staff_for(request.user)
    if staff is None:
        return json_ok({"isStaff": False, "departments": []})
    return json_ok(
        {
            "isStaff": True,
            "staff": {"id": staff.id, "name": staff.name, "email": staff.email},
            "departments": staff.departments_list(),
        }
    )


# -----------------------------
# Admin / staff inbox
# -----------------------------
@require_GET
@support_access_required
def message_list(request):
    qs = _scope(request, ContactMessage.objects.alive().platform())

    category = request.GET.get("category")
    staff = request.support_staff
    if category and category != "all":
        if staff is not None and category not in categories_for_departments(staff.departments_list()):
            return json_error("Access to this category is not allowed for your account", status=403)
        qs = qs.filter(category=category)

    stats_qs = qs
    status = request.GET.get("status")
    if status and status != "all":
        qs = qs.filter(status=status)
    search = (request.GET.get("search") or "").strip()
    if search:
        qs = qs.filter(
            Q(name__icontains=search)
            | Q(email__icontains=search)
            | Q(subject__icontains=search)
            | Q(message__icontains=search)
        )

    field = SORT_FIELDS.get(request.GET.get("sortBy") or "submittedAt", "created_at")
    prefix = "" if request.GET.get("sortOrder") == "asc" else "-"
    qs = qs.order_by(f"{prefix}{field}", f"{prefix}id").prefetch_related("replies")

    page, limit = page_params(request, default_limit=20)
    paginator, page_obj = _paginate(qs, page, limit)

    counts = {row["status"]: row["n"] for row in stats_qs.values("status").annotate(n=Count("id"))}
    return json_ok(
        {
            "total": paginator.count,
            "page": page_obj.number,
            "pages": paginator.num_pages,
            "stats": {
                "total": sum(counts.values()),
                "new": counts.get("new", 0),
                "in_progress": counts.get("in_progress", 0),
                "resolved": counts.get("resolved", 0),
                "closed": counts.get("closed", 0),
                "unread": stats_qs.filter(is_read=False).count(),
            },
            "data": [message_to_dict(m) for m in page_obj.object_list],
        }
    )


@require_GET
@support_access_required
def message_stats(request):
    qs = _scope(request, ContactMessage.objects.alive().platform())
    since = timezone.now() - timedelta(days=30)
    daily = (
        qs.filter(created_at__gte=since)
        .annotate(day=TruncDate("created_at"))
        .values("day")
        .annotate(count=Count("id"))
        .order_by("day")
    )
    return json_ok(
        {
            "data": {
                "total": qs.count(),
                "byStatus": {row["status"]: row["n"] for row in qs.values("status").annotate(n=Count("id"))},
                "categories": {row["category"]: row["n"] for row in qs.values("category").annotate(n=Count("id"))},
                "dailyStats": [{"date": row["day"].isoformat(), "count": row["count"]} for row in daily],
            }
        }
    )


@require_GET
@support_access_required
def export_csv(request):
    qs = _scope(request, ContactMessage.objects.alive()).order_by("-created_at")
    filename = f"contact_messages_{timezone.now().date().isoformat()}.csv"
    response = HttpResponse(content_type="text/csv")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    writer = csv.writer(response)
    writer.writerow(
        ["Name", "Email", "Subject", "Message", "Category", "Status", "Read", "Replied", "Submitted At", "Resolved At"]
    )
    for m in qs.iterator():
        writer.writerow(
            [
                m.name,
                m.email,
                m.subject,
                m.message,
                m.category,
                m.status,
                "Yes" if m.is_read else "No",
                "Yes" if m.is_replied else "No",
                m.created_at.isoformat(),
                m.resolved_at.isoformat() if m.resolved_at else "",
            ]
        )
    logger.info("Contact messages exported: by=%s", request.user.pk)
    return response


@require_http_methods(["GET", "DELETE"])
def message_detail(request, message_id: int):
    user = request.user
    if not user.is_authenticated:
        return json_error(getattr(request, "auth_error", None) or "Authentication required", status=401)
    msg = get_message_or_404(message_id)

    request.support_admin = is_admin_email(user.email)
    request.support_staff = None if request.support_admin else active_staff_for(user)
    has_support = (request.support_admin or request.support_staff is not None) and _can_support(request, msg)

    if request.method == "DELETE":
        if not has_support:
            return json_error("Admin access required. Your email is not authorized.", status=403)
        msg.is_deleted = True
        msg.save(update_fields=["is_deleted", "updated_at"])
        logger.info("Contact message deleted: message_id=%s by=%s", msg.pk, user.pk)
        return json_ok({"message": "Message deleted successfully"})

    is_participant = msg.email.lower() == (user.email or "").lower() or msg.assigned_to_id == user.pk
    if not (is_participant or has_support):
        return json_error("Access denied", status=403)
    if not msg.is_read and msg.email.lower() != (user.email or "").lower():
        msg.is_read = True
        msg.save(update_fields=["is_read", "updated_at"])
    return json_ok({"data": message_to_dict(msg, detail=has_support or msg.assigned_to_id == user.pk)})


@require_http_methods(["PATCH", "POST"])
@support_access_required
def message_status(request, message_id: int):
    msg = get_message_or_404(message_id)
    if not _can_support(request, msg):
        return json_error("Access to this category is not allowed for your account", status=403)
    form = MessageStatusForm(payload(request))
    if not form.is_valid():
        return form_error(form)
    status = form.cleaned_data["status"]
    notes = form.cleaned_data.get("notes") or ""

    previous = msg.set_status(status)
    line = f"[{_now_stamp()}] Status changed from {previous} to {status} by {request.user.email}"
    if notes:
        line += f": {notes}"
    msg.append_note(line)
    msg.touch()
    msg.save()
    logger.info("Contact status changed: message_id=%s %s->%s by=%s", msg.pk, previous, status, request.user.pk)

    if previous != status:
        notify_status_changed(msg, previous)
        send_status_email(msg, previous)
    return json_ok({"message": "Status updated successfully", "data": message_to_dict(msg, detail=True)})


@require_http_methods(["PATCH", "POST"])
@support_access_required
def message_read(request, message_id: int):
    msg = get_message_or_404(message_id)
    if not _can_support(request, msg):
        return json_error("Access to this category is not allowed for your account", status=403)
    is_read = _safe_bool(payload(request).get("isRead"))
    msg.is_read = True if is_read is None else is_read
    msg.save(update_fields=["is_read", "updated_at"])
    return json_ok({"message": "Marked as read" if msg.is_read else "Marked as unread", "isRead": msg.is_read})


@require_POST
@support_access_required
def message_note(request, message_id: int):
    msg = get_message_or_404(message_id)
    if not _can_support(request, msg):
        return json_error("Access to this category is not allowed for your account", status=403)
    note = (payload(request).get("note") or "").strip()
    if not note:
        return json_error("Note content is required")
    author = request.support_staff.name if request.support_staff else request.user.email
    msg.append_note(f"[{_now_stamp()}] {author}: {note}")
    msg.save(update_fields=["admin_notes", "updated_at"])
    return json_ok({"message": "Note added successfully", "adminNotes": msg.admin_notes})


@require_POST
@api_login_required
def message_reply(request, message_id: int):
    """Answer a conversation as support staff or as the company owner it was sent to."""
    user = request.user
    msg = get_message_or_404(message_id)

    is_owner = msg.assigned_to_id is not None and msg.assigned_to_id == user.pk
    request.support_admin = is_admin_email(user.email)
    request.support_staff = None if request.support_admin else active_staff_for(user)
    has_support = (request.support_admin or request.support_staff is not None) and _can_support(request, msg)
    if not (is_owner or has_support):
        return json_error("You do not have permission to reply to this message", status=403)
    if msg.is_finished:
        return json_error("Cannot reply to closed or resolved conversations. Please create a new support request.")

    form = ReplyForm(payload(request))
    if not form.is_valid():
        return form_error(form)
    content = form.cleaned_data["content"]
    send_it = form.cleaned_data.get("sendEmail")
    send_it = True if send_it is None else send_it

    if is_owner:
        context = Reply.SenderContext.COMPANY
        display_name = msg.company_name or user.display_name()
    else:
        context = Reply.SenderContext.SUPPORT
        display_name = "Support Team"

    email_sent = send_reply_email(msg, content, display_name) if send_it else False

    reply = Reply.objects.create(
        message=msg,
        content=content,
        sent_by=user.email,
        sender_context=context,
        display_name=display_name,
        email_sent=email_sent,
        is_read=False,
    )
    msg.is_replied = True
    if msg.status == ContactMessage.Status.NEW and not is_owner:
        msg.status = ContactMessage.Status.IN_PROGRESS
    msg.touch()
    msg.save()
    notify_replied(msg)
    logger.info("Contact reply sent: message_id=%s by=%s email_sent=%s", msg.pk, user.pk, email_sent)

    return json_ok(
        {
            "message": "Reply sent successfully" if email_sent else "Reply saved (email not sent)",
            "reply": reply_to_dict(reply),
            "data": message_to_dict(msg),
        }
    )


# -----------------------------
# Sender side
# -----------------------------
@require_GET
@api_login_required
def user_messages(request):
    qs = ContactMessage.objects.alive().for_participant(request.user).prefetch_related("replies")
    qs = qs.order_by("-last_activity_at", "-id")
    messages = list(qs)
    counts = {m.id: m.unread_count() for m in messages}
    if _safe_bool(request.GET.get("unreadOnly")):
        messages = [m for m in messages if counts[m.id]]
    return json_ok(
        {
            "messages": [dict(message_to_dict(m), unreadCount=counts[m.id]) for m in messages],
            "unreadCount": sum(counts.values()),
            "total": len(messages),
        }
    )


@require_GET
@api_login_required
def user_unread_count(request):
    qs = ContactMessage.objects.alive().for_participant(request.user).prefetch_related("replies")
    return json_ok({"count": sum(m.unread_count() for m in qs)})


def _own_message_or_404(request, message_id: int) -> ContactMessage:
    msg = get_message_or_404(message_id)
    if msg.email.lower() != (request.user.email or "").lower():
        raise Http404("Message not found")
    return msg


@require_GET
@api_login_required
def user_message_detail(request, message_id: int):
    msg = _own_message_or_404(request, message_id)
    with transaction.atomic():
        msg.replies.filter(is_read=False).exclude(sender_context=Reply.SenderContext.USER).update(is_read=True)
        if not msg.is_read:
            msg.is_read = True
            msg.save(update_fields=["is_read", "updated_at"])
    msg = get_message_or_404(message_id)
    return json_ok({"data": message_to_dict(msg)})


@require_POST
@api_login_required
def user_message_reply(request, message_id: int):
    msg = _own_message_or_404(request, message_id)
    if msg.is_finished:
        return json_error("This conversation is closed. Please create a new contact request.")
    content = (payload(request).get("content") or "").strip()
    if not content:
        return json_error("Reply content is required")

    reply = Reply.objects.create(
        message=msg,
        content=content,
        sent_by=request.user.email,
        sender_context=Reply.SenderContext.USER,
        display_name=msg.name,
        is_read=True,
    )
    msg.touch()
    msg.save(update_fields=["last_activity_at", "updated_at"])
    notify_company_owner(
        msg,
        title=f"New reply from {msg.name}",
        text=f"{msg.name} replied to \"{msg.subject}\"",
    )
    logger.info("Sender reply added: message_id=%s by=%s", msg.pk, request.user.pk)
    return json_ok({"message": "Reply sent successfully", "reply": reply_to_dict(reply)}, status=201)
