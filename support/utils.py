import logging

from django.conf import settings

from careerconnect.mailer import send_email
from notifications.utils import create_in_app_notification

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    "new": "New",
    "in_progress": "In Progress",
    "resolved": "Resolved",
    "closed": "Closed",
}


def active_staff_for(user):
    from accounts.models import Staff

    if not user.is_authenticated or not user.email:
        return None
    return Staff.objects.filter(email__iexact=user.email, is_active=True).first()


def _user_for_email(email: str):
    from django.contrib.auth import get_user_model

    return get_user_model().objects.filter(email__iexact=email).first()


# -----------------------------
# Email
# -----------------------------
def send_submission_emails(msg) -> None:
    """Confirmation to the sender, a copy to every platform admin."""
    try:
        send_email(
            to_emails=[msg.email],
            subject="Thank you for contacting us!",
            message=(
                f"Hello {msg.name},\n\n"
                f"We received your message \"{msg.subject}\" and will get back to you soon.\n\n"
                f"Your message:\n{msg.message}\n\n"
                "The CareerConnect team\n"
            ),
            tag="CONTACT",
            meta={"messageId": msg.id, "kind": "confirmation"},
        )
    except Exception:
        logger.exception("Failed to send contact confirmation: message_id=%s", msg.id)

    try:
        send_email(
            to_emails=settings.ADMIN_EMAILS,
            subject=f"New Contact Form Submission: {msg.subject}",
            message=(
                f"From: {msg.name} <{msg.email}>\n"
                f"Category: {msg.category}\n"
                f"Company: {msg.company_name or '-'}\n\n"
                f"{msg.message}\n"
            ),
            tag="CONTACT",
            meta={"messageId": msg.id, "kind": "admin"},
        )
    except Exception:
        logger.exception("Failed to send admin contact notification: message_id=%s", msg.id)


def send_status_email(msg, previous_status: str) -> None:
    try:
        send_email(
            to_emails=[msg.email],
            subject=f"Update on your support ticket: {msg.subject}",
            message=(
                f"Hello {msg.name},\n\n"
                f"The status of your ticket \"{msg.subject}\" changed from "
                f"{STATUS_LABELS.get(previous_status, previous_status)} to "
                f"{STATUS_LABELS.get(msg.status, msg.status)}.\n"
            ),
            tag="CONTACT",
            meta={"messageId": msg.id, "kind": "status"},
        )
    except Exception:
        logger.exception("Failed to send ticket status email: message_id=%s", msg.id)


def send_reply_email(msg, content: str, display_name: str) -> bool:
    try:
        send_email(
            to_emails=[msg.email],
            subject=f"Re: {msg.subject}",
            message=(
                f"Hello {msg.name},\n\n"
                f"{content}\n\n"
                f"{display_name}\n\n"
                f"----\nYour original message:\n{msg.message}\n"
            ),
            tag="CONTACT",
            meta={"messageId": msg.id, "kind": "reply"},
        )
    except Exception:
        logger.exception("Failed to send reply email: message_id=%s", msg.id)
        return False
    return True


# -----------------------------
# In-app notifications
# -----------------------------
def notify_status_changed(msg, previous_status: str):
    return create_in_app_notification(
        _user_for_email(msg.email),
        email=msg.email,
        type="message_status_changed",
        title="Support Ticket Status Updated",
        message=(
            f"Your support ticket \"{msg.subject}\" status has been changed from "
            f"{STATUS_LABELS.get(previous_status, previous_status)} to {STATUS_LABELS.get(msg.status, msg.status)}"
        ),
        url="/notifications",
        related_message=msg,
        related_data={
            "messageSubject": msg.subject,
            "previousStatus": previous_status,
            "newStatus": msg.status,
            "messageEmail": msg.email,
        },
    )


def notify_replied(msg):
    return create_in_app_notification(
        _user_for_email(msg.email),
        email=msg.email,
        type="message_replied",
        title="New Reply to Your Support Ticket",
        message=f"You have received a new reply on \"{msg.subject}\"",
        url="/messages",
        related_message=msg,
        related_data={"messageSubject": msg.subject, "messageEmail": msg.email},
        is_conversational=True,
    )


def notify_company_owner(msg, *, title: str, text: str):
    owner = msg.assigned_to
    if owner is None:
        return None
    return create_in_app_notification(
        owner,
        type="new_message",
        title=title,
        message=text,
        url="/messages",
        related_message=msg,
        related_data={
            "messageSubject": msg.subject,
            "senderName": msg.name,
            "senderEmail": msg.email,
            "companyName": msg.company_name,
        },
        is_conversational=True,
    )
