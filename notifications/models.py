from datetime import timedelta

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone


def _default_expiry():
    return timezone.now() + timedelta(days=30)


class NotificationQuerySet(models.QuerySet):
    def for_user(self, user):
        """Notifications addressed to the user's id or to their email."""
        return self.filter(Q(user=user) | Q(user_email__iexact=user.email))

    def live(self):
        return self.filter(Q(expires_at__isnull=True) | Q(expires_at__gt=timezone.now()))

    def unread(self):
        return self.filter(is_read=False)


class Notification(models.Model):
    class Type(models.TextChoices):
        MESSAGE_STATUS_CHANGED = "message_status_changed", "Message status changed"
        MESSAGE_REPLIED = "message_replied", "Message replied"
        NEW_MESSAGE = "new_message", "New message"
        SYSTEM = "system", "System"
        APPLICATION_STATUS = "application_status", "Application status"
        NEW_APPLICATION = "new_application", "New application"
        COMPANY_FOLLOW = "company_follow", "Company follow"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, null=True, blank=True, related_name="notifications"
    )
    user_email = models.EmailField(blank=True)
    type = models.CharField(max_length=40, choices=Type.choices, default=Type.SYSTEM)
    title = models.CharField(max_length=200)
    message = models.TextField(max_length=1000)
    related_message = models.ForeignKey(
        "support.ContactMessage", on_delete=models.CASCADE, null=True, blank=True, related_name="notifications"
    )
    related_data = models.JSONField(default=dict, blank=True)
    is_conversational = models.BooleanField(default=False)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    action_url = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    expires_at = models.DateTimeField(default=_default_expiry, null=True, blank=True, db_index=True)

    objects = NotificationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]

    def mark_as_read(self):
        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=["is_read", "read_at"])

    def __str__(self):
        return self.title
