from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

# Staff departments and the message categories each one may handle.
DEPARTMENT_CATEGORIES = {
    "General Inquiry": "Support",
    "Technical Support": "Technical",
    "Billing": "Account",
    "Privacy Concerns": "Other",
    "Bug Report": "Technical",
    "Feature Request": "Feedback",
}


def categories_for_departments(departments) -> set[str]:
    return {DEPARTMENT_CATEGORIES[d] for d in departments if d in DEPARTMENT_CATEGORIES}


class ContactMessageQuerySet(models.QuerySet):
    def alive(self):
        return self.filter(is_deleted=False)

    def platform(self):
        """Messages sent to the platform itself, not to a company."""
        return self.filter(company__isnull=True, assigned_to__isnull=True)

    def for_staff(self, departments):
        categories = categories_for_departments(departments)
        cond = Q(category__in=categories)
        for dept in departments:
            cond |= Q(subject__icontains=dept) | Q(message__icontains=dept) | Q(name__icontains=dept)
        return self.filter(cond)

    def for_participant(self, user):
        return self.filter(Q(email__iexact=user.email) | Q(assigned_to=user))


class ContactMessage(models.Model):
    class Category(models.TextChoices):
        SUPPORT = "Support", "Support"
        TECHNICAL = "Technical", "Technical"
        FEEDBACK = "Feedback", "Feedback"
        ACCOUNT = "Account", "Account"
        PARTNERSHIP = "Partnership", "Partnership"
        OTHER = "Other", "Other"

    class Priority(models.TextChoices):
        LOW = "Low", "Low"
        MEDIUM = "Medium", "Medium"
        HIGH = "High", "High"
        URGENT = "Urgent", "Urgent"

    class Status(models.TextChoices):
        NEW = "new", "New"
        IN_PROGRESS = "in_progress", "In Progress"
        RESOLVED = "resolved", "Resolved"
        CLOSED = "closed", "Closed"

    FINISHED = (Status.RESOLVED, Status.CLOSED)

    name = models.CharField(max_length=100)
    email = models.EmailField()
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="contact_messages"
    )
    subject = models.CharField(max_length=200)
    message = models.TextField(max_length=2000)
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.OTHER)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.MEDIUM)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.NEW, db_index=True)
    is_read = models.BooleanField(default=False)
    is_replied = models.BooleanField(default=False)

    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="assigned_messages"
    )
    company = models.ForeignKey(
        "companies.Company", on_delete=models.SET_NULL, null=True, blank=True, related_name="messages"
    )
    company_name = models.CharField(max_length=255, blank=True)

    user_agent = models.CharField(max_length=500, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    page_url = models.CharField(max_length=500, blank=True)
    admin_notes = models.TextField(blank=True)

    resolved_at = models.DateTimeField(null=True, blank=True)
    last_activity_at = models.DateTimeField(default=timezone.now)
    is_deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ContactMessageQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [models.Index(fields=["email", "assigned_to"], name="contact_email_assignee_idx")]

    def __str__(self):
        return f"{self.subject} ({self.email})"

    @property
    def is_finished(self) -> bool:
        return self.status in self.FINISHED

    def append_note(self, line: str) -> None:
        self.admin_notes = f"{self.admin_notes}\n{line}" if self.admin_notes else line

    def set_status(self, status: str) -> str:
        previous = self.status
        self.status = status
        if status in self.FINISHED and not self.resolved_at:
            self.resolved_at = timezone.now()
        return previous

    def touch(self):
        self.last_activity_at = timezone.now()

    def unread_count(self) -> int:
        """One for an unread message, otherwise the number of unread replies."""
        if not self.is_read:
            return 1
        return self.replies.filter(is_read=False).count()


class Reply(models.Model):
    class SenderContext(models.TextChoices):
        USER = "user", "User"
        SUPPORT = "support", "Support"
        COMPANY = "company", "Company"

    message = models.ForeignKey(ContactMessage, on_delete=models.CASCADE, related_name="replies")
    content = models.TextField()
    sent_by = models.EmailField(blank=True)
    sender_context = models.CharField(max_length=10, choices=SenderContext.choices, default=SenderContext.SUPPORT)
    display_name = models.CharField(max_length=255, blank=True)
    email_sent = models.BooleanField(default=False)
    is_read = models.BooleanField(default=False)
    sent_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["sent_at", "id"]
        verbose_name_plural = "replies"

    def __str__(self):
        return f"Reply to #{self.message_id} by {self.sent_by}"
