from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from accounts.models import _tokenize_csv


def _split_lines(value: str | None) -> list[str]:
    return [line.strip() for line in (value or "").splitlines() if line.strip()]


class EmploymentType(models.TextChoices):
    FULL_TIME = "Full-time", "Full-time"
    PART_TIME = "Part-time", "Part-time"
    CONTRACT = "Contract", "Contract"
    INTERNSHIP = "Internship", "Internship"
    TEMPORARY = "Temporary", "Temporary"
    REMOTE = "Remote", "Remote"


class SalaryPeriod(models.TextChoices):
    HOUR = "hour", "Per hour"
    DAY = "day", "Per day"
    WEEK = "week", "Per week"
    MONTH = "month", "Per month"
    YEAR = "year", "Per year"


class Education(models.TextChoices):
    ANY = "Any", "Any"
    HIGH_SCHOOL = "High School", "High School"
    ASSOCIATE = "Associate", "Associate"
    BACHELOR = "Bachelor", "Bachelor"
    MASTER = "Master", "Master"
    PHD = "PhD", "PhD"


class JobQuerySet(models.QuerySet):
    def active(self):
        return self.filter(status=Job.Status.ACTIVE, is_active=True)

    def visible(self):
        """Jobs whose company is still active."""
        return self.filter(company__is_active=True)

    def for_company(self, company, status: str | None = None):
        qs = self.filter(company=company)
        if status:
            qs = qs.filter(status=status)
        return qs


class Job(models.Model):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        ACTIVE = "active", "Active"
        PAUSED = "paused", "Paused"
        CLOSED = "closed", "Closed"
        FILLED = "filled", "Filled"
        ARCHIVED = "archived", "Archived"

    company = models.ForeignKey("companies.Company", on_delete=models.CASCADE, related_name="jobs")
    posted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="posted_jobs"
    )
    title = models.CharField(max_length=100)
    description = models.TextField()
    location = models.CharField(max_length=255)
    employment_type = models.CharField(max_length=20, choices=EmploymentType.choices, default=EmploymentType.FULL_TIME)

    salary_min = models.PositiveIntegerField(null=True, blank=True)
    salary_max = models.PositiveIntegerField(null=True, blank=True)
    salary_currency = models.CharField(max_length=3, default="USD")
    salary_negotiable = models.BooleanField(default=False)
    salary_period = models.CharField(max_length=10, choices=SalaryPeriod.choices, default=SalaryPeriod.YEAR)

    # Comma-separated
    skills = models.TextField(blank=True)
    tags = models.CharField(max_length=500, blank=True)
    # One entry per line
    requirements = models.TextField(blank=True)
    responsibilities = models.TextField(blank=True)
    benefits = models.TextField(blank=True)

    experience_min_years = models.PositiveSmallIntegerField(default=0, validators=[MinValueValidator(0)])
    experience_max_years = models.PositiveSmallIntegerField(null=True, blank=True)
    education = models.CharField(max_length=20, choices=Education.choices, default=Education.ANY)
    application_instructions = models.TextField(blank=True)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE, db_index=True)
    is_active = models.BooleanField(default=True)
    is_featured = models.BooleanField(default=False)
    is_urgent = models.BooleanField(default=False)
    is_remote = models.BooleanField(default=False)

    application_deadline = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    views = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = JobQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [models.Index(fields=["company", "status"], name="job_company_status_idx")]

    def __str__(self):
        return self.title

    def skills_list(self):
        return _tokenize_csv(self.skills)

    def tags_list(self):
        return _tokenize_csv(self.tags)

    def requirements_list(self):
        return _split_lines(self.requirements)

    def responsibilities_list(self):
        return _split_lines(self.responsibilities)

    def benefits_list(self):
        return _split_lines(self.benefits)

    @property
    def is_expired(self) -> bool:
        return bool(self.expires_at and self.expires_at < timezone.now())

    def clean(self):
        super().clean()
        if self.salary_min is not None and self.salary_max is not None and self.salary_max < self.salary_min:
            raise ValidationError({"salary_max": "Maximum salary cannot be less than minimum salary"})
        if (
            self.experience_max_years is not None
            and self.experience_max_years < (self.experience_min_years or 0)
        ):
            raise ValidationError({"experience_max_years": "Maximum experience cannot be less than minimum"})

    def save(self, *args, **kwargs):
        if self.employment_type == EmploymentType.REMOTE or "remote" in (self.location or "").lower():
            self.is_remote = True
        if not self.expires_at:
            self.expires_at = (self.created_at or timezone.now()) + timedelta(days=30)
        if self.status == self.Status.ACTIVE and self.expires_at < timezone.now():
            self.status = self.Status.CLOSED
        self.is_active = self.status == self.Status.ACTIVE

        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            kwargs["update_fields"] = set(update_fields) | {"is_remote", "expires_at", "status", "is_active"}
        super().save(*args, **kwargs)

    def increment_views(self) -> int:
        Job.objects.filter(pk=self.pk).update(views=models.F("views") + 1)
        self.views += 1
        return self.views


class SavedJob(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="saved_jobs")
    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name="saved_by")
    saved_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-saved_at"]
        unique_together = ("user", "job")

    def __str__(self):
        return f"{self.user} saved {self.job}"
