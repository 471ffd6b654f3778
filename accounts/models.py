import math

from django.contrib.auth.models import AbstractUser, UserManager as DjangoUserManager
from django.core.validators import FileExtensionValidator, MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone


def _tokenize_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.replace(";", ",").split(",") if part.strip()]


class UserManager(DjangoUserManager):
    def create_user(self, username=None, email=None, password=None, **extra_fields):
        email = self.normalize_email(email or "").lower()
        return super().create_user(username or email, email, password, **extra_fields)

    def create_superuser(self, username=None, email=None, password=None, **extra_fields):
        email = self.normalize_email(email or "").lower()
        return super().create_superuser(username or email, email, password, **extra_fields)


class User(AbstractUser):
    class Role(models.TextChoices):
        JOB_SEEKER = "job_seeker", "Looking for job"
        EMPLOYER = "employer", "Hiring job"
        ADMIN = "admin", "Admin"
        FREELANCER = "freelancer", "Freelancer"
        STUDENT = "student", "Student"

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=50, blank=True)
    age = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(16), MaxValueValidator(100)]
    )
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.JOB_SEEKER)

    phone = models.CharField(max_length=30, blank=True)
    location = models.CharField(max_length=255, blank=True)
    bio = models.TextField(max_length=1000, blank=True)
    headline = models.CharField(max_length=120, blank=True)
    current_position = models.CharField(max_length=255, blank=True)
    current_company = models.CharField(max_length=255, blank=True)
    total_experience = models.PositiveSmallIntegerField(default=0)
    skills = models.TextField(blank=True, help_text="Comma separated skills.")
    linkedin = models.URLField(blank=True)
    portfolio = models.URLField(blank=True)
    profile_image = models.FileField(
        upload_to="profile_images/",
        blank=True,
        null=True,
        validators=[FileExtensionValidator(["jpeg", "jpg", "png", "gif"])],
    )

    token_version = models.PositiveIntegerField(default=0)
    password_reset_code = models.CharField(max_length=6, blank=True, null=True)
    password_reset_sent_at = models.DateTimeField(blank=True, null=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    objects = UserManager()

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        if not self.username:
            self.username = self.email
        super().save(*args, **kwargs)

    def skills_list(self) -> list[str]:
        return _tokenize_csv(self.skills)

    def display_name(self) -> str:
        return self.name or self.get_full_name() or self.email

    def recalculate_total_experience(self) -> int:
        """Sum experience entries (ongoing ones up to today) into whole years."""
        today = timezone.now().date()
        months = 0
        for exp in self.experiences.all():
            end = today if exp.is_current or not exp.end_date else exp.end_date
            days = abs((end - exp.start_date).days)
            months += math.ceil(days / 30)
        self.total_experience = min(50, round(months / 12)) if months else 0
        return self.total_experience

    def __str__(self):
        return self.email


class Education(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="educations")
    institution = models.CharField(max_length=255)
    degree = models.CharField(max_length=255)
    field_of_study = models.CharField(max_length=255, blank=True)
    start_year = models.PositiveSmallIntegerField(validators=[MinValueValidator(1900)])
    end_year = models.PositiveSmallIntegerField(null=True, blank=True, validators=[MinValueValidator(1900)])
    is_current = models.BooleanField(default=False)
    description = models.TextField(blank=True)

    class Meta:
        ordering = ["-start_year", "-id"]

    def __str__(self):
        return f"{self.degree} at {self.institution}"


class Experience(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="experiences")
    title = models.CharField(max_length=255)
    company = models.CharField(max_length=255)
    location = models.CharField(max_length=255, blank=True)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    is_current = models.BooleanField(default=False)
    description = models.TextField(blank=True)

    class Meta:
        ordering = ["-start_date", "-id"]

    def __str__(self):
        return f"{self.title} at {self.company}"


class PortfolioLink(models.Model):
    MAX_PER_USER = 3

    class LinkType(models.TextChoices):
        WEBSITE = "website", "Website"
        GITHUB = "github", "GitHub"
        LINKEDIN = "linkedin", "LinkedIn"
        BEHANCE = "behance", "Behance"
        DRIBBBLE = "dribbble", "Dribbble"
        OTHER = "other", "Other"

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="portfolio_links")
    title = models.CharField(max_length=50, blank=True)
    url = models.URLField()
    description = models.CharField(max_length=200, blank=True)
    type = models.CharField(max_length=20, choices=LinkType.choices, default=LinkType.WEBSITE)
    is_primary = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-is_primary", "created_at", "id"]

    def __str__(self):
        return self.url


class Staff(models.Model):
    class Department(models.TextChoices):
        GENERAL_INQUIRY = "General Inquiry", "General Inquiry"
        TECHNICAL_SUPPORT = "Technical Support", "Technical Support"
        BILLING = "Billing", "Billing"
        PRIVACY_CONCERNS = "Privacy Concerns", "Privacy Concerns"
        BUG_REPORT = "Bug Report", "Bug Report"
        FEATURE_REQUEST = "Feature Request", "Feature Request"

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255)
    departments = models.TextField(help_text="Comma separated departments.")
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "staff"

    def departments_list(self) -> list[str]:
        return _tokenize_csv(self.departments)

    def save(self, *args, **kwargs):
        self.email = (self.email or "").strip().lower()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} <{self.email}>"
