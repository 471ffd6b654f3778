from django.conf import settings
from django.core.validators import FileExtensionValidator, MaxValueValidator, MinLengthValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

IMAGE_EXTENSIONS = ["jpeg", "jpg", "png", "gif", "svg"]


def _current_year() -> int:
    return timezone.now().year


def validate_founded_year(value):
    MaxValueValidator(_current_year(), "Founded year cannot be in the future")(value)


class CompanySize(models.TextChoices):
    S_1_10 = "1-10", "1-10"
    S_11_50 = "11-50", "11-50"
    S_51_200 = "51-200", "51-200"
    S_201_500 = "201-500", "201-500"
    S_501_1000 = "501-1000", "501-1000"
    S_1000_PLUS = "1000+", "1000+"


class CompanyQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def for_user(self, user):
        """Companies the user owns or belongs to as a team member."""
        member_of = TeamMember.objects.filter(user=user).values("company_id")
        return self.filter(Q(owner=user) | Q(pk__in=member_of))


class Company(models.Model):
    name = models.CharField(max_length=255, unique=True)
    email = models.EmailField(unique=True)
    description = models.TextField(
        validators=[MinLengthValidator(50, "Description should be at least 50 characters")]
    )
    website = models.URLField(blank=True)
    location = models.CharField(max_length=255)
    industry = models.CharField(max_length=255)
    size = models.CharField(max_length=20, choices=CompanySize.choices)
    founded_year = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1800, "Founded year seems invalid"), validate_founded_year],
    )
    logo = models.FileField(
        upload_to="company/logos/", blank=True, null=True, validators=[FileExtensionValidator(IMAGE_EXTENSIONS)]
    )
    cover_image = models.FileField(
        upload_to="company/covers/", blank=True, null=True, validators=[FileExtensionValidator(IMAGE_EXTENSIONS)]
    )
    phone = models.CharField(max_length=30, blank=True)
    social_links = models.JSONField(default=dict, blank=True)
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="owned_companies")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CompanyQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "companies"

    @property
    def city(self) -> str:
        return (self.location or "").split(",")[0].strip()

    def __str__(self):
        return self.name


class TeamMember(models.Model):
    class Role(models.TextChoices):
        ADMIN = "admin", "Admin"
        RECRUITER = "recruiter", "Recruiter"
        MANAGER = "manager", "Manager"
        HR = "hr", "HR"
        MEMBER = "member", "Member"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="team_members")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="company_memberships")
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.RECRUITER)
    permissions = models.JSONField(default=list, blank=True)
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["added_at", "id"]
        unique_together = ("company", "user")

    def __str__(self):
        return f"{self.user} ({self.role}) @ {self.company}"


class CompanyFollow(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="follows")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="followed_companies")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        unique_together = ("company", "user")


class CompanyBookmark(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="bookmarks")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="bookmarked_companies")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        unique_together = ("company", "user")


class CompanyView(models.Model):
    class Source(models.TextChoices):
        DIRECT = "direct", "Direct"
        SEARCH = "search", "Search"
        SOCIAL = "social", "Social"
        REFERRAL = "referral", "Referral"
        INTERNAL = "internal", "Internal"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="views")
    viewer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=500, blank=True)
    source = models.CharField(max_length=20, choices=Source.choices, default=Source.DIRECT)
    viewed_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-viewed_at"]
