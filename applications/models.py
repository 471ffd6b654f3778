from datetime import timedelta

from django.conf import settings
from django.core.validators import FileExtensionValidator, MaxValueValidator, MinValueValidator
from django.db import models, transaction
from django.db.models import Avg, Count, ExpressionWrapper, F, FloatField, Q
from django.db.models.functions import TruncDate
from django.utils import timezone

from accounts.models import _tokenize_csv

RESUME_EXTENSIONS = ["pdf", "doc", "docx", "txt", "rtf"]

DEGREE_RANKS = [
    ("high school", 1),
    ("diploma", 2),
    ("associate", 3),
    ("bachelor", 4),
    ("master", 5),
    ("phd", 6),
    ("doctorate", 6),
]


def degree_rank(degree: str | None) -> int:
    lowered = (degree or "").lower()
    for key, rank in DEGREE_RANKS:
        if key in lowered:
            return rank
    return 0


def _skills_overlap(required: list[str], owned: list[str]) -> int:
    owned = [s.lower() for s in owned]
    matched = 0
    for skill in required:
        skill = skill.lower()
        if any(skill in mine or mine in skill for mine in owned):
            matched += 1
    return matched


class ApplicationQuerySet(models.QuerySet):
    def for_company(self, company):
        return self.filter(company=company)

    def by_status(self, status):
        return self.filter(status=status)

    def recent(self, days: int = 7):
        return self.filter(applied_at__gte=timezone.now() - timedelta(days=days))


class Application(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        REVIEWED = "reviewed", "Reviewed"
        SHORTLISTED = "shortlisted", "Shortlisted"
        INTERVIEW = "interview", "Interview"
        ACCEPTED = "accepted", "Accepted"
        REJECTED = "rejected", "Rejected"
        WITHDRAWN = "withdrawn", "Withdrawn"

    class InterviewType(models.TextChoices):
        PHONE = "phone", "Phone"
        VIDEO = "video", "Video"
        IN_PERSON = "in-person", "In person"

    WITHDRAWABLE = frozenset({Status.PENDING, Status.REVIEWED, Status.SHORTLISTED, Status.INTERVIEW})

    job = models.ForeignKey("jobs.Job", on_delete=models.CASCADE, related_name="applications")
    company = models.ForeignKey("companies.Company", on_delete=models.CASCADE, related_name="applications")
    applicant = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="applications")

    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=30, blank=True)
    location = models.CharField(max_length=255, blank=True)

    resume = models.FileField(upload_to="resumes/%Y/%m/", validators=[FileExtensionValidator(RESUME_EXTENSIONS)])
    cover_letter = models.TextField(blank=True)
    cover_letter_file = models.FileField(
        upload_to="cover_letters/%Y/%m/", blank=True, null=True, validators=[FileExtensionValidator(RESUME_EXTENSIONS)]
    )
    portfolio = models.URLField(blank=True)
    linkedin = models.URLField(blank=True)
    portfolio_links = models.JSONField(default=list, blank=True)
    questions = models.JSONField(default=list, blank=True)
    additional_info = models.TextField(blank=True)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True)
    score = models.PositiveSmallIntegerField(default=0, validators=[MaxValueValidator(100)])
    skills_match = models.PositiveSmallIntegerField(default=0, validators=[MaxValueValidator(100)])
    rejection_reason = models.TextField(blank=True)

    interview_scheduled_at = models.DateTimeField(null=True, blank=True)
    interview_type = models.CharField(max_length=20, choices=InterviewType.choices, blank=True)
    interview_location = models.CharField(max_length=255, blank=True)
    interview_notes = models.TextField(blank=True)
    interview_feedback = models.TextField(blank=True)
    interview_rating = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1), MaxValueValidator(5)]
    )

    applicant_metadata = models.JSONField(default=dict, blank=True)
    viewed_at = models.DateTimeField(null=True, blank=True)
    last_viewed_at = models.DateTimeField(null=True, blank=True)
    applied_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ApplicationQuerySet.as_manager()

    class Meta:
        ordering = ["-applied_at", "-id"]
        unique_together = ("job", "applicant")

    def __str__(self):
        return f"{self.name} -> {self.job}"

    # -----------------------------
    # Applicant snapshot
    # -----------------------------
    def snapshot_applicant(self):
        """Copy the applicant's profile so later profile edits don't change the application."""
        user = self.applicant
        self.applicant_metadata = {
            "phone": user.phone,
            "location": user.location,
            "skills": user.skills_list(),
            "education": [
                {"institution": e.institution, "degree": e.degree, "fieldOfStudy": e.field_of_study}
                for e in user.educations.all()
            ],
            "totalExperience": user.total_experience or 0,
            "currentPosition": user.current_position,
            "currentCompany": user.current_company,
        }
        self.name = self.name or user.name or user.email
        self.email = self.email or user.email
        self.phone = self.phone or user.phone
        self.location = self.location or user.location

    # -----------------------------
    # Timeline
    # -----------------------------
    def log(self, action: str, user=None, notes: str = "", previous_status: str = "", new_status: str = ""):
        return ApplicationEvent.objects.create(
            application=self,
            action=action,
            performed_by=user,
            notes=notes,
            previous_status=previous_status,
            new_status=new_status,
        )

    def can_transition(self, status: str, *, by_applicant: bool = False) -> bool:
        if self.status == self.Status.WITHDRAWN:
            return False
        if status == self.Status.WITHDRAWN:
            return by_applicant and self.status in self.WITHDRAWABLE
        return status in self.Status.values

    @transaction.atomic
    def update_status(self, status: str, user=None, notes: str = "") -> "ApplicationEvent":
        previous = self.status
        self.status = status
        now = timezone.now()
        update_fields = ["status", "updated_at"]
        if status == self.Status.REVIEWED:
            self.viewed_at = self.viewed_at or now
            self.last_viewed_at = now
            update_fields += ["viewed_at", "last_viewed_at"]
            if user is not None:
                ApplicationView.objects.get_or_create(application=self, user=user)
        self.save(update_fields=update_fields)

        event = self.log(
            "status_updated",
            user,
            notes or f"Status changed from {previous} to {status}",
            previous_status=previous,
            new_status=status,
        )
        follow_up = {
            self.Status.INTERVIEW: ("interview_scheduled", "Interview scheduled"),
            self.Status.ACCEPTED: ("accepted", "Application accepted"),
            self.Status.REJECTED: ("rejected", "Application rejected"),
            self.Status.WITHDRAWN: ("withdrawn", "Application withdrawn by applicant"),
        }.get(status)
        if follow_up:
            self.log(follow_up[0], user, follow_up[1])
        return event

    @transaction.atomic
    def mark_as_viewed(self, user):
        now = timezone.now()
        if self.viewed_at is None:
            self.viewed_at = now
            self.last_viewed_at = now
            fields = ["viewed_at", "last_viewed_at", "updated_at"]
            self.log("reviewed", user, "Application viewed")
            if self.status == self.Status.PENDING:
                self.status = self.Status.REVIEWED
                fields.append("status")
            self.save(update_fields=fields)
        else:
            self.last_viewed_at = now
            self.save(update_fields=["last_viewed_at"])
        ApplicationView.objects.get_or_create(application=self, user=user)
        return self

    def add_note(self, note: str, user) -> "ApplicationNote":
        created = ApplicationNote.objects.create(application=self, note=note, added_by=user)
        self.log("note_added", user, "Note added to application")
        return created

    def add_communication(self, type: str, subject: str, message: str, user) -> "Communication":
        created = Communication.objects.create(
            application=self, type=type, subject=subject, message=message, sent_by=user
        )
        self.log("communication_sent", user, f"{type} communication sent: {subject}")
        return created

    # -----------------------------
    # Matching
    # -----------------------------
    def calculate_match_score(self, job=None) -> dict:
        """Weighted fit: skills 40, experience 30, education 15, location 15."""
        job = job or self.job
        meta = self.applicant_metadata or {}
        owned = meta.get("skills") or []
        required = _tokenize_csv(job.skills)

        score = 0.0
        skills_match = 0
        if required and owned:
            matched = _skills_overlap(required, owned)
            score += matched / len(required) * 40
            skills_match = round(matched / len(required) * 100)

        total_experience = meta.get("totalExperience") or 0
        if job.experience_min_years and total_experience:
            score += min(30, total_experience / job.experience_min_years * 30)

        educations = meta.get("education") or []
        if job.education and educations:
            best = max(degree_rank(e.get("degree")) for e in educations)
            if best >= degree_rank(job.education):
                score += 15

        job_location = (job.location or "").lower()
        user_location = (meta.get("location") or "").lower()
        if job_location and user_location and (user_location in job_location or job_location in user_location):
            score += 15

        self.score = round(score)
        self.skills_match = skills_match
        return {
            "score": self.score,
            "skillsMatch": skills_match,
            "breakdown": {
                "skills": skills_match,
                "experience": total_experience,
                "education": len(educations),
                "location": meta.get("location") or "Not specified",
            },
        }

    # -----------------------------
    # Reporting
    # -----------------------------
    @classmethod
    def stats(cls, company, job=None) -> dict:
        qs = cls.objects.for_company(company)
        if job is not None:
            qs = qs.filter(job=job)

        total = qs.count()
        viewed = qs.filter(viewed_at__isnull=False).count()
        by_status = {}
        rows = (
            qs.order_by()
            .values("status")
            .annotate(
                count=Count("id"),
                avg_score=Avg("score"),
                avg_skills=Avg("skills_match"),
            )
        )
        for row in rows:
            by_status[row["status"]] = {
                "count": row["count"],
                "avgScore": round(row["avg_score"] or 0, 1),
                "avgSkillsMatch": round(row["avg_skills"] or 0, 1),
            }

        daily = (
            qs.filter(applied_at__gte=timezone.now() - timedelta(days=30))
            .annotate(day=TruncDate("applied_at"))
            .order_by()
            .values("day")
            .annotate(count=Count("id"))
            .order_by("day")
        )
        return {
            "total": total,
            "viewed": viewed,
            "viewRate": round(viewed / total * 100) if total else 0,
            "byStatus": by_status,
            "dailyStats": {row["day"].isoformat(): row["count"] for row in daily},
        }

    @classmethod
    def top_candidates(cls, job, limit: int = 10):
        return list(
            cls.objects.filter(job=job)
            .select_related("applicant")
            .annotate(rank=ExpressionWrapper(F("score") * 0.4 + F("skills_match") * 0.6, output_field=FloatField()))
            .order_by("-rank", "-applied_at")[:limit]
        )

    @classmethod
    def search(cls, qs, term: str):
        term = (term or "").strip()
        if not term:
            return qs
        return qs.filter(
            Q(name__icontains=term)
            | Q(email__icontains=term)
            | Q(phone__icontains=term)
            | Q(location__icontains=term)
            | Q(job__title__icontains=term)
        )


class ApplicationEvent(models.Model):
    ACTIONS = [
        ("applied", "Applied"),
        ("status_updated", "Status updated"),
        ("reviewed", "Reviewed"),
        ("interview_scheduled", "Interview scheduled"),
        ("accepted", "Accepted"),
        ("rejected", "Rejected"),
        ("withdrawn", "Withdrawn"),
        ("note_added", "Note added"),
        ("communication_sent", "Communication sent"),
    ]

    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name="timeline")
    action = models.CharField(max_length=30, choices=ACTIONS)
    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    notes = models.TextField(blank=True)
    previous_status = models.CharField(max_length=20, blank=True)
    new_status = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at", "id"]


class ApplicationNote(models.Model):
    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name="notes")
    note = models.TextField()
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-added_at", "-id"]


class Communication(models.Model):
    class Type(models.TextChoices):
        EMAIL = "email", "Email"
        MESSAGE = "message", "Message"
        CALL = "call", "Call"

    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name="communications")
    type = models.CharField(max_length=10, choices=Type.choices)
    subject = models.CharField(max_length=255, blank=True)
    message = models.TextField(blank=True)
    sent_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    sent_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-sent_at", "-id"]


class ApplicationView(models.Model):
    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name="viewers")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="+")
    viewed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("application", "user")
