# Generated manually (applications, timeline, notes, communications and views)
from django.conf import settings
from django.db import migrations, models
import django.core.validators
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("companies", "0001_initial"),
        ("jobs", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Application",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(max_length=254)),
                ("phone", models.CharField(blank=True, max_length=30)),
                ("location", models.CharField(blank=True, max_length=255)),
                ("resume", models.FileField(upload_to="resumes/%Y/%m/", validators=[django.core.validators.FileExtensionValidator(["pdf", "doc", "docx", "txt", "rtf"])])),
                ("cover_letter", models.TextField(blank=True)),
                ("cover_letter_file", models.FileField(blank=True, null=True, upload_to="cover_letters/%Y/%m/", validators=[django.core.validators.FileExtensionValidator(["pdf", "doc", "docx", "txt", "rtf"])])),
                ("portfolio", models.URLField(blank=True)),
                ("linkedin", models.URLField(blank=True)),
                ("portfolio_links", models.JSONField(blank=True, default=list)),
                ("questions", models.JSONField(blank=True, default=list)),
                ("additional_info", models.TextField(blank=True)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("reviewed", "Reviewed"), ("shortlisted", "Shortlisted"), ("interview", "Interview"), ("accepted", "Accepted"), ("rejected", "Rejected"), ("withdrawn", "Withdrawn")], db_index=True, default="pending", max_length=20)),
                ("score", models.PositiveSmallIntegerField(default=0, validators=[django.core.validators.MaxValueValidator(100)])),
                ("skills_match", models.PositiveSmallIntegerField(default=0, validators=[django.core.validators.MaxValueValidator(100)])),
                ("rejection_reason", models.TextField(blank=True)),
                ("interview_scheduled_at", models.DateTimeField(blank=True, null=True)),
                ("interview_type", models.CharField(blank=True, choices=[("phone", "Phone"), ("video", "Video"), ("in-person", "In person")], max_length=20)),
                ("interview_location", models.CharField(blank=True, max_length=255)),
                ("interview_notes", models.TextField(blank=True)),
                ("interview_feedback", models.TextField(blank=True)),
                ("interview_rating", models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ("applicant_metadata", models.JSONField(blank=True, default=dict)),
                ("viewed_at", models.DateTimeField(blank=True, null=True)),
                ("last_viewed_at", models.DateTimeField(blank=True, null=True)),
                ("applied_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("applicant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="applications", to=settings.AUTH_USER_MODEL)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="applications", to="companies.company")),
                ("job", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="applications", to="jobs.job")),
            ],
            options={"ordering": ["-applied_at", "-id"], "unique_together": {("job", "applicant")}},
        ),
        migrations.CreateModel(
            name="ApplicationEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(choices=[("applied", "Applied"), ("status_updated", "Status updated"), ("reviewed", "Reviewed"), ("interview_scheduled", "Interview scheduled"), ("accepted", "Accepted"), ("rejected", "Rejected"), ("withdrawn", "Withdrawn"), ("note_added", "Note added"), ("communication_sent", "Communication sent")], max_length=30)),
                ("notes", models.TextField(blank=True)),
                ("previous_status", models.CharField(blank=True, max_length=20)),
                ("new_status", models.CharField(blank=True, max_length=20)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("application", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="timeline", to="applications.application")),
                ("performed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["created_at", "id"]},
        ),
        migrations.CreateModel(
            name="ApplicationNote",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("note", models.TextField()),
                ("added_at", models.DateTimeField(auto_now_add=True)),
                ("added_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("application", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notes", to="applications.application")),
            ],
            options={"ordering": ["-added_at", "-id"]},
        ),
        migrations.CreateModel(
            name="Communication",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=[("email", "Email"), ("message", "Message"), ("call", "Call")], max_length=10)),
                ("subject", models.CharField(blank=True, max_length=255)),
                ("message", models.TextField(blank=True)),
                ("sent_at", models.DateTimeField(auto_now_add=True)),
                ("application", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="communications", to="applications.application")),
                ("sent_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-sent_at", "-id"]},
        ),
        migrations.CreateModel(
            name="ApplicationView",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("viewed_at", models.DateTimeField(auto_now_add=True)),
                ("application", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="viewers", to="applications.application")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={"unique_together": {("application", "user")}},
        ),
    ]
