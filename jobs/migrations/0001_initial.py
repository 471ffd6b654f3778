# Generated manually (jobs and saved jobs)
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
    ]

    operations = [
        migrations.CreateModel(
            name="Job",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=100)),
                ("description", models.TextField()),
                ("location", models.CharField(max_length=255)),
                ("employment_type", models.CharField(choices=[("Full-time", "Full-time"), ("Part-time", "Part-time"), ("Contract", "Contract"), ("Internship", "Internship"), ("Temporary", "Temporary"), ("Remote", "Remote")], default="Full-time", max_length=20)),
                ("salary_min", models.PositiveIntegerField(blank=True, null=True)),
                ("salary_max", models.PositiveIntegerField(blank=True, null=True)),
                ("salary_currency", models.CharField(default="USD", max_length=3)),
                ("salary_negotiable", models.BooleanField(default=False)),
                ("salary_period", models.CharField(choices=[("hour", "Per hour"), ("day", "Per day"), ("week", "Per week"), ("month", "Per month"), ("year", "Per year")], default="year", max_length=10)),
                ("skills", models.TextField(blank=True)),
                ("tags", models.CharField(blank=True, max_length=500)),
                ("requirements", models.TextField(blank=True)),
                ("responsibilities", models.TextField(blank=True)),
                ("benefits", models.TextField(blank=True)),
                ("experience_min_years", models.PositiveSmallIntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ("experience_max_years", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("education", models.CharField(choices=[("Any", "Any"), ("High School", "High School"), ("Associate", "Associate"), ("Bachelor", "Bachelor"), ("Master", "Master"), ("PhD", "PhD")], default="Any", max_length=20)),
                ("application_instructions", models.TextField(blank=True)),
                ("status", models.CharField(choices=[("draft", "Draft"), ("active", "Active"), ("paused", "Paused"), ("closed", "Closed"), ("filled", "Filled"), ("archived", "Archived")], db_index=True, default="active", max_length=20)),
                ("is_active", models.BooleanField(default=True)),
                ("is_featured", models.BooleanField(default=False)),
                ("is_urgent", models.BooleanField(default=False)),
                ("is_remote", models.BooleanField(default=False)),
                ("application_deadline", models.DateTimeField(blank=True, null=True)),
                ("expires_at", models.DateTimeField(blank=True, null=True)),
                ("views", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="jobs", to="companies.company")),
                ("posted_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="posted_jobs", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["company", "status"], name="job_company_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="SavedJob",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("saved_at", models.DateTimeField(auto_now_add=True)),
                ("job", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="saved_by", to="jobs.job")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="saved_jobs", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-saved_at"], "unique_together": {("user", "job")}},
        ),
    ]
