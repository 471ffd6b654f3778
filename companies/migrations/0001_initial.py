# Generated manually (companies, team, follows, bookmarks and page views)
from django.conf import settings
from django.db import migrations, models
import django.core.validators
import django.db.models.deletion
import django.utils.timezone

import companies.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Company",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, unique=True)),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("description", models.TextField(validators=[django.core.validators.MinLengthValidator(50, "Description should be at least 50 characters")])),
                ("website", models.URLField(blank=True)),
                ("location", models.CharField(max_length=255)),
                ("industry", models.CharField(max_length=255)),
                ("size", models.CharField(choices=[("1-10", "1-10"), ("11-50", "11-50"), ("51-200", "51-200"), ("201-500", "201-500"), ("501-1000", "501-1000"), ("1000+", "1000+")], max_length=20)),
                ("founded_year", models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1800, "Founded year seems invalid"), companies.models.validate_founded_year])),
                ("logo", models.FileField(blank=True, null=True, upload_to="company/logos/", validators=[django.core.validators.FileExtensionValidator(["jpeg", "jpg", "png", "gif", "svg"])])),
                ("cover_image", models.FileField(blank=True, null=True, upload_to="company/covers/", validators=[django.core.validators.FileExtensionValidator(["jpeg", "jpg", "png", "gif", "svg"])])),
                ("phone", models.CharField(blank=True, max_length=30)),
                ("social_links", models.JSONField(blank=True, default=dict)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="owned_companies", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-created_at", "-id"], "verbose_name_plural": "companies"},
        ),
        migrations.CreateModel(
            name="TeamMember",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[("admin", "Admin"), ("recruiter", "Recruiter"), ("manager", "Manager"), ("hr", "HR"), ("member", "Member")], default="recruiter", max_length=20)),
                ("permissions", models.JSONField(blank=True, default=list)),
                ("added_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="team_members", to="companies.company")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="company_memberships", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["added_at", "id"], "unique_together": {("company", "user")}},
        ),
        migrations.CreateModel(
            name="CompanyFollow",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="follows", to="companies.company")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="followed_companies", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-created_at"], "unique_together": {("company", "user")}},
        ),
        migrations.CreateModel(
            name="CompanyBookmark",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bookmarks", to="companies.company")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bookmarked_companies", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-created_at"], "unique_together": {("company", "user")}},
        ),
        migrations.CreateModel(
            name="CompanyView",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("user_agent", models.CharField(blank=True, max_length=500)),
                ("source", models.CharField(choices=[("direct", "Direct"), ("search", "Search"), ("social", "Social"), ("referral", "Referral"), ("internal", "Internal")], default="direct", max_length=20)),
                ("viewed_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="views", to="companies.company")),
                ("viewer", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-viewed_at"]},
        ),
    ]
