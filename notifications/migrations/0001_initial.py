# Generated manually (in-app notifications)
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import notifications.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("support", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_email", models.EmailField(blank=True, max_length=254)),
                ("type", models.CharField(choices=[("message_status_changed", "Message status changed"), ("message_replied", "Message replied"), ("new_message", "New message"), ("system", "System"), ("application_status", "Application status"), ("new_application", "New application"), ("company_follow", "Company follow")], default="system", max_length=40)),
                ("title", models.CharField(max_length=200)),
                ("message", models.TextField(max_length=1000)),
                ("related_data", models.JSONField(blank=True, default=dict)),
                ("is_conversational", models.BooleanField(default=False)),
                ("is_read", models.BooleanField(default=False)),
                ("read_at", models.DateTimeField(blank=True, null=True)),
                ("action_url", models.CharField(blank=True, max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("expires_at", models.DateTimeField(blank=True, db_index=True, default=notifications.models._default_expiry, null=True)),
                ("related_message", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to="support.contactmessage")),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
