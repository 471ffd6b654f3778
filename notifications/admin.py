from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "type", "user", "user_email", "is_read", "created_at")
    list_filter = ("type", "is_read")
    search_fields = ("title", "message", "user_email", "user__email")
