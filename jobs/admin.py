from django.contrib import admin

from .models import Job, SavedJob


@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "company", "employment_type", "status", "is_featured", "is_urgent", "created_at")
    list_filter = ("status", "employment_type", "is_remote", "is_featured", "is_urgent")
    search_fields = ("title", "description", "skills", "company__name")
    raw_id_fields = ("company", "posted_by")


@admin.register(SavedJob)
class SavedJobAdmin(admin.ModelAdmin):
    list_display = ("user", "job", "saved_at")
    raw_id_fields = ("user", "job")
