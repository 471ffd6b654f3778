from django.contrib import admin

from .models import Application, ApplicationEvent, ApplicationNote, Communication


class ApplicationEventInline(admin.TabularInline):
    model = ApplicationEvent
    extra = 0
    raw_id_fields = ("performed_by",)


class ApplicationNoteInline(admin.TabularInline):
    model = ApplicationNote
    extra = 0
    raw_id_fields = ("added_by",)


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "job", "company", "status", "score", "skills_match", "applied_at")
    list_filter = ("status",)
    search_fields = ("name", "email", "job__title", "company__name")
    raw_id_fields = ("job", "company", "applicant")
    inlines = [ApplicationEventInline, ApplicationNoteInline]


@admin.register(Communication)
class CommunicationAdmin(admin.ModelAdmin):
    list_display = ("application", "type", "subject", "sent_by", "sent_at")
    list_filter = ("type",)
