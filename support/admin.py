from django.contrib import admin

from .models import ContactMessage, Reply


class ReplyInline(admin.TabularInline):
    model = Reply
    extra = 0


@admin.register(ContactMessage)
class ContactMessageAdmin(admin.ModelAdmin):
    list_display = ("id", "subject", "email", "category", "status", "company", "is_read", "is_deleted", "created_at")
    list_filter = ("status", "category", "is_read", "is_deleted")
    search_fields = ("name", "email", "subject", "message")
    raw_id_fields = ("user", "assigned_to", "company")
    inlines = [ReplyInline]
