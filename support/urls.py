from django.urls import path

from . import views

urlpatterns = [
    path("", views.submit, name="contact_submit"),
    path("check-admin", views.check_admin, name="contact_check_admin"),
    path("check-staff", views.check_staff, name="contact_check_staff"),
    path("all", views.message_list, name="contact_list"),
    path("stats", views.message_stats, name="contact_stats"),
    path("export", views.export_csv, name="contact_export"),
    path("user/messages", views.user_messages, name="contact_user_messages"),
    path("user/messages/unread-count", views.user_unread_count, name="contact_user_unread_count"),
    path("user/<int:message_id>", views.user_message_detail, name="contact_user_detail"),
    path("user/<int:message_id>/reply", views.user_message_reply, name="contact_user_reply"),
    path("<int:message_id>", views.message_detail, name="contact_detail"),
    path("<int:message_id>/status", views.message_status, name="contact_status"),
    path("<int:message_id>/read", views.message_read, name="contact_read"),
    path("<int:message_id>/reply", views.message_reply, name="contact_reply"),
    path("<int:message_id>/note", views.message_note, name="contact_note"),
]
