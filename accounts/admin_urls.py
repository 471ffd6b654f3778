from django.urls import path
from . import views

urlpatterns = [
    path("check", views.admin_check, name="admin_check"),
    path("emails", views.admin_emails, name="admin_emails"),
    path("users", views.admin_users, name="admin_users"),
    path("stats", views.admin_stats, name="admin_stats"),
    path("staff", views.staff_collection, name="admin_staff"),
    path("staff/<int:staff_id>", views.staff_item, name="admin_staff_item"),
]
