from django.urls import path

from . import views

urlpatterns = [
    path("", views.notification_list, name="notification_list"),
    path("unread-count", views.unread_count, name="notification_unread_count"),
    path("read-all", views.mark_all_read, name="notification_read_all"),
    path("delete-all", views.delete_all, name="notification_delete_all"),
    path("<int:notification_id>", views.notification_detail, name="notification_detail"),
    path("<int:notification_id>/read", views.mark_read, name="notification_read"),
]
