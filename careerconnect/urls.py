from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path, re_path

from jobs import views as job_views

from . import views

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/", include("accounts.urls")),
    path("api/profile/", include("accounts.profile_urls")),
    path("api/admin/", include("accounts.admin_urls")),
    path("api/company/", include("companies.urls")),
    path("api/jobs/", include("jobs.urls")),
    path("api/search", job_views.global_search, name="global_search"),
    path("api/applications/", include("applications.urls")),
    path("api/notifications/", include("notifications.urls")),
    path("api/contact-us/", include("support.urls")),
    re_path(r"^api/", views.not_found, name="api_not_found"),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

handler404 = "careerconnect.views.not_found"
