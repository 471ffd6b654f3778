from django.urls import path

from . import views

urlpatterns = [
    path("", views.job_collection, name="job_list"),
    path("user/my-jobs", views.my_jobs, name="my_jobs"),
    path("user/applied", views.applied_jobs, name="applied_jobs"),
    path("company/<int:company_id>", views.company_jobs, name="company_jobs"),
    path("recent", views.recent_jobs, name="recent_jobs"),
    path("search/suggestions", views.search_suggestions, name="job_search_suggestions"),
    path("stats/overview", views.stats_overview, name="job_stats_overview"),
    path("<int:job_id>", views.job_detail, name="job_detail"),
    path("<int:job_id>/status", views.job_status, name="job_status"),
    path("<int:job_id>/apply", views.job_apply, name="job_apply"),
    path("<int:job_id>/bookmark", views.job_bookmark, name="job_bookmark"),
    path("<int:job_id>/bookmark/check", views.job_bookmark_check, name="job_bookmark_check"),
    path("<int:job_id>/application/check", views.application_check, name="job_application_check"),
]
