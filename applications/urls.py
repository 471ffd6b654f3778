from django.urls import path

from . import views

urlpatterns = [
    path("", views.application_create, name="application_create"),
    path("my-applications", views.my_applications, name="my_applications"),
    path("company/<int:company_id>", views.company_applications, name="company_applications"),
    path("stats/overall", views.overall_stats, name="application_overall_stats"),
    path("job/<int:job_id>/applicants", views.job_applicants, name="job_applicants"),
    path("job/<int:job_id>/top", views.job_top_candidates, name="job_top_candidates"),
    path("download/resume/<int:application_id>", views.download_resume, name="download_resume"),
    path("<int:application_id>", views.application_detail, name="application_detail"),
    path("<int:application_id>/status", views.application_status, name="application_status"),
    path("<int:application_id>/note", views.application_note, name="application_note"),
    path("<int:application_id>/communication", views.application_communication, name="application_communication"),
    path("<int:application_id>/score", views.application_score, name="application_score"),
]
