from django.urls import path

from . import views

urlpatterns = [
    path("", views.company_list, name="company_list"),
    path("create", views.company_create, name="company_create"),
    path("similar", views.similar, name="company_similar"),
    path("user/my-companies", views.my_companies, name="my_companies"),
    path("dashboard/summary", views.dashboard_summary_view, name="company_dashboard_summary"),
    path("dashboard/analytics", views.dashboard_analytics_view, name="company_dashboard_analytics"),
    path("<int:company_id>", views.company_detail, name="company_detail"),
    path("<int:company_id>/stats", views.company_stats_view, name="company_stats"),
    path("<int:company_id>/views", views.company_views_view, name="company_views"),
    path("<int:company_id>/update", views.company_update, name="company_update"),
    path("<int:company_id>/logo", views.company_logo_delete, name="company_logo_delete"),
    path("<int:company_id>/cover", views.company_cover_delete, name="company_cover_delete"),
    path("<int:company_id>/team/add", views.team_add, name="company_team_add"),
    path("<int:company_id>/team/<int:user_id>", views.team_remove, name="company_team_remove"),
    path("<int:company_id>/follow", views.company_follow, name="company_follow"),
    path("<int:company_id>/follow/check", views.company_follow_check, name="company_follow_check"),
    path("<int:company_id>/bookmark", views.company_bookmark, name="company_bookmark"),
    path("<int:company_id>/bookmark/check", views.company_bookmark_check, name="company_bookmark_check"),
    path("<int:company_id>/recommendations", views.recommendations, name="company_recommendations"),
]
