from django.urls import path
from . import views

urlpatterns = [
    path("profile", views.profile, name="profile"),
    path("profile/image", views.profile_image, name="profile_image"),
    path("profile/portfolio-links", views.portfolio_link_add, name="portfolio_link_add"),
    path("profile/portfolio-links/<int:link_id>", views.portfolio_link_delete, name="portfolio_link_delete"),
    path("profile/portfolio-links/<int:link_id>/primary", views.portfolio_link_primary, name="portfolio_link_primary"),
    path("<int:user_id>", views.public_profile, name="public_profile"),
]
