from django.urls import path
from . import views

urlpatterns = [
    path("register", views.register, name="auth_register"),
    path("login", views.login, name="auth_login"),
    path("logout", views.logout, name="auth_logout"),
    path("refresh-token", views.refresh_token, name="auth_refresh_token"),
    path("user", views.current_user, name="auth_user"),
    path("user/update", views.user_update, name="auth_user_update"),
    path("user/<int:user_id>", views.user_detail, name="auth_user_detail"),
    path("user-public/<int:user_id>", views.user_public, name="auth_user_public"),
    path("forgot-password", views.forgot_password, name="auth_forgot_password"),
    path("verify-code", views.verify_code, name="auth_verify_code"),
    path("reset-password", views.reset_password, name="auth_reset_password"),
    path("<int:user_id>/saved-jobs", views.saved_jobs, name="auth_saved_jobs"),
]
