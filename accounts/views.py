import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from careerconnect.api import (
    ApiBadRequest,
    form_error,
    form_errors,
    json_error,
    json_ok,
    page_params,
    payload,
)
from careerconnect.mailer import send_email
from jobs.models import SavedJob
from jobs.serializers import job_to_dict

from .decorators import admin_email_required, api_login_required, is_admin_email
from .forms import (
    EDUCATION_ALIASES,
    EXPERIENCE_ALIASES,
    EducationForm,
    ExperienceForm,
    ForgotPasswordForm,
    LoginForm,
    PortfolioLinkForm,
    ProfileForm,
    ProfileImageForm,
    RegisterForm,
    ResetPasswordForm,
    StaffForm,
    VerifyCodeForm,
    entry_data,
)
from .models import PortfolioLink, Staff
from .serializers import portfolio_link_to_dict, staff_to_dict, user_summary, user_to_dict
from .tokens import issue_token, revoke_tokens

logger = logging.getLogger(__name__)
User = get_user_model()


def _reset_cache_key(user) -> str:
    return f"password_reset:{user.pk}"


def _reset_ttl() -> int:
    return max(60, int(getattr(settings, "PASSWORD_RESET_CODE_TTL_SECONDS", 600)))


def _valid_reset_codes(user) -> set[str]:
    codes = set()
    cached = cache.get(_reset_cache_key(user))
    if cached:
        codes.add(str(cached))
    sent_at = user.password_reset_sent_at
    if (
        user.password_reset_code
        and sent_at
        and (timezone.now() - sent_at) <= timedelta(seconds=_reset_ttl())
    ):
        codes.add(user.password_reset_code)
    return codes


def _generate_reset_code(user) -> str:
    existing = {str(cache.get(_reset_cache_key(user)) or ""), str(user.password_reset_code or "")}
    for _ in range(20):
        code = f"{secrets.randbelow(900000) + 100000:06d}"
        if code not in existing:
            return code
    return f"{secrets.randbelow(900000) + 100000:06d}"


def _replace_related(user, data: dict) -> None:
    """Replace education/experience entries when the lists are present in ``data``."""
    if "education" in data:
        forms = [EducationForm(entry_data(item, EDUCATION_ALIASES)) for item in (data.get("education") or [])]
        for form in forms:
            if not form.is_valid():
                raise ApiBadRequest("Invalid education entry", errors=form_errors(form))
        user.educations.all().delete()
        for form in forms:
            edu = form.save(commit=False)
            edu.user = user
            edu.save()

    if "experience" in data:
        forms = [ExperienceForm(entry_data(item, EXPERIENCE_ALIASES)) for item in (data.get("experience") or [])]
        for form in forms:
            if not form.is_valid():
                raise ApiBadRequest("Invalid experience entry", errors=form_errors(form))
        user.experiences.all().delete()
        for form in forms:
            exp = form.save(commit=False)
            exp.user = user
            exp.save()
        user.recalculate_total_experience()
        user.save(update_fields=["total_experience"])

    if "portfolioLinks" in data:
        items = data.get("portfolioLinks") or []
        if len(items) > PortfolioLink.MAX_PER_USER:
            raise ApiBadRequest("Maximum 3 portfolio links allowed")
        forms = [PortfolioLinkForm(item if isinstance(item, dict) else {}) for item in items]
        for form in forms:
            if not form.is_valid():
                raise ApiBadRequest("Invalid portfolio link", errors=form_errors(form))
        user.portfolio_links.all().delete()
        primary_seen = False
        for item, form in zip(items, forms):
            link = form.save(commit=False)
            link.user = user
            link.is_primary = bool(item.get("isPrimary")) and not primary_seen
            primary_seen = primary_seen or link.is_primary
            link.save()
        first = user.portfolio_links.order_by("created_at", "id").first()
        if first and not primary_seen:
            first.is_primary = True
            first.save(update_fields=["is_primary"])


@transaction.atomic
def _update_profile(user, data: dict):
    current = {name: getattr(user, name) for name in ProfileForm.Meta.fields}
    current.update({k: v for k, v in data.items() if k in ProfileForm.Meta.fields and v is not None})
    # camelCase aliases sent by clients
    for src, dst in (("currentPosition", "current_position"), ("currentCompany", "current_company")):
        if data.get(src) is not None:
            current[dst] = data[src]
    form = ProfileForm(current, instance=user)
    if not form.is_valid():
        raise ApiBadRequest("Invalid profile data", errors=form_errors(form))
    form.save()
    _replace_related(user, data)
    logger.info("Profile updated: user_id=%s fields=%s", user.pk, sorted(data.keys()))
    return user


# -----------------------------
# Registration / login
# -----------------------------
@require_POST
def register(request):
    form = RegisterForm(payload(request))
    if not form.is_valid():
        return form_error(form)

    email = form.cleaned_data["email"]
    if User.objects.filter(email__iexact=email).exists():
        return json_error("User already exists", status=400)

    user = User.objects.create_user(
        email=email,
        password=form.cleaned_data["password"],
        name=form.cleaned_data["name"],
        age=form.cleaned_data["age"],
        role=form.cleaned_data["role"],
    )
    logger.info("User registered: user_id=%s email=%s role=%s", user.pk, email, user.role)
    return json_ok(
        {"token": issue_token(user), "user": user_to_dict(user), "message": "Registration successful"},
        status=201,
    )


@require_POST
def login(request):
    form = LoginForm(payload(request))
    if not form.is_valid():
        return form_error(form)

    email = form.cleaned_data["email"]
    user = User.objects.filter(email__iexact=email, is_active=True).first()
    if user is None or not user.check_password(form.cleaned_data["password"]):
        logger.info("Login failed: email=%s", email)
        return json_error("Invalid credentials", status=400)

    user.last_login = timezone.now()
    user.save(update_fields=["last_login"])
    logger.info("Login success: user_id=%s role=%s", user.pk, user.role)
    return json_ok({"token": issue_token(user), "user": user_to_dict(user), "message": "Login successful"})


@require_http_methods(["GET", "POST"])
@api_login_required
def logout(request):
    revoke_tokens(request.user)
    logger.info("Logout: user_id=%s", request.user.pk)
    return json_ok(message="Logged out successfully")


@require_POST
@api_login_required
def refresh_token(request):
    return json_ok({"token": issue_token(request.user), "user": user_to_dict(request.user)})


# -----------------------------
# Users
# -----------------------------
@require_GET
@api_login_required
def current_user(request):
    return json_ok({"user": user_to_dict(request.user), "isAdmin": is_admin_email(request.user.email)})


@require_GET
@api_login_required
def user_detail(request, user_id: int):
    user = get_object_or_404(User, pk=user_id, is_active=True)
    return json_ok({"user": user_to_dict(user, private=user.pk == request.user.pk)})


@require_http_methods(["PUT", "PATCH"])
@api_login_required
def user_update(request):
    user = _update_profile(request.user, payload(request))
    return json_ok({"user": user_to_dict(user)})


@require_GET
def user_public(request, user_id: int):
    user = get_object_or_404(User, pk=user_id, is_active=True)
    return json_ok({"user": user_to_dict(user, private=False)})


@require_GET
@api_login_required
def saved_jobs(request, user_id: int):
    if request.user.pk != user_id:
        return json_error("You can only view your own saved jobs", status=403)

    qs = SavedJob.objects.filter(user=request.user, job__company__is_active=True).select_related(
        "job", "job__company"
    )

    search = (request.GET.get("search") or "").strip()
    if search:
        qs = qs.filter(
            Q(job__title__icontains=search)
            | Q(job__company__name__icontains=search)
            | Q(job__skills__icontains=search)
        )

    status_filter = request.GET.get("filter") or "all"
    if status_filter == "active":
        qs = qs.filter(job__status="active")
    elif status_filter == "closed":
        qs = qs.filter(job__status="closed")
    elif status_filter == "expired":
        qs = qs.filter(job__application_deadline__lt=timezone.now())

    sort = request.GET.get("sort") or "recent"
    order = {"recent": ["-saved_at", "-id"], "oldest": ["saved_at", "id"], "title": ["job__title", "id"]}
    qs = qs.order_by(*order.get(sort, order["recent"]))

    page, limit = page_params(request)
    total = qs.count()
    start = (page - 1) * limit
    items = list(qs[start:start + limit])
    total_pages = (total + limit - 1) // limit
    return json_ok(
        {
            "savedJobs": [{"savedAt": s.saved_at.isoformat(), "job": job_to_dict(s.job)} for s in items],
            "totalJobs": total,
            "totalPages": total_pages,
            "currentPage": page,
            "hasNextPage": start + limit < total,
            "hasPrevPage": start > 0,
        }
    )


# -----------------------------
# Password reset (emailed 6-digit code)
# -----------------------------
@require_POST
def forgot_password(request):
    form = ForgotPasswordForm(payload(request))
    if not form.is_valid():
        return form_error(form)

    user = User.objects.filter(email__iexact=form.cleaned_data["email"], is_active=True).first()
    if user is None:
        return json_error("User not found", status=404)

    ttl = _reset_ttl()
    code = _generate_reset_code(user)
    cache.set(_reset_cache_key(user), code, timeout=ttl)
    user.password_reset_code = code
    user.password_reset_sent_at = timezone.now()
    user.save(update_fields=["password_reset_code", "password_reset_sent_at"])

    try:
        send_email(
            to_emails=[user.email],
            subject="Password Reset Verification Code",
            message=f"Your password reset code is: {code}\n\nThe code expires in {ttl // 60} minutes.",
            tag="PASSWORD_RESET",
            meta={"user_id": user.pk},
        )
    except Exception:
        logger.exception("Password reset email failed: user_id=%s", user.pk)
        return json_error("Failed to send verification email", status=500)

    logger.info("Password reset code issued: user_id=%s ttl=%ss", user.pk, ttl)
    return json_ok(message="Verification code sent to email")


@require_POST
def verify_code(request):
    form = VerifyCodeForm(payload(request))
    if not form.is_valid():
        return form_error(form)
    user = User.objects.filter(email__iexact=form.cleaned_data["email"]).first()
    if user is None or form.cleaned_data["code"] not in _valid_reset_codes(user):
        return json_error("Invalid verification code", status=400)
    return json_ok(message="Verification successful. You can now reset your password.")


@require_POST
def reset_password(request):
    form = ResetPasswordForm(payload(request))
    if not form.is_valid():
        return form_error(form)
    user = User.objects.filter(email__iexact=form.cleaned_data["email"]).first()
    if user is None:
        return json_error("User not found", status=404)
    if form.cleaned_data["code"] not in _valid_reset_codes(user):
        return json_error("Invalid verification code", status=400)

    user.set_password(form.cleaned_data["newPassword"])
    user.password_reset_code = None
    user.password_reset_sent_at = None
    user.token_version += 1
    user.save(update_fields=["password", "password_reset_code", "password_reset_sent_at", "token_version"])
    cache.delete(_reset_cache_key(user))
    logger.info("Password reset: user_id=%s", user.pk)
    return json_ok(message="Password reset successfully!")


# -----------------------------
# Profile
# -----------------------------
@require_http_methods(["GET", "PUT", "PATCH"])
@api_login_required
def profile(request):
    if request.method == "GET":
        return json_ok({"user": user_to_dict(request.user)})
    user = _update_profile(request.user, payload(request))
    return json_ok({"user": user_to_dict(user), "message": "Profile updated successfully"})


@require_http_methods(["POST", "DELETE"])
@api_login_required
def profile_image(request):
    user = request.user
    if request.method == "DELETE":
        if not user.profile_image:
            return json_error("No profile image to delete", status=400)
        user.profile_image.delete(save=False)
        user.profile_image = None
        user.save(update_fields=["profile_image"])
        logger.info("Profile image removed: user_id=%s", user.pk)
        return json_ok(message="Profile image removed successfully")

    form = ProfileImageForm(request.POST, request.FILES)
    if not form.is_valid():
        return form_error(form)
    if user.profile_image:
        user.profile_image.delete(save=False)
    user.profile_image = form.cleaned_data["profileImage"]
    user.save(update_fields=["profile_image"])
    logger.info("Profile image uploaded: user_id=%s", user.pk)
    return json_ok({"profileImage": user.profile_image.url, "message": "Profile image uploaded successfully"})


@require_GET
def public_profile(request, user_id: int):
    user = get_object_or_404(User, pk=user_id, is_active=True)
    return json_ok({"user": user_to_dict(user, private=False)})


@require_POST
@api_login_required
def portfolio_link_add(request):
    user = request.user
    if user.portfolio_links.count() >= PortfolioLink.MAX_PER_USER:
        return json_error("Maximum 3 portfolio links allowed", status=400)

    form = PortfolioLinkForm(payload(request))
    if not form.is_valid():
        return form_error(form)
    link = form.save(commit=False)
    link.user = user
    link.is_primary = not user.portfolio_links.exists()
    link.save()
    logger.info("Portfolio link added: user_id=%s link_id=%s", user.pk, link.pk)
    return json_ok(
        {"portfolioLinks": [portfolio_link_to_dict(x) for x in user.portfolio_links.all()]},
        status=201,
    )


@require_http_methods(["DELETE"])
@api_login_required
@transaction.atomic
def portfolio_link_delete(request, link_id: int):
    user = request.user
    link = get_object_or_404(PortfolioLink, pk=link_id, user=user)
    was_primary = link.is_primary
    link.delete()
    if was_primary:
        replacement = user.portfolio_links.order_by("created_at", "id").first()
        if replacement:
            replacement.is_primary = True
            replacement.save(update_fields=["is_primary"])
    return json_ok({"portfolioLinks": [portfolio_link_to_dict(x) for x in user.portfolio_links.all()]})


@require_http_methods(["PUT", "PATCH"])
@api_login_required
@transaction.atomic
def portfolio_link_primary(request, link_id: int):
    user = request.user
    link = get_object_or_404(PortfolioLink, pk=link_id, user=user)
    user.portfolio_links.exclude(pk=link.pk).update(is_primary=False)
    link.is_primary = True
    link.save(update_fields=["is_primary"])
    return json_ok({"portfolioLinks": [portfolio_link_to_dict(x) for x in user.portfolio_links.all()]})


# -----------------------------
# Platform admin (email allow-list)
# -----------------------------
@require_GET
@api_login_required
def admin_check(request):
    is_admin = is_admin_email(request.user.email)
    return json_ok(
        {
            "isAdmin": is_admin,
            "userEmail": request.user.email,
            "adminEmails": list(settings.ADMIN_EMAILS) if is_admin else [],
            "message": "User is admin" if is_admin else "User is not admin",
        }
    )


@require_GET
@admin_email_required
def admin_emails(request):
    emails = list(settings.ADMIN_EMAILS)
    return json_ok({"data": emails, "count": len(emails)})


@require_GET
@admin_email_required
def admin_users(request):
    users = User.objects.filter(email__in=settings.ADMIN_EMAILS).order_by("email")
    return json_ok(
        {
            "data": [user_to_dict(u) for u in users],
            "emailBasedAdmins": list(settings.ADMIN_EMAILS),
            "count": users.count(),
        }
    )


@require_GET
@admin_email_required
def admin_stats(request):
    admins = User.objects.filter(email__in=settings.ADMIN_EMAILS)
    recent = admins.filter(last_login__isnull=False).order_by("-last_login")[:5]
    return json_ok(
        {
            "data": {
                "totalUsers": User.objects.count(),
                "adminUsers": admins.count(),
                "adminEmails": len(settings.ADMIN_EMAILS),
                "recentAdmins": [
                    dict(user_summary(u), lastLogin=u.last_login.isoformat()) for u in recent
                ],
            }
        }
    )


@require_http_methods(["GET", "POST"])
@admin_email_required
def staff_collection(request):
    if request.method == "GET":
        staff = Staff.objects.filter(is_active=True).select_related("created_by")
        return json_ok({"staff": [staff_to_dict(s) for s in staff]})

    data = payload(request)
    email = str(data.get("email") or "").strip().lower()
    existing = Staff.objects.filter(email=email).first() if email else None
    if existing and existing.is_active:
        return json_error("Staff member with this email already exists", status=400)

    form = StaffForm(data, instance=existing)
    if not form.is_valid():
        return form_error(form)
    staff = form.save(commit=False)
    staff.is_active = True
    staff.created_by = request.user
    staff.save()

    if existing:
        logger.info("Staff reactivated: staff_id=%s email=%s by=%s", staff.pk, staff.email, request.user.pk)
        return json_ok({"staff": staff_to_dict(staff), "message": "Staff member reactivated successfully"})
    logger.info("Staff added: staff_id=%s email=%s by=%s", staff.pk, staff.email, request.user.pk)
    return json_ok({"staff": staff_to_dict(staff), "message": "Staff member added successfully"}, status=201)


@require_http_methods(["PUT", "PATCH", "DELETE"])
@admin_email_required
def staff_item(request, staff_id: int):
    staff = Staff.objects.filter(pk=staff_id).first()
    if staff is None:
        return json_error("Staff member not found", status=404)

    if request.method == "DELETE":
        staff.is_active = False
        staff.save(update_fields=["is_active", "updated_at"])
        logger.info("Staff removed: staff_id=%s by=%s", staff.pk, request.user.pk)
        return json_ok(message="Staff member deleted successfully")

    data = payload(request)
    data["email"] = staff.email
    form = StaffForm(data, instance=staff)
    if not form.is_valid():
        return form_error(form)
    staff = form.save()
    logger.info("Staff updated: staff_id=%s by=%s", staff.pk, request.user.pk)
    return json_ok({"staff": staff_to_dict(staff), "message": "Staff member updated successfully"})
