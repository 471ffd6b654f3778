import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count, Q
from django.http import Http404
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from accounts.decorators import api_login_required
from careerconnect.api import (
    ApiBadRequest,
    _paginate,
    _safe_int,
    form_error,
    json_error,
    json_field,
    json_ok,
    page_params,
    payload,
    uploaded_files,
)
from notifications.utils import create_in_app_notification

from . import permissions
from .forms import CompanyForm, TeamMemberForm
from .models import Company, CompanyBookmark, CompanyFollow, TeamMember
from .serializers import company_brief, company_to_dict, team_member_to_dict
from .utils import (
    company_recommendations,
    company_stats,
    dashboard_analytics,
    dashboard_summary,
    match_type,
    similar_companies,
    similarity_score,
    track_company_view,
    view_analytics,
)

logger = logging.getLogger(__name__)
User = get_user_model()


def get_company_or_404(company_id, *, active_only: bool = False) -> Company:
    qs = Company.objects.select_related("owner")
    if active_only:
        qs = qs.filter(is_active=True)
    company = qs.filter(pk=company_id).first()
    if company is None:
        raise Http404("Company not found")
    return company


def _company_form_data(request, company: Company | None = None) -> tuple[dict, dict]:
    data = payload(request)
    if "foundedYear" in data:
        data["founded_year"] = data.pop("foundedYear")
    uploads = uploaded_files(request)
    files = {}
    if uploads.get("logo"):
        files["logo"] = uploads["logo"]
    if uploads.get("coverImage"):
        files["cover_image"] = uploads["coverImage"]

    if company is not None:
        merged = {name: getattr(company, name) for name in CompanyForm.Meta.fields if name not in ("logo", "cover_image")}
        merged.update({k: v for k, v in data.items() if k in merged and v is not None})
        return merged, files
    return data, files


# -----------------------------
# Dashboard
# -----------------------------
@require_GET
@api_login_required
def dashboard_summary_view(request):
    result = dashboard_summary(request.user)
    companies = []
    for company in result["companies"]:
        item = company_brief(company)
        item.update({"jobCount": company.job_count, "teamMemberCount": company.member_count})
        companies.append(item)
    return json_ok({"companies": companies, "summary": result["summary"]})


@require_GET
@api_login_required
def dashboard_analytics_view(request):
    return json_ok(dashboard_analytics(request.user))


# -----------------------------
# Create / list / mine
# -----------------------------
@require_POST
@api_login_required
@transaction.atomic
def company_create(request):
    data, files = _company_form_data(request)
    if Company.objects.filter(Q(name__iexact=data.get("name") or "") | Q(email__iexact=data.get("email") or "")).exists():
        return json_error("Company with this name or email already exists", status=400)

    form = CompanyForm(data, files)
    if not form.is_valid():
        return form_error(form)

    company = form.save(commit=False)
    company.owner = request.user
    company.social_links = json_field(data.get("socialLinks"), {})
    company.save()
    TeamMember.objects.create(company=company, user=request.user, role=TeamMember.Role.ADMIN)

    logger.info("Company created: company_id=%s owner=%s", company.pk, request.user.pk)
    return json_ok(
        {"message": "Company created successfully", "company": company_to_dict(company, detail=True)},
        status=201,
    )


@require_GET
def company_list(request):
    qs = Company.objects.active().select_related("owner").annotate(job_count=Count("jobs"))
    industry = (request.GET.get("industry") or "").strip()
    location = (request.GET.get("location") or "").strip()
    size = (request.GET.get("size") or "").strip()
    search = (request.GET.get("search") or "").strip()
    if industry:
        qs = qs.filter(industry__icontains=industry)
    if location:
        qs = qs.filter(location__icontains=location)
    if size:
        qs = qs.filter(size=size)
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(description__icontains=search))

    page, limit = page_params(request)
    paginator, page_obj = _paginate(qs, page, limit)
    companies = []
    for company in page_obj.object_list:
        item = company_to_dict(company)
        item["jobCount"] = company.job_count
        companies.append(item)
    return json_ok(
        {"companies": companies, "total": paginator.count, "page": page_obj.number, "pages": paginator.num_pages}
    )


@require_GET
@api_login_required
def my_companies(request):
    companies = Company.objects.for_user(request.user).select_related("owner")
    return json_ok({"companies": [company_to_dict(c) for c in companies]})


# -----------------------------
# Single company
# -----------------------------
@require_http_methods(["GET", "DELETE"])
def company_detail(request, company_id: int):
    company = get_company_or_404(company_id)

    if request.method == "DELETE":
        if not request.user.is_authenticated:
            return json_error(getattr(request, "auth_error", None) or "Authentication required", status=401)
        permissions.require_owner(request.user, company, "Only company owner can delete the company")
        company.is_active = False
        company.save(update_fields=["is_active", "updated_at"])
        logger.info("Company deactivated: company_id=%s by=%s", company.pk, request.user.pk)
        return json_ok(message="Company deleted successfully")

    if not company.is_active and not permissions.can_administer_company(request.user, company):
        raise Http404("Company not found")
    track_company_view(request, company)
    return json_ok({"company": company_to_dict(company, detail=True)})


@require_GET
def company_stats_view(request, company_id: int):
    company = get_company_or_404(company_id)
    return json_ok(company_stats(company))


@require_GET
@api_login_required
def company_views_view(request, company_id: int):
    company = get_company_or_404(company_id)
    permissions.require_administer(request.user, company)
    return json_ok(view_analytics(company))


@require_http_methods(["PUT", "PATCH", "POST"])
@api_login_required
def company_update(request, company_id: int):
    company = get_company_or_404(company_id)
    permissions.require_administer(request.user, company)

    old_logo = company.logo.name if company.logo else None
    old_cover = company.cover_image.name if company.cover_image else None
    data, files = _company_form_data(request, company)
    form = CompanyForm(data, files, instance=company)
    if not form.is_valid():
        return form_error(form)

    raw = payload(request)
    company = form.save(commit=False)
    if raw.get("socialLinks"):
        links = json_field(raw.get("socialLinks"), {})
        if not isinstance(links, dict):
            raise ApiBadRequest("Invalid social links format")
        company.social_links = {**(company.social_links or {}), **links}
    company.save()

    storage = company.logo.storage
    if files.get("logo") and old_logo:
        storage.delete(old_logo)
    if files.get("cover_image") and old_cover:
        storage.delete(old_cover)

    logger.info("Company updated: company_id=%s by=%s", company.pk, request.user.pk)
    return json_ok({"message": "Company updated successfully", "company": company_to_dict(company, detail=True)})


@require_http_methods(["DELETE"])
@api_login_required
def company_logo_delete(request, company_id: int):
    company = get_company_or_404(company_id)
    permissions.require_administer(request.user, company)
    if not company.logo:
        return json_error("No logo to delete", status=400)
    company.logo.delete(save=False)
    company.logo = None
    company.save(update_fields=["logo", "updated_at"])
    return json_ok(message="Logo deleted successfully")


@require_http_methods(["DELETE"])
@api_login_required
def company_cover_delete(request, company_id: int):
    company = get_company_or_404(company_id)
    permissions.require_administer(request.user, company)
    if not company.cover_image:
        return json_error("No cover image to delete", status=400)
    company.cover_image.delete(save=False)
    company.cover_image = None
    company.save(update_fields=["cover_image", "updated_at"])
    return json_ok(message="Cover image deleted successfully")


# -----------------------------
# Team
# -----------------------------
@require_POST
@api_login_required
def team_add(request, company_id: int):
    company = get_company_or_404(company_id)
    permissions.require_administer(request.user, company)

    form = TeamMemberForm(payload(request))
    if not form.is_valid():
        return form_error(form)
    user = User.objects.filter(pk=form.cleaned_data["userId"], is_active=True).first()
    if user is None:
        return json_error("User not found", status=404)
    if TeamMember.objects.filter(company=company, user=user).exists():
        return json_error("User is already a team member", status=400)

    member = TeamMember.objects.create(
        company=company,
        user=user,
        role=form.cleaned_data["role"],
        permissions=form.cleaned_data.get("permissions") or [],
    )
    create_in_app_notification(
        user,
        title=f"You were added to {company.name}",
        message=f"You are now a {member.role} of {company.name}.",
        url=f"/company/{company.pk}",
    )
    logger.info("Team member added: company_id=%s user_id=%s role=%s", company.pk, user.pk, member.role)
    return json_ok({"message": "Team member added successfully", "teamMember": team_member_to_dict(member)})


@require_http_methods(["DELETE"])
@api_login_required
def team_remove(request, company_id: int, user_id: int):
    company = get_company_or_404(company_id)
    permissions.require_administer(request.user, company)
    if user_id == company.owner_id:
        return json_error("The company owner cannot be removed from the team", status=400)
    deleted, _ = TeamMember.objects.filter(company=company, user_id=user_id).delete()
    if not deleted:
        return json_error("Team member not found", status=404)
    logger.info("Team member removed: company_id=%s user_id=%s by=%s", company.pk, user_id, request.user.pk)
    return json_ok(message="Team member removed successfully")


# -----------------------------
# Follow / bookmark
# -----------------------------
@require_http_methods(["POST", "DELETE"])
@api_login_required
def company_follow(request, company_id: int):
    company = get_company_or_404(company_id)
    user = request.user

    if request.method == "DELETE":
        CompanyFollow.objects.filter(company=company, user=user).delete()
        return json_ok({"message": "Unfollowed company", "isFollowing": False, "followers": company.follows.count()})

    if CompanyFollow.objects.filter(company=company, user=user).exists():
        return json_error("Already following this company", status=400)
    CompanyFollow.objects.create(company=company, user=user)

    if company.owner_id != user.pk:
        create_in_app_notification(
            company.owner,
            title=f"{user.name or 'Someone'} started following {company.name}",
            message=f"{user.name or user.email} started following your company {company.name}.",
            url=f"/company/{company.pk}",
            type="company_follow",
        )
    logger.info("Company followed: company_id=%s user_id=%s", company.pk, user.pk)
    return json_ok({"message": "Following company", "isFollowing": True, "followers": company.follows.count()})


@require_GET
@api_login_required
def company_follow_check(request, company_id: int):
    return json_ok({"isFollowing": CompanyFollow.objects.filter(company_id=company_id, user=request.user).exists()})


@require_http_methods(["POST", "DELETE"])
@api_login_required
def company_bookmark(request, company_id: int):
    company = get_company_or_404(company_id)
    user = request.user

    if request.method == "DELETE":
        CompanyBookmark.objects.filter(company=company, user=user).delete()
        return json_ok({"message": "Bookmark removed", "isBookmarked": False})

    if CompanyBookmark.objects.filter(company=company, user=user).exists():
        return json_error("Already bookmarked this company", status=400)
    CompanyBookmark.objects.create(company=company, user=user)
    return json_ok({"message": "Company bookmarked", "isBookmarked": True})


@require_GET
@api_login_required
def company_bookmark_check(request, company_id: int):
    return json_ok(
        {"isBookmarked": CompanyBookmark.objects.filter(company_id=company_id, user=request.user).exists()}
    )


# -----------------------------
# Discovery
# -----------------------------
@require_GET
def similar(request):
    industry = (request.GET.get("industry") or "").strip()
    location = (request.GET.get("location") or "").strip()
    if not industry or not location:
        return json_error("Industry and location are required", status=400)

    limit = min(max(1, _safe_int(request.GET.get("limit"), 5)), 50)
    result = similar_companies(industry, location, exclude=_safe_int(request.GET.get("exclude")), limit=limit)
    city = result["city"]
    companies = []
    for company in result["companies"]:
        item = company_brief(company)
        item.update(
            {
                "description": company.description,
                "followers": company.followers,
                "similarity": similarity_score(company, industry, city),
                "matchType": match_type(company, industry, city),
            }
        )
        companies.append(item)
    return json_ok(
        {
            "companies": companies,
            "searchStats": result["searchStats"],
            "searchCriteria": {"industry": industry, "location": location, "city": city, "region": result["region"]},
        }
    )


@require_GET
def recommendations(request, company_id: int):
    company = get_company_or_404(company_id)
    items = []
    for candidate, job_count, jobs in company_recommendations(company):
        item = company_brief(candidate)
        item.update(
            {
                "description": candidate.description,
                "followers": candidate.followers,
                "jobCount": job_count,
                "activeJobs": [{"id": j.id, "title": j.title, "location": j.location} for j in jobs],
            }
        )
        items.append(item)
    return json_ok(
        {"recommendations": items, "basedOn": {"industry": company.industry, "location": company.location}}
    )
