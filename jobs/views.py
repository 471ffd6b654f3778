import logging
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.forms.models import model_to_dict
from django.http import Http404
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from accounts.decorators import api_login_required
from accounts.models import _tokenize_csv
from accounts.serializers import user_summary
from applications.models import Application
from applications.views import submit_application
from careerconnect.api import (
    _paginate,
    _safe_bool,
    _safe_int,
    form_error,
    json_error,
    json_ok,
    page_params,
    payload,
)
from companies import permissions
from companies.models import Company

from .forms import JobForm, JobStatusForm, normalize_job_payload
from .models import Job, SavedJob
from .serializers import job_to_dict

logger = logging.getLogger(__name__)
User = get_user_model()

EXPERIENCE_LEVELS = {
    "entry": Q(experience_min_years__lte=2),
    "mid": Q(experience_min_years__gt=2, experience_min_years__lte=5),
    "senior": Q(experience_min_years__gt=5),
}

SORT_FIELDS = {
    "createdAt": "created_at",
    "title": "title",
    "salary": "salary_min",
    "views": "views",
}


def get_job_or_404(job_id: int) -> Job:
    job = Job.objects.select_related("company", "company__owner", "posted_by").filter(pk=job_id).first()
    if job is None:
        raise Http404("Job not found")
    return job


def _filtered_jobs(request):
    qs = Job.objects.visible().select_related("company", "posted_by")
    params = request.GET

    status = params.get("status", "active")
    if status:
        qs = qs.filter(status=status)

    search = (params.get("search") or "").strip()
    if search:
        qs = qs.filter(Q(title__icontains=search) | Q(description__icontains=search) | Q(skills__icontains=search))

    location = (params.get("location") or "").strip()
    if location:
        if location.lower() == "remote":
            qs = qs.filter(is_remote=True)
        else:
            qs = qs.filter(location__icontains=location)

    employment_type = (params.get("employmentType") or "").strip()
    if employment_type:
        qs = qs.filter(employment_type=employment_type)

    level = EXPERIENCE_LEVELS.get(params.get("experience") or "")
    if level is not None:
        qs = qs.filter(level)

    # Salary ranges overlap the requested bounds.
    min_salary = _safe_int(params.get("minSalary"))
    max_salary = _safe_int(params.get("maxSalary"))
    if min_salary is not None:
        qs = qs.filter(Q(salary_min__gte=min_salary) | Q(salary_max__gte=min_salary))
    if max_salary is not None:
        qs = qs.filter(Q(salary_max__lte=max_salary) | Q(salary_min__lte=max_salary))

    company_id = _safe_int(params.get("companyId"))
    if company_id:
        qs = qs.filter(company_id=company_id)
    industry = (params.get("industry") or "").strip()
    if industry:
        qs = qs.filter(company__industry__icontains=industry)

    for param, field in (("isRemote", "is_remote"), ("isUrgent", "is_urgent"), ("isFeatured", "is_featured")):
        if _safe_bool(params.get(param)):
            qs = qs.filter(**{field: True})

    field = SORT_FIELDS.get(params.get("sortBy") or "createdAt", "created_at")
    prefix = "" if params.get("sortOrder") == "asc" else "-"
    return qs.order_by(f"{prefix}{field}", f"{prefix}id")


# -----------------------------
# Collection: list + create
# -----------------------------
@require_http_methods(["GET", "POST"])
def job_collection(request):
    if request.method == "POST":
        if not request.user.is_authenticated:
            return json_error(getattr(request, "auth_error", None) or "Authentication required", status=401)
        return _create_job(request)

    qs = _filtered_jobs(request)
    page, limit = page_params(request, default_limit=20)
    paginator, page_obj = _paginate(qs, page, limit)
    params = request.GET
    return json_ok(
        {
            "jobs": [job_to_dict(job, detail=True) for job in page_obj.object_list],
            "total": paginator.count,
            "page": page_obj.number,
            "pages": paginator.num_pages,
            "filters": {
                "search": params.get("search"),
                "location": params.get("location"),
                "employmentType": params.get("employmentType"),
                "experience": params.get("experience"),
                "industry": params.get("industry"),
            },
        }
    )


def _create_job(request):
    data = payload(request)
    company_id = _safe_int(data.get("companyId") or data.get("company"))
    if not company_id:
        return json_error("Company ID is required", status=400)
    company = Company.objects.filter(pk=company_id).first()
    if company is None:
        return json_error("Company not found", status=404)
    if not company.is_active:
        return json_error("Company is not active", status=400)
    if not permissions.can_manage_company(request.user, company):
        raise PermissionDenied("You don't have permission to post jobs for this company")

    form = JobForm(normalize_job_payload(data), creating=True)
    if not form.is_valid():
        return form_error(form)
    job = form.save(commit=False)
    job.company = company
    job.posted_by = request.user
    job.save()
    logger.info("Job created: job_id=%s company_id=%s by=%s", job.pk, company.pk, request.user.pk)
    return json_ok({"message": "Job created successfully", "job": job_to_dict(job, detail=True)}, status=201)


# -----------------------------
# Single job
# -----------------------------
@require_http_methods(["GET", "PUT", "PATCH", "DELETE"])
def job_detail(request, job_id: int):
    job = get_job_or_404(job_id)

    if request.method == "GET":
        if not job.company.is_active:
            raise Http404("Job not found")
        job.increment_views()
        return json_ok({"job": job_to_dict(job, detail=True)})

    if not request.user.is_authenticated:
        return json_error(getattr(request, "auth_error", None) or "Authentication required", status=401)
    permissions.require_edit_job(request.user, job)

    if request.method == "DELETE":
        job.delete()
        logger.info("Job deleted: job_id=%s by=%s", job_id, request.user.pk)
        return json_ok(message="Job deleted successfully")

    data = model_to_dict(job, fields=JobForm.Meta.fields)
    data.update({k: v for k, v in normalize_job_payload(payload(request)).items() if k in data})
    form = JobForm(data, instance=job)
    if not form.is_valid():
        return form_error(form)
    job = form.save()
    logger.info("Job updated: job_id=%s by=%s", job.pk, request.user.pk)
    return json_ok({"message": "Job updated successfully", "job": job_to_dict(job, detail=True)})


@require_http_methods(["PUT", "PATCH"])
@api_login_required
def job_status(request, job_id: int):
    job = get_job_or_404(job_id)
    permissions.require_edit_job(request.user, job)
    form = JobStatusForm(payload(request))
    if not form.is_valid():
        return form_error(form)

    previous = job.status
    job.status = form.cleaned_data["status"]
    if job.status == Job.Status.ACTIVE and job.is_expired:
        job.expires_at = timezone.now() + timedelta(days=30)
    job.save(update_fields=["status", "updated_at"])
    logger.info("Job status changed: job_id=%s %s -> %s by=%s", job.pk, previous, job.status, request.user.pk)
    return json_ok({"message": f"Job status updated to {job.status}", "job": job_to_dict(job)})


@require_POST
@api_login_required
def job_apply(request, job_id: int):
    return submit_application(request, job_id=job_id)


# -----------------------------
# Per-user listings
# -----------------------------
@require_GET
@api_login_required
def my_jobs(request):
    companies = Company.objects.for_user(request.user).active()
    jobs = (
        Job.objects.filter(company__in=companies)
        .select_related("company", "posted_by")
        .annotate(application_count=Count("applications"))
        .order_by("-created_at", "-id")
    )
    return json_ok({"jobs": [job_to_dict(job) for job in jobs]})


@require_GET
@api_login_required
def applied_jobs(request):
    applications = (
        Application.objects.filter(applicant=request.user)
        .select_related("job", "job__company")
        .order_by("-applied_at")
    )
    jobs = []
    for app in applications:
        item = job_to_dict(app.job)
        item.update({"applicationId": app.id, "applicationStatus": app.status, "appliedAt": app.applied_at.isoformat()})
        jobs.append(item)
    return json_ok({"jobs": jobs})


@require_GET
def company_jobs(request, company_id: int):
    company = Company.objects.filter(pk=company_id).first()
    if company is None:
        raise Http404("Company not found")
    qs = Job.objects.for_company(company, request.GET.get("status") or None).select_related("company", "posted_by")
    if not permissions.can_manage_company(request.user, company):
        qs = qs.filter(status=Job.Status.ACTIVE)
    qs = qs.annotate(application_count=Count("applications"))
    return json_ok({"jobs": [job_to_dict(job) for job in qs]})


@require_GET
def recent_jobs(request):
    limit = min(max(1, _safe_int(request.GET.get("limit"), 10)), 50)
    jobs = Job.objects.active().visible().select_related("company").order_by("-created_at", "-id")[:limit]
    return json_ok({"jobs": [job_to_dict(job) for job in jobs]})


@require_GET
def search_suggestions(request):
    q = (request.GET.get("q") or "").strip()
    if len(q) < 2:
        return json_ok({"suggestions": []})

    active = Job.objects.filter(status=Job.Status.ACTIVE)
    titles = list(active.filter(title__icontains=q).order_by("title").values_list("title", flat=True).distinct()[:5])
    companies = list(
        Company.objects.active().filter(name__icontains=q).order_by("name").values_list("name", flat=True)[:5]
    )
    locations = list(
        active.filter(location__icontains=q).order_by("location").values_list("location", flat=True).distinct()[:5]
    )
    skills: list[str] = []
    needle = q.lower()
    for raw in active.filter(skills__icontains=q).values_list("skills", flat=True)[:50]:
        for skill in _tokenize_csv(raw):
            if needle in skill.lower() and skill not in skills:
                skills.append(skill)
        if len(skills) >= 5:
            break
    return json_ok(
        {"suggestions": {"titles": titles, "companies": companies, "skills": skills[:5], "locations": locations}}
    )


@require_GET
def stats_overview(request):
    active = Job.objects.filter(status=Job.Status.ACTIVE)
    since = timezone.now() - timedelta(days=30)
    by_type = active.order_by().values("employment_type").annotate(count=Count("id")).order_by("-count")
    by_industry = (
        active.order_by().values("company__industry").annotate(count=Count("id")).order_by("-count")[:10]
    )
    return json_ok(
        {
            "total": active.count(),
            "recent": active.filter(created_at__gte=since).count(),
            "urgent": active.filter(is_urgent=True).count(),
            "remote": active.filter(is_remote=True).count(),
            "featured": active.filter(is_featured=True).count(),
            "byType": [{"type": row["employment_type"], "count": row["count"]} for row in by_type],
            "byIndustry": [{"industry": row["company__industry"], "count": row["count"]} for row in by_industry],
        }
    )


# -----------------------------
# Saved jobs / application check
# -----------------------------
@require_http_methods(["POST", "DELETE"])
@api_login_required
def job_bookmark(request, job_id: int):
    job = get_job_or_404(job_id)
    if request.method == "DELETE":
        deleted, _ = SavedJob.objects.filter(user=request.user, job=job).delete()
        if not deleted:
            return json_error("Job not found in saved jobs", status=400)
        return json_ok({"message": "Job removed from saved jobs", "isBookmarked": False})

    try:
        with transaction.atomic():
            SavedJob.objects.create(user=request.user, job=job)
    except IntegrityError:
        return json_error("Already saved this job", status=400)
    logger.info("Job saved: job_id=%s user_id=%s", job.pk, request.user.pk)
    return json_ok({"message": "Job saved successfully", "isBookmarked": True})


@require_GET
@api_login_required
def job_bookmark_check(request, job_id: int):
    return json_ok({"isBookmarked": SavedJob.objects.filter(user=request.user, job_id=job_id).exists()})


@require_GET
@api_login_required
def application_check(request, job_id: int):
    app = Application.objects.filter(job_id=job_id, applicant=request.user).first()
    return json_ok(
        {
            "hasApplied": app is not None,
            "application": (
                {"id": app.id, "status": app.status, "appliedAt": app.applied_at.isoformat()} if app else None
            ),
        }
    )


# -----------------------------
# Site-wide search
# -----------------------------
@require_GET
def global_search(request):
    q = (request.GET.get("q") or "").strip()
    if not q:
        return json_ok({"jobs": [], "users": []})

    jobs = (
        Job.objects.active()
        .visible()
        .select_related("company")
        .filter(
            Q(title__icontains=q)
            | Q(company__name__icontains=q)
            | Q(description__icontains=q)
            | Q(location__icontains=q)
        )[:10]
    )
    users = User.objects.filter(is_active=True).filter(
        Q(name__icontains=q) | Q(email__icontains=q) | Q(role__icontains=q) | Q(skills__icontains=q)
    )[:10]
    return json_ok(
        {
            "jobs": [
                {
                    "id": job.id,
                    "title": job.title,
                    "companyName": job.company.name,
                    "location": job.location,
                    "employmentType": job.employment_type,
                }
                for job in jobs
            ],
            "users": [dict(user_summary(u), location=u.location) for u in users],
        }
    )
