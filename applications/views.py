import logging
import mimetypes
import os
from datetime import timedelta

from django.core.exceptions import PermissionDenied
from django.db import IntegrityError, transaction
from django.db.models import Avg, Count
from django.db.models.functions import TruncMonth
from django.http import FileResponse, Http404
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from accounts.decorators import api_login_required
from careerconnect.api import (
    _paginate,
    _safe_int,
    form_error,
    json_error,
    json_field,
    json_ok,
    page_params,
    payload,
)
from companies import permissions
from companies.models import Company
from jobs.models import Job

from .forms import ApplicationForm, CommunicationForm, InterviewDetailsForm, NoteForm, ScoreForm, StatusUpdateForm
from .models import Application
from .serializers import application_to_dict, communication_to_dict, note_to_dict
from .utils import notify_new_application, send_application_status_notification

logger = logging.getLogger(__name__)

RESUME_CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
    ".rtf": "application/rtf",
}


def get_application_or_404(application_id: int) -> Application:
    application = (
        Application.objects.select_related("job", "company", "company__owner", "applicant")
        .filter(pk=application_id)
        .first()
    )
    if application is None:
        raise Http404("Application not found")
    return application


def _require_view(user, application):
    if application.applicant_id == user.pk or permissions.can_manage_company(user, application.company):
        return
    raise PermissionDenied("You don't have permission to view this application")


def _require_manage(user, application, message: str):
    if not permissions.can_manage_company(user, application.company):
        raise PermissionDenied(message)


# -----------------------------
# Submit
# -----------------------------
@transaction.atomic
def submit_application(request, job_id: int | None = None):
    """Create an application for ``job_id`` (or the posted ``jobId``). Shared by ``POST /api/jobs/<id>/apply``."""
    data = payload(request)
    if job_id is not None:
        data["jobId"] = job_id
    form = ApplicationForm(data, request.FILES)
    if not form.is_valid():
        return form_error(form)
    cd = form.cleaned_data

    job = Job.objects.active().visible().select_related("company").filter(pk=cd["jobId"]).first()
    if job is None:
        return json_error("Job not found or no longer available", status=404)
    if Application.objects.filter(job=job, applicant=request.user).exists():
        return json_error("You have already applied for this job", status=400)
    if not cd.get("resume"):
        return json_error("Resume is required", status=400)

    user = request.user
    application = Application(
        job=job,
        company=job.company,
        applicant=user,
        name=user.name or user.email,
        email=user.email,
        phone=cd.get("phone") or "",
        location=cd.get("location") or "",
        resume=cd["resume"],
        cover_letter_file=cd.get("coverLetter"),
        cover_letter="" if cd.get("coverLetter") else (cd.get("coverLetterText") or ""),
        portfolio=cd.get("portfolio") or "",
        linkedin=cd.get("linkedin") or "",
        portfolio_links=json_field(cd.get("portfolioLinks"), []),
        questions=json_field(cd.get("questions"), []),
        additional_info=cd.get("additionalInfo") or "",
    )
    application.snapshot_applicant()
    application.calculate_match_score(job)
    try:
        with transaction.atomic():
            application.save()
    except IntegrityError:
        return json_error("You have already applied for this job", status=400)
    application.log("applied", user, "Application submitted")

    notify_new_application(application)
    logger.info("Application submitted: app_id=%s job_id=%s user_id=%s", application.pk, job.pk, user.pk)
    return json_ok(
        {"message": "Application submitted successfully", "application": application_to_dict(application)},
        status=201,
    )


@require_POST
@api_login_required
def application_create(request):
    return submit_application(request)


# -----------------------------
# Listings
# -----------------------------
@require_GET
@api_login_required
def my_applications(request):
    base = Application.objects.filter(applicant=request.user)
    qs = base.select_related("job", "company", "applicant")
    status = (request.GET.get("status") or "").strip()
    if status:
        qs = qs.by_status(status)

    page, limit = page_params(request)
    paginator, page_obj = _paginate(qs, page, limit)
    stats = dict(base.order_by().values_list("status").annotate(n=Count("id")))
    return json_ok(
        {
            "applications": [application_to_dict(a) for a in page_obj.object_list],
            "total": paginator.count,
            "page": page_obj.number,
            "pages": paginator.num_pages,
            "stats": stats,
        }
    )


@require_GET
@api_login_required
def company_applications(request, company_id: int):
    company = Company.objects.filter(pk=company_id).first()
    if company is None:
        raise Http404("Company not found")
    if not permissions.can_manage_company(request.user, company):
        raise PermissionDenied("You don't have permission to view company applications")

    qs = Application.objects.for_company(company).select_related("job", "company", "applicant")
    status = (request.GET.get("status") or "").strip()
    job_id = _safe_int(request.GET.get("jobId"))
    if status:
        qs = qs.by_status(status)
    if job_id:
        qs = qs.filter(job_id=job_id)
    qs = Application.search(qs, request.GET.get("search"))

    page, limit = page_params(request)
    paginator, page_obj = _paginate(qs, page, limit)
    job = Job.objects.filter(pk=job_id, company=company).first() if job_id else None
    return json_ok(
        {
            "applications": [application_to_dict(a) for a in page_obj.object_list],
            "total": paginator.count,
            "page": page_obj.number,
            "pages": paginator.num_pages,
            "stats": Application.stats(company, job),
        }
    )


@require_GET
@api_login_required
def job_applicants(request, job_id: int):
    job = Job.objects.select_related("company").filter(pk=job_id).first()
    if job is None:
        raise Http404("Job not found")
    if not permissions.can_manage_company(request.user, job.company):
        raise PermissionDenied("You don't have permission to view job applicants")

    qs = Application.objects.filter(job=job).select_related("job", "company", "applicant")
    status = (request.GET.get("status") or "").strip()
    if status:
        qs = qs.by_status(status)
    qs = Application.search(qs, request.GET.get("search"))
    applications = [application_to_dict(a) for a in qs]
    return json_ok(
        {
            "applications": applications,
            "total": len(applications),
            "job": {"id": job.id, "title": job.title, "company": job.company.name},
        }
    )


@require_GET
@api_login_required
def job_top_candidates(request, job_id: int):
    job = Job.objects.select_related("company").filter(pk=job_id).first()
    if job is None:
        raise Http404("Job not found")
    permissions.require_manage(request.user, job.company)
    limit = min(max(1, _safe_int(request.GET.get("limit"), 10)), 50)
    return json_ok(
        {"candidates": [application_to_dict(a) for a in Application.top_candidates(job, limit)]}
    )


# -----------------------------
# Single application
# -----------------------------
@require_http_methods(["GET", "DELETE"])
@api_login_required
def application_detail(request, application_id: int):
    application = get_application_or_404(application_id)
    if request.method == "DELETE":
        return _withdraw(request, application)

    _require_view(request.user, application)
    return json_ok({"application": application_to_dict(application, detail=True)})


def _withdraw(request, application):
    if application.applicant_id != request.user.pk:
        return json_error("You can only withdraw your own applications", status=403)
    if not application.can_transition(Application.Status.WITHDRAWN, by_applicant=True):
        return json_error(
            f"Application cannot be withdrawn because it's already {application.status}", status=400
        )
    with transaction.atomic():
        application.update_status(Application.Status.WITHDRAWN, request.user, "Application withdrawn by applicant")
        application.add_note("Application withdrawn by the applicant", request.user)
    logger.info("Application withdrawn: app_id=%s user_id=%s", application.pk, request.user.pk)
    return json_ok({"message": "Application withdrawn successfully", "application": application_to_dict(application)})


@require_http_methods(["PUT", "PATCH"])
@api_login_required
def application_status(request, application_id: int):
    application = get_application_or_404(application_id)
    _require_manage(request.user, application, "You don't have permission to update application status")

    form = StatusUpdateForm(payload(request))
    if not form.is_valid():
        return form_error(form)
    cd = form.cleaned_data
    status = cd["status"]

    if application.status == Application.Status.WITHDRAWN:
        return json_error("Cannot change the status of a withdrawn application", status=400)
    if not application.can_transition(status):
        return json_error("Only the applicant can withdraw an application", status=400)

    interview = None
    if status == Application.Status.INTERVIEW and cd.get("interviewDetails"):
        details = json_field(cd["interviewDetails"], {})
        interview = InterviewDetailsForm(details if isinstance(details, dict) else {})
        if not interview.is_valid():
            return form_error(interview)

    previous = application.status
    with transaction.atomic():
        event = application.update_status(status, request.user, cd.get("notes") or "")
        fields = []
        if status == Application.Status.REJECTED and cd.get("rejectionReason"):
            application.rejection_reason = cd["rejectionReason"]
            fields.append("rejection_reason")
        if interview is not None:
            idata = interview.cleaned_data
            mapping = {
                "scheduledDate": "interview_scheduled_at",
                "interviewType": "interview_type",
                "location": "interview_location",
                "notes": "interview_notes",
                "feedback": "interview_feedback",
                "rating": "interview_rating",
            }
            for key, field in mapping.items():
                if key in interview.data and idata.get(key) not in (None, ""):
                    setattr(application, field, idata[key])
                    fields.append(field)
        if fields:
            application.save(update_fields=fields + ["updated_at"])

    if previous != status:
        send_application_status_notification(application, previous_status=previous)
    logger.info(
        "Application status changed: app_id=%s %s -> %s by=%s", application.pk, previous, status, request.user.pk
    )
    return json_ok(
        {
            "message": "Application status updated",
            "application": application_to_dict(application, detail=True),
            "statusChange": {
                "action": event.action,
                "previousStatus": event.previous_status,
                "newStatus": event.new_status,
                "notes": event.notes,
            },
        }
    )


@require_POST
@api_login_required
def application_note(request, application_id: int):
    application = get_application_or_404(application_id)
    _require_manage(request.user, application, "You don't have permission to add notes")
    form = NoteForm(payload(request))
    if not form.is_valid():
        return form_error(form)
    note = application.add_note(form.cleaned_data["note"], request.user)
    return json_ok({"message": "Note added successfully", "note": note_to_dict(note)})


@require_POST
@api_login_required
def application_communication(request, application_id: int):
    application = get_application_or_404(application_id)
    _require_manage(request.user, application, "You don't have permission to send communications")
    form = CommunicationForm(payload(request))
    if not form.is_valid():
        return form_error(form)
    cd = form.cleaned_data
    communication = application.add_communication(cd["type"], cd["subject"], cd["message"], request.user)
    return json_ok(
        {"message": "Communication sent successfully", "communication": communication_to_dict(communication)}
    )


@require_http_methods(["PUT", "PATCH"])
@api_login_required
def application_score(request, application_id: int):
    application = get_application_or_404(application_id)
    _require_manage(request.user, application, "You don't have permission to update scores")
    form = ScoreForm(payload(request))
    if not form.is_valid():
        return form_error(form)
    application.score = form.cleaned_data["score"]
    application.skills_match = form.cleaned_data["skillsMatch"]
    application.save(update_fields=["score", "skills_match", "updated_at"])
    return json_ok({"message": "Scores updated successfully", "application": application_to_dict(application)})


# -----------------------------
# Platform stats / resume download
# -----------------------------
@require_GET
@api_login_required
def overall_stats(request):
    if not permissions.is_platform_admin(request.user):
        return json_error("Only admins can view overall statistics", status=403)

    qs = Application.objects.all()
    agg = qs.aggregate(total=Count("id"), avg_score=Avg("score"), avg_skills=Avg("skills_match"))
    by_status = dict(qs.order_by().values_list("status").annotate(n=Count("id")))

    since = (timezone.now() - timedelta(days=366)).replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    monthly = (
        qs.filter(applied_at__gte=since)
        .annotate(month=TruncMonth("applied_at"))
        .order_by()
        .values("month")
        .annotate(count=Count("id"))
        .order_by("-month")[:12]
    )
    return json_ok(
        {
            "overall": {
                "total": agg["total"],
                "avgScore": round(agg["avg_score"] or 0, 1),
                "avgSkillsMatch": round(agg["avg_skills"] or 0, 1),
                "byStatus": by_status,
            },
            "monthly": [
                {"year": row["month"].year, "month": row["month"].month, "count": row["count"]} for row in monthly
            ],
        }
    )


@require_GET
@api_login_required
def download_resume(request, application_id: int):
    application = get_application_or_404(application_id)
    is_applicant = application.applicant_id == request.user.pk
    if not is_applicant and not permissions.can_manage_company(request.user, application.company):
        raise PermissionDenied("You don't have permission to download this resume")

    if not is_applicant:
        application.mark_as_viewed(request.user)

    resume = application.resume
    if not resume or not resume.storage.exists(resume.name):
        raise Http404("Resume file not found")
    filename = os.path.basename(resume.name)
    ext = os.path.splitext(filename)[1].lower()
    content_type = RESUME_CONTENT_TYPES.get(ext) or mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return FileResponse(resume.open("rb"), as_attachment=True, filename=filename, content_type=content_type)
