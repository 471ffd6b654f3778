import logging

from careerconnect.mailer import send_email
from notifications.utils import create_in_app_notification

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    "reviewed": "Your application for '{job}' has been reviewed.",
    "shortlisted": "Good news! You have been shortlisted for '{job}'.",
    "interview": "You have been invited to interview for '{job}'.",
    "accepted": "Congratulations! Your application for '{job}' was accepted.",
    "rejected": "Unfortunately, your application for '{job}' was not successful.",
    "pending": "Your application for '{job}' is pending review.",
}


def _interview_when(application) -> str:
    when = application.interview_scheduled_at
    if not when:
        return "TBD"
    return when.strftime("%Y-%m-%d %H:%M")


def send_application_status_notification(application, *, previous_status: str | None = None):
    """Tell the applicant their application moved to a new status: in-app first, then email."""
    user = application.applicant
    job_title = application.job.title
    status = application.status
    template = STATUS_MESSAGES.get(status)
    if template is None:
        return

    message = template.format(job=job_title)
    if status == "interview":
        message += f"\nInterview date/time: {_interview_when(application)}"
        if application.interview_type:
            message += f" ({application.interview_type})"
    if status == "rejected" and application.rejection_reason:
        message += f"\nReason: {application.rejection_reason}"

    create_in_app_notification(
        user,
        title=f"Application update for {job_title}",
        message=message,
        url=f"/applications/{application.id}",
        type="application_status",
        related_data={
            "applicationId": application.id,
            "jobId": application.job_id,
            "previousStatus": previous_status,
            "status": status,
        },
    )

    to_email = application.email or getattr(user, "email", None)
    if not to_email:
        return
    subject = f"CareerConnect: Update on your application for {job_title}"
    body = (
        f"Hello {application.name or user.email},\n\n"
        f"{message}\n\n"
        "Thanks for using CareerConnect.\n"
    )
    try:
        send_email(
            to_emails=[to_email],
            subject=subject,
            message=body,
            tag="APPLICATION",
            meta={
                "status": status,
                "application_id": application.id,
                "job_id": application.job_id,
                "company_id": application.company_id,
                "applicant_user_id": application.applicant_id,
            },
        )
        logger.info("Email notification sent: status=%s to=%s app_id=%s", status, to_email, application.id)
    except Exception:
        logger.exception("Email notification failed: status=%s to=%s app_id=%s", status, to_email, application.id)


def notify_new_application(application):
    company = application.company
    create_in_app_notification(
        company.owner,
        title=f"New application for {application.job.title}",
        message=f"{application.name} applied for {application.job.title}.",
        url=f"/company/{company.pk}/jobs/{application.job_id}/applications",
        type="new_application",
        related_data={"applicationId": application.id, "jobId": application.job_id},
    )
