from accounts.serializers import user_summary
from careerconnect.api import file_url, iso
from companies.serializers import company_brief


def _event_to_dict(e) -> dict:
    return {
        "action": e.action,
        "performedBy": user_summary(e.performed_by) if e.performed_by_id else None,
        "notes": e.notes,
        "previousStatus": e.previous_status or None,
        "newStatus": e.new_status or None,
        "date": iso(e.created_at),
    }


def note_to_dict(n) -> dict:
    return {
        "id": n.id,
        "note": n.note,
        "addedBy": user_summary(n.added_by) if n.added_by_id else None,
        "addedAt": iso(n.added_at),
    }


def communication_to_dict(c) -> dict:
    return {
        "id": c.id,
        "type": c.type,
        "subject": c.subject,
        "message": c.message,
        "sentBy": user_summary(c.sent_by) if c.sent_by_id else None,
        "sentAt": iso(c.sent_at),
    }


def application_to_dict(app, *, detail: bool = False) -> dict:
    job = app.job
    data = {
        "id": app.id,
        "job": {
            "id": job.id,
            "title": job.title,
            "location": job.location,
            "employmentType": job.employment_type,
            "status": job.status,
        },
        "company": company_brief(app.company),
        "applicant": user_summary(app.applicant),
        "name": app.name,
        "email": app.email,
        "phone": app.phone,
        "location": app.location,
        "resume": file_url(app.resume),
        "status": app.status,
        "score": app.score,
        "skillsMatch": app.skills_match,
        "viewedAt": iso(app.viewed_at),
        "appliedAt": iso(app.applied_at),
        "updatedAt": iso(app.updated_at),
    }
    if hasattr(app, "rank"):
        data["matchScore"] = round(app.rank, 1)
    if detail:
        data.update(
            {
                "coverLetter": app.cover_letter,
                "coverLetterFile": file_url(app.cover_letter_file),
                "portfolio": app.portfolio,
                "linkedin": app.linkedin,
                "portfolioLinks": app.portfolio_links or [],
                "questions": app.questions or [],
                "additionalInfo": app.additional_info,
                "rejectionReason": app.rejection_reason,
                "interview": {
                    "scheduledDate": iso(app.interview_scheduled_at),
                    "interviewType": app.interview_type or None,
                    "location": app.interview_location,
                    "notes": app.interview_notes,
                    "feedback": app.interview_feedback,
                    "rating": app.interview_rating,
                },
                "applicantMetadata": app.applicant_metadata or {},
                "lastViewedAt": iso(app.last_viewed_at),
                "timeline": [_event_to_dict(e) for e in app.timeline.select_related("performed_by")],
                "notes": [note_to_dict(n) for n in app.notes.select_related("added_by")],
                "communications": [communication_to_dict(c) for c in app.communications.select_related("sent_by")],
            }
        )
    return data
