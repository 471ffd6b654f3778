from accounts.serializers import user_summary
from careerconnect.api import iso
from companies.serializers import company_brief


def job_to_dict(job, *, detail: bool = False) -> dict:
    data = {
        "id": job.id,
        "title": job.title,
        "company": company_brief(job.company),
        "companyName": job.company.name if job.company_id else "",
        "location": job.location,
        "employmentType": job.employment_type,
        "salary": {
            "min": job.salary_min,
            "max": job.salary_max,
            "currency": job.salary_currency,
            "isNegotiable": job.salary_negotiable,
            "period": job.salary_period,
        },
        "skills": job.skills_list(),
        "tags": job.tags_list(),
        "experience": {"minYears": job.experience_min_years, "maxYears": job.experience_max_years},
        "education": job.education,
        "status": job.status,
        "isActive": job.is_active,
        "isFeatured": job.is_featured,
        "isUrgent": job.is_urgent,
        "isRemote": job.is_remote,
        "applicationDeadline": iso(job.application_deadline),
        "expiresAt": iso(job.expires_at),
        "views": job.views,
        "createdAt": iso(job.created_at),
        "updatedAt": iso(job.updated_at),
    }
    if hasattr(job, "application_count"):
        data["applicationsCount"] = job.application_count
    if detail:
        data.update(
            {
                "description": job.description,
                "requirements": job.requirements_list(),
                "responsibilities": job.responsibilities_list(),
                "benefits": job.benefits_list(),
                "applicationInstructions": job.application_instructions,
                "postedBy": user_summary(job.posted_by) if job.posted_by_id else None,
            }
        )
    return data
