from accounts.serializers import user_summary
from careerconnect.api import file_url, iso


def team_member_to_dict(member) -> dict:
    return {
        "id": member.id,
        "user": dict(user_summary(member.user), role=member.user.role),
        "role": member.role,
        "permissions": member.permissions or [],
        "addedAt": iso(member.added_at),
    }


def company_brief(company) -> dict | None:
    if company is None:
        return None
    return {
        "id": company.id,
        "name": company.name,
        "logo": file_url(company.logo),
        "industry": company.industry,
        "location": company.location,
        "size": company.size,
        "isActive": company.is_active,
    }


def company_to_dict(company, *, detail: bool = False) -> dict:
    data = company_brief(company)
    data.update(
        {
            "email": company.email,
            "description": company.description,
            "website": company.website,
            "foundedYear": company.founded_year,
            "coverImage": file_url(company.cover_image),
            "phone": company.phone,
            "socialLinks": company.social_links or {},
            "owner": user_summary(company.owner),
            "createdAt": iso(company.created_at),
            "updatedAt": iso(company.updated_at),
        }
    )
    if detail:
        data["teamMembers"] = [team_member_to_dict(m) for m in company.team_members.select_related("user")]
        data["jobs"] = [
            {
                "id": job.id,
                "title": job.title,
                "location": job.location,
                "employmentType": job.employment_type,
                "status": job.status,
                "createdAt": iso(job.created_at),
            }
            for job in company.jobs.order_by("-created_at")
        ]
    return data
