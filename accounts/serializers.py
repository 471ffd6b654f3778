from careerconnect.api import file_url, iso


def education_to_dict(edu) -> dict:
    return {
        "id": edu.id,
        "institution": edu.institution,
        "degree": edu.degree,
        "fieldOfStudy": edu.field_of_study,
        "startYear": edu.start_year,
        "endYear": edu.end_year,
        "isCurrentlyStudying": edu.is_current,
        "description": edu.description,
    }


def experience_to_dict(exp) -> dict:
    return {
        "id": exp.id,
        "title": exp.title,
        "company": exp.company,
        "location": exp.location,
        "startDate": iso(exp.start_date),
        "endDate": iso(exp.end_date),
        "currentlyWorking": exp.is_current,
        "description": exp.description,
    }


def portfolio_link_to_dict(link) -> dict:
    return {
        "id": link.id,
        "title": link.title,
        "url": link.url,
        "description": link.description,
        "type": link.type,
        "isPrimary": link.is_primary,
    }


def user_summary(user) -> dict | None:
    if user is None:
        return None
    return {
        "id": user.id,
        "name": user.display_name(),
        "email": user.email,
        "profileImage": file_url(user.profile_image),
    }


def user_to_dict(user, *, private: bool = True) -> dict:
    data = {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "phone": user.phone,
        "location": user.location,
        "bio": user.bio,
        "headline": user.headline,
        "currentPosition": user.current_position,
        "currentCompany": user.current_company,
        "totalExperience": user.total_experience,
        "skills": user.skills_list(),
        "linkedin": user.linkedin,
        "portfolio": user.portfolio,
        "profileImage": file_url(user.profile_image),
        "education": [education_to_dict(e) for e in user.educations.all()],
        "experience": [experience_to_dict(e) for e in user.experiences.all()],
        "portfolioLinks": [portfolio_link_to_dict(link) for link in user.portfolio_links.all()],
    }
    if private:
        data.update(
            {
                "age": user.age,
                "lastLogin": iso(user.last_login),
                "createdAt": iso(user.date_joined),
            }
        )
    return data


def staff_to_dict(staff) -> dict:
    return {
        "id": staff.id,
        "email": staff.email,
        "name": staff.name,
        "departments": staff.departments_list(),
        "isActive": staff.is_active,
        "createdBy": user_summary(staff.created_by),
        "createdAt": iso(staff.created_at),
        "updatedAt": iso(staff.updated_at),
    }
