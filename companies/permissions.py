"""Who may do what to a company.

One place decides company access. Views call the ``require_*`` helpers,
which raise ``PermissionDenied``; the API middleware answers 403 JSON.
"""

from django.core.exceptions import PermissionDenied

from accounts.decorators import is_admin_email

from .models import TeamMember

# Roles allowed to manage jobs and applications for a company.
MANAGER_ROLES = frozenset(
    {TeamMember.Role.ADMIN, TeamMember.Role.RECRUITER, TeamMember.Role.MANAGER, TeamMember.Role.HR}
)


def _member_role(user, company) -> str | None:
    if not getattr(user, "is_authenticated", False):
        return None
    return (
        TeamMember.objects.filter(company=company, user=user).values_list("role", flat=True).first()
    )


def is_company_owner(user, company) -> bool:
    return bool(getattr(user, "is_authenticated", False)) and company.owner_id == user.pk


def is_platform_admin(user) -> bool:
    return bool(getattr(user, "is_authenticated", False)) and is_admin_email(user.email)


def can_manage_company(user, company) -> bool:
    """Owner, a team member with a manager role, or a platform admin."""
    if is_company_owner(user, company) or is_platform_admin(user):
        return True
    return _member_role(user, company) in MANAGER_ROLES


def can_administer_company(user, company) -> bool:
    """Owner or a team admin: edits the profile, images, team and analytics."""
    if is_company_owner(user, company):
        return True
    return _member_role(user, company) == TeamMember.Role.ADMIN


def can_edit_job(user, job) -> bool:
    if job.posted_by_id and job.posted_by_id == getattr(user, "pk", None):
        return True
    return can_administer_company(user, job.company)


def require_manage(user, company) -> None:
    if not can_manage_company(user, company):
        raise PermissionDenied("You don't have permission to manage this company")


def require_administer(user, company) -> None:
    if not can_administer_company(user, company):
        raise PermissionDenied("You don't have permission to perform this action")


def require_owner(user, company, message: str = "Only company owner can perform this action") -> None:
    if not is_company_owner(user, company):
        raise PermissionDenied(message)


def require_edit_job(user, job) -> None:
    if not can_edit_job(user, job):
        raise PermissionDenied("Not authorized to modify this job")
