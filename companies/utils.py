import logging
from datetime import timedelta

from django.db.models import Count, Q
from django.db.models.functions import ExtractHour, TruncDate, TruncMonth
from django.utils import timezone

from .models import Company, CompanyView, TeamMember

logger = logging.getLogger(__name__)

SEARCH_ENGINES = ("google", "bing", "yahoo")
SOCIAL_SITES = ("facebook", "twitter", "linkedin")


def classify_view_source(referer: str | None, host: str | None) -> str:
    referer = (referer or "").lower()
    host = (host or "").lower()
    if any(name in referer for name in SEARCH_ENGINES):
        return CompanyView.Source.SEARCH
    if any(name in referer for name in SOCIAL_SITES):
        return CompanyView.Source.SOCIAL
    if referer and host and host in referer:
        return CompanyView.Source.INTERNAL
    if referer:
        return CompanyView.Source.REFERRAL
    return CompanyView.Source.DIRECT


def _client_ip(request) -> str | None:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.META.get("REMOTE_ADDR") or None


def track_company_view(request, company) -> None:
    """Record a profile view. Failures are logged and never reach the caller."""
    try:
        CompanyView.objects.create(
            company=company,
            viewer=request.user if request.user.is_authenticated else None,
            ip_address=_client_ip(request),
            user_agent=(request.META.get("HTTP_USER_AGENT") or "")[:500],
            source=classify_view_source(request.META.get("HTTP_REFERER"), request.get_host()),
        )
    except Exception:
        logger.exception("Failed to track company view: company_id=%s", company.pk)


def _unique_ips(qs) -> int:
    return qs.values("ip_address").distinct().count()


def engagement_rate(followers: int, recent_applications: int, page_views: int, unique_views: int) -> int:
    """Interactions per unique visitor as a percentage, kept within 1..100."""
    rate = 0
    if page_views > 0:
        rate = round((followers + recent_applications) / max(unique_views, 1) * 100)
    return max(1, min(100, rate))


def team_size(company) -> int:
    members = (
        TeamMember.objects.filter(company=company)
        .exclude(user_id=company.owner_id)
        .values("user_id")
        .distinct()
        .count()
    )
    return members + 1


def company_stats(company) -> dict:
    from applications.models import Application
    from jobs.models import Job

    now = timezone.now()
    since_30 = now - timedelta(days=30)
    since_7 = now - timedelta(days=7)

    followers = company.follows.count()
    views_30 = CompanyView.objects.filter(company=company, viewed_at__gte=since_30)
    page_views = views_30.count()
    unique_views = _unique_ips(views_30)

    jobs = Job.objects.filter(company=company)
    applications = Application.objects.for_company(company)
    recent_applications = applications.recent(days=30).count()

    daily = (
        CompanyView.objects.filter(company=company, viewed_at__gte=since_7)
        .annotate(day=TruncDate("viewed_at"))
        .values("day")
        .annotate(total=Count("id"), unique=Count("ip_address", distinct=True))
        .order_by("day")
    )

    return {
        "followers": followers,
        "pageViews": page_views,
        "uniqueViews": unique_views,
        "engagement": engagement_rate(followers, recent_applications, page_views, unique_views),
        "jobs": jobs.filter(status="active").count(),
        "totalJobs": jobs.count(),
        "teamMembers": team_size(company),
        "totalApplications": applications.count(),
        "recentApplications": recent_applications,
        "trends": {
            "dailyViews": [
                {"date": row["day"].isoformat(), "totalViews": row["total"], "uniqueViews": row["unique"]}
                for row in daily
            ]
        },
    }


def view_analytics(company) -> dict:
    now = timezone.now()
    by_source = (
        CompanyView.objects.filter(company=company, viewed_at__gte=now - timedelta(days=30))
        .values("source")
        .annotate(count=Count("id"))
        .order_by("source")
    )
    by_hour = (
        CompanyView.objects.filter(company=company, viewed_at__gte=now - timedelta(days=7))
        .annotate(hour=ExtractHour("viewed_at"))
        .values("hour")
        .annotate(count=Count("id"))
        .order_by("hour")
    )
    return {
        "viewsBySource": [{"source": row["source"], "count": row["count"]} for row in by_source],
        "viewsByHour": [{"hour": row["hour"], "count": row["count"]} for row in by_hour],
    }


# -----------------------------
# Dashboard (every company the user owns or belongs to)
# -----------------------------
def dashboard_summary(user) -> dict:
    from jobs.models import Job

    companies = list(
        Company.objects.for_user(user).active().annotate(
            job_count=Count("jobs", distinct=True),
            member_count=Count("team_members", distinct=True),
        )
    )
    ids = [c.pk for c in companies]
    recent_jobs = Job.objects.filter(company_id__in=ids, created_at__gte=timezone.now() - timedelta(days=30)).count()
    return {
        "companies": companies,
        "summary": {
            "activeCompanies": len(companies),
            "totalJobs": sum(c.job_count for c in companies),
            "totalTeamMembers": sum(c.member_count for c in companies),
            "recentJobs": recent_jobs,
        },
    }


def _monthly_job_counts(jobs_qs, months: int = 6) -> list[dict]:
    now = timezone.now()
    year, month = now.year, now.month - (months - 1)
    while month <= 0:
        year, month = year - 1, month + 12
    start = now.replace(year=year, month=month, day=1, hour=0, minute=0, second=0, microsecond=0)
    rows = (
        jobs_qs.filter(created_at__gte=start)
        .annotate(month=TruncMonth("created_at"))
        .values("month")
        .annotate(count=Count("id"))
    )
    counts = {(r["month"].year, r["month"].month): r["count"] for r in rows}
    out = []
    year, month = start.year, start.month
    for _ in range(months):
        out.append({"month": f"{year:04d}-{month:02d}", "count": counts.get((year, month), 0)})
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return out


def dashboard_analytics(user) -> dict:
    from applications.models import Application
    from jobs.models import Job

    ids = list(Company.objects.for_user(user).active().values_list("pk", flat=True))
    jobs = Job.objects.filter(company_id__in=ids)
    applications = Application.objects.filter(job__company_id__in=ids)
    views = CompanyView.objects.filter(company_id__in=ids, viewed_at__gte=timezone.now() - timedelta(days=30))
    unique = sum(_unique_ips(views.filter(company_id=pk)) for pk in ids)
    by_status = dict(applications.order_by().values_list("status").annotate(n=Count("id")))

    return {
        "jobs": {
            "total": jobs.count(),
            "active": jobs.filter(status="active").count(),
            "closed": jobs.filter(status="closed").count(),
            "byMonth": _monthly_job_counts(jobs),
        },
        "applications": {
            "total": applications.count(),
            "pending": by_status.get("pending", 0),
            "reviewed": by_status.get("reviewed", 0),
            "shortlisted": by_status.get("shortlisted", 0),
            "rejected": by_status.get("rejected", 0),
        },
        "views": {"total": views.count(), "unique": unique},
        "engagement": {
            "followers": Company.objects.filter(pk__in=ids).aggregate(n=Count("follows"))["n"] or 0,
        },
    }


# -----------------------------
# Similar companies / recommendations
# -----------------------------
def similarity_score(company, industry: str, city: str) -> int:
    score = 0
    location = (company.location or "").lower()
    city = city.lower()
    if (company.industry or "").lower() == industry.lower():
        score += 50
    if city and city in location:
        score += 30 if location.startswith(city) else 20
    if company.size:
        score += 10
    if company.founded_year:
        score += 5
    return min(100, score)


def match_type(company, industry: str, city: str) -> str:
    same_industry = (company.industry or "").lower() == industry.lower()
    same_city = bool(city) and city.lower() in (company.location or "").lower()
    if same_industry:
        return "exact" if same_city else "industry"
    return "location" if same_city else "other"


def similar_companies(industry: str, location: str, exclude=None, limit: int = 5) -> dict:
    parts = [p.strip() for p in location.split(",")]
    city = parts[0]
    region = parts[1] if len(parts) > 1 else parts[0]

    base = Company.objects.active().annotate(followers=Count("follows", distinct=True))
    if exclude:
        base = base.exclude(pk=exclude)

    phases = [
        ("sameIndustrySameCity", Q(industry__iexact=industry) & Q(location__istartswith=city)),
        ("sameIndustryDifferentCity", Q(industry__iexact=industry) & ~Q(location__icontains=city)),
        ("sameCityDifferentIndustry", ~Q(industry__iexact=industry) & Q(location__istartswith=city)),
        ("otherCompanies", Q()),
    ]
    found: list = []
    seen: set[int] = set()
    stats = {}
    for key, condition in phases:
        remaining = limit - len(found)
        batch = []
        if remaining > 0:
            batch = list(base.filter(condition).exclude(pk__in=seen)[:remaining])
        stats[key] = len(batch)
        for company in batch:
            seen.add(company.pk)
            found.append(company)

    ranked = sorted(
        found,
        key=lambda c: similarity_score(c, industry, city),
        reverse=True,
    )
    stats["totalFound"] = len(ranked)
    return {
        "companies": ranked,
        "city": city,
        "region": region,
        "searchStats": stats,
    }


def company_recommendations(company, limit: int = 6) -> list[tuple]:
    """Other active companies sharing industry or city that posted active jobs in the last 30 days."""
    from jobs.models import Job

    since = timezone.now() - timedelta(days=30)
    candidates = (
        Company.objects.active()
        .exclude(pk=company.pk)
        .filter(Q(industry=company.industry) | Q(location__icontains=company.city))
        .annotate(followers=Count("follows", distinct=True))
    )
    out = []
    for candidate in candidates:
        recent = Job.objects.filter(company=candidate, status="active", created_at__gte=since).order_by("-created_at")
        count = recent.count()
        if not count:
            continue
        out.append((candidate, count, list(recent[:3])))
        if len(out) >= limit:
            break
    return out
