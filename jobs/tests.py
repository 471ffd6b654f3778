from datetime import timedelta
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from accounts.models import User
from accounts.tokens import issue_token
from applications.models import Application
from companies.models import Company, TeamMember

from .models import Job, SavedJob

DESCRIPTION = "Build and maintain Django services that power our hiring platform for thousands of users."


def auth(user):
    return {"HTTP_AUTHORIZATION": f"Bearer {issue_token(user)}"}


def make_company(owner, name="Acme", **kwargs):
    defaults = {
        "email": f"{name.lower()}@example.com",
        "description": "A company description that is comfortably longer than fifty characters.",
        "location": "Berlin, Germany",
        "industry": "Software",
        "size": "11-50",
        "owner": owner,
    }
    defaults.update(kwargs)
    company = Company.objects.create(name=name, **defaults)
    TeamMember.objects.create(company=company, user=owner, role=TeamMember.Role.ADMIN)
    return company


class JobModelTests(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email="owner@example.com", password="secret1")
        self.company = make_company(self.owner)

    def test_defaults_on_save(self):
        job = Job.objects.create(company=self.company, title="Dev", description=DESCRIPTION, location="Remote, EU")
        self.assertTrue(job.is_remote)
        self.assertTrue(job.is_active)
        self.assertAlmostEqual(
            (job.expires_at - job.created_at).total_seconds(), timedelta(days=30).total_seconds(), delta=1
        )

    def test_expired_active_job_is_closed_on_save(self):
        job = Job.objects.create(
            company=self.company,
            title="Old",
            description=DESCRIPTION,
            location="Berlin",
            expires_at=timezone.now() - timedelta(days=1),
        )
        self.assertEqual(job.status, Job.Status.CLOSED)
        self.assertFalse(job.is_active)


class JobCreateTests(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email="owner@example.com", password="secret1")
        self.stranger = User.objects.create_user(email="stranger@example.com", password="secret1")
        self.company = make_company(self.owner)

    def _payload(self, **overrides):
        data = {
            "companyId": self.company.pk,
            "title": "Backend Engineer",
            "description": DESCRIPTION,
            "location": "Berlin",
            "employmentType": "Full-time",
            "salary": {"min": 50000, "max": 80000, "currency": "EUR"},
            "experience": {"minYears": 2, "maxYears": 5},
            "skills": ["Python", "Django"],
            "requirements": ["3 years of Python", "SQL"],
        }
        data.update(overrides)
        return data

    def test_owner_creates_job(self):
        resp = self.client.post(reverse("job_list"), self._payload(), content_type="application/json", **auth(self.owner))
        self.assertEqual(resp.status_code, 201, resp.content)
        job = resp.json()["job"]
        self.assertEqual(job["salary"]["currency"], "EUR")
        self.assertEqual(job["skills"], ["Python", "Django"])
        self.assertEqual(job["requirements"], ["3 years of Python", "SQL"])
        self.assertEqual(job["postedBy"]["id"], self.owner.pk)

    def test_stranger_cannot_post(self):
        resp = self.client.post(
            reverse("job_list"), self._payload(), content_type="application/json", **auth(self.stranger)
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"], "You don't have permission to post jobs for this company")

    def test_inactive_company(self):
        self.company.is_active = False
        self.company.save()
        resp = self.client.post(reverse("job_list"), self._payload(), content_type="application/json", **auth(self.owner))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Company is not active")

    def test_salary_range_is_validated(self):
        resp = self.client.post(
            reverse("job_list"),
            self._payload(salary={"min": 90000, "max": 10000}),
            content_type="application/json",
            **auth(self.owner),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Maximum salary cannot be less than minimum salary")

    def test_short_description(self):
        resp = self.client.post(
            reverse("job_list"), self._payload(description="short"), content_type="application/json", **auth(self.owner)
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Description must be at least 50 characters")

    def test_missing_company(self):
        data = self._payload()
        data.pop("companyId")
        resp = self.client.post(reverse("job_list"), data, content_type="application/json", **auth(self.owner))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Company ID is required")


class JobSearchTests(TestCase):
    def setUp(self):
        owner = User.objects.create_user(email="owner@example.com", password="secret1")
        self.company = make_company(owner)
        self.backend = Job.objects.create(
            company=self.company,
            title="Backend Developer",
            description=DESCRIPTION,
            location="Remote",
            employment_type="Full-time",
            salary_min=50000,
            salary_max=90000,
            skills="python, django, sql",
            experience_min_years=4,
            is_urgent=True,
        )
        self.designer = Job.objects.create(
            company=self.company,
            title="UI Designer",
            description="Figma and design systems for a product team shipping weekly releases.",
            location="London",
            employment_type="Contract",
            salary_min=30000,
            salary_max=45000,
            skills="figma, ui, ux",
            experience_min_years=1,
        )

    def _titles(self, params):
        resp = self.client.get(reverse("job_list"), params)
        self.assertEqual(resp.status_code, 200)
        return [job["title"] for job in resp.json()["jobs"]]

    def test_search_by_title(self):
        self.assertEqual(self._titles({"search": "backend"}), ["Backend Developer"])

    def test_filter_by_salary_overlap(self):
        self.assertEqual(self._titles({"minSalary": "80000"}), ["Backend Developer"])

    def test_filter_by_employment_type(self):
        self.assertEqual(self._titles({"employmentType": "Contract"}), ["UI Designer"])

    def test_filter_remote_and_experience(self):
        self.assertEqual(self._titles({"location": "remote"}), ["Backend Developer"])
        self.assertEqual(self._titles({"experience": "entry"}), ["UI Designer"])

    def test_jobs_of_inactive_companies_are_hidden(self):
        self.company.is_active = False
        self.company.save()
        self.assertEqual(self._titles({}), [])
        self.assertEqual(self.client.get(reverse("job_detail", args=[self.backend.pk])).status_code, 404)

    def test_detail_counts_views(self):
        self.client.get(reverse("job_detail", args=[self.backend.pk]))
        self.client.get(reverse("job_detail", args=[self.backend.pk]))
        self.backend.refresh_from_db()
        self.assertEqual(self.backend.views, 2)

    def test_suggestions(self):
        resp = self.client.get(reverse("job_search_suggestions"), {"q": "dj"})
        self.assertEqual(resp.json()["suggestions"]["skills"], ["django"])
        short = self.client.get(reverse("job_search_suggestions"), {"q": "d"})
        self.assertEqual(short.json()["suggestions"], [])

    def test_stats_overview(self):
        data = self.client.get(reverse("job_stats_overview")).json()
        self.assertEqual(data["total"], 2)
        self.assertEqual(data["urgent"], 1)
        self.assertEqual(data["remote"], 1)
        self.assertEqual(data["recent"], 2)

    def test_global_search(self):
        resp = self.client.get(reverse("global_search"), {"q": "designer"})
        self.assertEqual([j["title"] for j in resp.json()["jobs"]], ["UI Designer"])

    def test_recent_jobs(self):
        Job.objects.filter(pk=self.backend.pk).update(created_at=timezone.now() - timedelta(days=3))
        Job.objects.create(
            company=self.company, title="Closed Role", description=DESCRIPTION, location="Berlin", status=Job.Status.CLOSED
        )
        resp = self.client.get(reverse("recent_jobs"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([j["title"] for j in resp.json()["jobs"]], ["UI Designer", "Backend Developer"])

        resp = self.client.get(reverse("recent_jobs"), {"limit": 1})
        self.assertEqual([j["title"] for j in resp.json()["jobs"]], ["UI Designer"])


class JobManageTests(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email="owner@example.com", password="secret1")
        self.recruiter = User.objects.create_user(email="rec@example.com", password="secret1")
        self.seeker = User.objects.create_user(email="seeker@example.com", password="secret1")
        self.company = make_company(self.owner)
        TeamMember.objects.create(company=self.company, user=self.recruiter, role=TeamMember.Role.RECRUITER)
        self.job = Job.objects.create(
            company=self.company, posted_by=self.owner, title="Dev", description=DESCRIPTION, location="Berlin"
        )

    def test_partial_update_keeps_other_fields(self):
        resp = self.client.patch(
            reverse("job_detail", args=[self.job.pk]),
            {"title": "Senior Dev"},
            content_type="application/json",
            **auth(self.owner),
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.job.refresh_from_db()
        self.assertEqual(self.job.title, "Senior Dev")
        self.assertEqual(self.job.location, "Berlin")

    def test_recruiter_cannot_edit_someone_elses_job(self):
        resp = self.client.patch(
            reverse("job_detail", args=[self.job.pk]),
            {"title": "Hijacked"},
            content_type="application/json",
            **auth(self.recruiter),
        )
        self.assertEqual(resp.status_code, 403)

    def test_status_change_and_reactivation_extends_expiry(self):
        url = reverse("job_status", args=[self.job.pk])
        resp = self.client.patch(url, {"status": "closed"}, content_type="application/json", **auth(self.owner))
        self.assertEqual(resp.status_code, 200)
        self.job.refresh_from_db()
        self.assertFalse(self.job.is_active)

        Job.objects.filter(pk=self.job.pk).update(expires_at=timezone.now() - timedelta(days=2))
        resp = self.client.patch(url, {"status": "active"}, content_type="application/json", **auth(self.owner))
        self.assertEqual(resp.status_code, 200)
        self.job.refresh_from_db()
        self.assertEqual(self.job.status, Job.Status.ACTIVE)
        self.assertGreater(self.job.expires_at, timezone.now())

    def test_invalid_status(self):
        resp = self.client.patch(
            reverse("job_status", args=[self.job.pk]), {"status": "filled"}, content_type="application/json", **auth(self.owner)
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Invalid status")

    def test_delete(self):
        resp = self.client.delete(reverse("job_detail", args=[self.job.pk]), **auth(self.owner))
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(Job.objects.filter(pk=self.job.pk).exists())

    def test_company_jobs_hide_inactive_from_public(self):
        Job.objects.create(company=self.company, title="Draft", description=DESCRIPTION, location="Berlin", status="draft")
        public = self.client.get(reverse("company_jobs", args=[self.company.pk])).json()["jobs"]
        self.assertEqual([j["title"] for j in public], ["Dev"])
        managed = self.client.get(reverse("company_jobs", args=[self.company.pk]), **auth(self.recruiter)).json()["jobs"]
        self.assertEqual(len(managed), 2)

    def test_save_and_unsave(self):
        url = reverse("job_bookmark", args=[self.job.pk])
        self.assertEqual(self.client.post(url, **auth(self.seeker)).status_code, 200)
        again = self.client.post(url, **auth(self.seeker))
        self.assertEqual(again.status_code, 400)
        self.assertEqual(again.json()["error"], "Already saved this job")
        self.assertTrue(
            self.client.get(reverse("job_bookmark_check", args=[self.job.pk]), **auth(self.seeker)).json()["isBookmarked"]
        )
        self.assertEqual(self.client.delete(url, **auth(self.seeker)).status_code, 200)
        self.assertFalse(SavedJob.objects.exists())
        missing = self.client.delete(url, **auth(self.seeker))
        self.assertEqual(missing.status_code, 400)

    def test_my_jobs_lists_company_jobs(self):
        resp = self.client.get(reverse("my_jobs"), **auth(self.recruiter))
        self.assertEqual([j["title"] for j in resp.json()["jobs"]], ["Dev"])
        self.assertEqual(resp.json()["jobs"][0]["applicationsCount"], 0)


class SeedDemoDataTests(TestCase):
    def test_seed_is_repeatable(self):
        args = ["--companies", "2", "--seekers", "3", "--jobs-per-company", "2", "--applications-per-seeker", "2"]
        call_command("seed_demo_data", *args, stdout=StringIO())
        self.assertEqual(Company.objects.count(), 2)
        self.assertEqual(Job.objects.count(), 4)
        self.assertEqual(Application.objects.count(), 6)
        pairs = set(Application.objects.values_list("job_id", "applicant_id"))
        statuses = dict(Application.objects.values_list("id", "status"))

        call_command("seed_demo_data", *args, stdout=StringIO())
        self.assertEqual(Job.objects.count(), 4)
        self.assertEqual(Application.objects.count(), 6)
        self.assertEqual(set(Application.objects.values_list("job_id", "applicant_id")), pairs)
        self.assertEqual(dict(Application.objects.values_list("id", "status")), statuses)
