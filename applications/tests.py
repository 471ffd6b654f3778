from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.urls import reverse

from accounts.models import User
from accounts.tokens import issue_token
from companies.models import Company, TeamMember
from jobs.models import Job
from notifications.models import Notification

from .models import Application, ApplicationEvent, ApplicationView

DESCRIPTION = "Build and maintain Django services that power our hiring platform for thousands of users."


def auth(user):
    return {"HTTP_AUTHORIZATION": f"Bearer {issue_token(user)}"}


def resume_file(name="cv.pdf"):
    return SimpleUploadedFile(name, b"%PDF-1.4 resume", content_type="application/pdf")


class ApplicationTestMixin:
    def setUp(self):
        self.owner = User.objects.create_user(email="owner@example.com", password="secret1", name="Owner")
        self.recruiter = User.objects.create_user(email="rec@example.com", password="secret1")
        self.seeker = User.objects.create_user(
            email="seeker@example.com",
            password="secret1",
            name="Seeker",
            skills="Python, Django",
            location="Berlin",
            total_experience=4,
        )
        self.company = Company.objects.create(
            name="Acme",
            email="acme@example.com",
            description="A company description that is comfortably longer than fifty characters.",
            location="Berlin, Germany",
            industry="Software",
            size="11-50",
            owner=self.owner,
        )
        TeamMember.objects.create(company=self.company, user=self.owner, role=TeamMember.Role.ADMIN)
        TeamMember.objects.create(company=self.company, user=self.recruiter, role=TeamMember.Role.HR)
        self.job = Job.objects.create(
            company=self.company,
            posted_by=self.owner,
            title="Backend Developer",
            description=DESCRIPTION,
            location="Berlin",
            skills="python, django, sql",
            experience_min_years=2,
        )

    def apply(self, user=None, **extra):
        data = {"resume": resume_file(), "coverLetterText": "Hello"}
        data.update(extra)
        return self.client.post(reverse("job_apply", args=[self.job.pk]), data, **auth(user or self.seeker))

    def make_application(self, **kwargs):
        defaults = {
            "job": self.job,
            "company": self.company,
            "applicant": self.seeker,
            "name": "Seeker",
            "email": "seeker@example.com",
            "resume": resume_file(),
        }
        defaults.update(kwargs)
        return Application.objects.create(**defaults)


class SubmitApplicationTests(ApplicationTestMixin, TestCase):
    def test_submit_scores_and_notifies_owner(self):
        resp = self.apply()
        self.assertEqual(resp.status_code, 201, resp.content)
        app = Application.objects.get()
        self.assertEqual(app.status, Application.Status.PENDING)
        self.assertEqual(app.skills_match, 67)
        self.assertEqual(app.score, 72)
        self.assertEqual(app.applicant_metadata["skills"], ["Python", "Django"])
        self.assertTrue(ApplicationEvent.objects.filter(application=app, action="applied").exists())
        self.assertTrue(Notification.objects.filter(user=self.owner, type="new_application").exists())

    def test_duplicate_application(self):
        self.apply()
        resp = self.apply()
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "You have already applied for this job")

    def test_resume_required(self):
        resp = self.client.post(reverse("job_apply", args=[self.job.pk]), {}, **auth(self.seeker))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Resume is required")

    def test_resume_type_is_checked(self):
        resp = self.apply(resume=SimpleUploadedFile("cv.exe", b"MZ", content_type="application/octet-stream"))
        self.assertEqual(resp.status_code, 400)

    def test_closed_job(self):
        self.job.status = Job.Status.CLOSED
        self.job.save()
        resp = self.apply()
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "Job not found or no longer available")

    def test_application_check(self):
        self.apply()
        resp = self.client.get(reverse("job_application_check", args=[self.job.pk]), **auth(self.seeker))
        self.assertTrue(resp.json()["hasApplied"])


class StatusWorkflowTests(ApplicationTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.app = self.make_application()

    def _set_status(self, status, user=None, **extra):
        return self.client.patch(
            reverse("application_status", args=[self.app.pk]),
            dict(status=status, **extra),
            content_type="application/json",
            **auth(user or self.owner),
        )

    def test_interview_with_details_notifies_applicant(self):
        resp = self._set_status(
            "interview",
            notes="Looks good",
            interviewDetails={"scheduledDate": "2030-05-01T10:00:00Z", "interviewType": "video"},
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.app.refresh_from_db()
        self.assertEqual(self.app.status, "interview")
        self.assertEqual(self.app.interview_type, "video")
        self.assertIsNotNone(self.app.interview_scheduled_at)
        actions = list(self.app.timeline.values_list("action", flat=True))
        self.assertIn("status_updated", actions)
        self.assertIn("interview_scheduled", actions)
        self.assertTrue(Notification.objects.filter(user=self.seeker, type="application_status").exists())
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn("Backend Developer", mail.outbox[0].subject)

    def test_hr_member_may_manage(self):
        resp = self._set_status("reviewed", user=self.recruiter)
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(ApplicationView.objects.filter(application=self.app, user=self.recruiter).exists())

    def test_outsider_forbidden(self):
        resp = self._set_status("reviewed", user=self.seeker)
        self.assertEqual(resp.status_code, 403)

    def test_rejection_reason_is_stored(self):
        self._set_status("rejected", rejectionReason="Position filled")
        self.app.refresh_from_db()
        self.assertEqual(self.app.rejection_reason, "Position filled")

    def test_manager_cannot_withdraw(self):
        resp = self._set_status("withdrawn")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Only the applicant can withdraw an application")

    def test_withdraw_then_frozen(self):
        resp = self.client.delete(reverse("application_detail", args=[self.app.pk]), **auth(self.seeker))
        self.assertEqual(resp.status_code, 200)
        self.app.refresh_from_db()
        self.assertEqual(self.app.status, "withdrawn")
        self.assertEqual(self.app.notes.count(), 1)

        resp = self._set_status("reviewed")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Cannot change the status of a withdrawn application")

    def test_cannot_withdraw_accepted(self):
        Application.objects.filter(pk=self.app.pk).update(status="accepted")
        resp = self.client.delete(reverse("application_detail", args=[self.app.pk]), **auth(self.seeker))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Application cannot be withdrawn because it's already accepted")

    def test_only_applicant_withdraws(self):
        resp = self.client.delete(reverse("application_detail", args=[self.app.pk]), **auth(self.owner))
        self.assertEqual(resp.status_code, 403)


class ApplicationManagementTests(ApplicationTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.app = self.make_application(score=40, skills_match=90)
        other = User.objects.create_user(email="other@example.com", password="secret1", name="Other")
        self.other_app = self.make_application(applicant=other, name="Other", email="other@example.com", score=90, skills_match=10)

    def test_notes_and_communications(self):
        resp = self.client.post(
            reverse("application_note", args=[self.app.pk]), {"note": "Strong"}, content_type="application/json", **auth(self.owner)
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["note"]["note"], "Strong")

        resp = self.client.post(
            reverse("application_communication", args=[self.app.pk]),
            {"type": "email", "subject": "Next steps", "message": "Let's talk"},
            content_type="application/json",
            **auth(self.owner),
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.app.communications.count(), 1)

    def test_score_update_bounds(self):
        url = reverse("application_score", args=[self.app.pk])
        bad = self.client.patch(url, {"score": 120, "skillsMatch": 10}, content_type="application/json", **auth(self.owner))
        self.assertEqual(bad.status_code, 400)
        ok = self.client.patch(url, {"score": 80, "skillsMatch": 70}, content_type="application/json", **auth(self.owner))
        self.assertEqual(ok.status_code, 200)
        self.app.refresh_from_db()
        self.assertEqual(self.app.score, 80)

    def test_top_candidates_weights_skills_match(self):
        resp = self.client.get(reverse("job_top_candidates", args=[self.job.pk]), **auth(self.owner))
        ids = [a["id"] for a in resp.json()["candidates"]]
        self.assertEqual(ids, [self.app.pk, self.other_app.pk])

    def test_company_listing_with_search_and_stats(self):
        resp = self.client.get(
            reverse("company_applications", args=[self.company.pk]), {"search": "other"}, **auth(self.recruiter)
        )
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["total"], 1)
        self.assertEqual(data["stats"]["total"], 2)

    def test_my_applications(self):
        resp = self.client.get(reverse("my_applications"), **auth(self.seeker))
        self.assertEqual(resp.json()["total"], 1)
        self.assertEqual(resp.json()["stats"], {"pending": 1})

    def test_overall_stats_admin_only(self):
        resp = self.client.get(reverse("application_overall_stats"), **auth(self.owner))
        self.assertEqual(resp.status_code, 403)
        admin = User.objects.create_user(email="admin@example.com", password="secret1")
        resp = self.client.get(reverse("application_overall_stats"), **auth(admin))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["overall"]["total"], 2)

    def test_resume_download_marks_viewed(self):
        resp = self.client.get(reverse("download_resume", args=[self.app.pk]), **auth(self.owner))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "application/pdf")
        self.app.refresh_from_db()
        self.assertIsNotNone(self.app.viewed_at)
        self.assertEqual(self.app.status, "reviewed")

    def test_detail_visibility(self):
        self.assertEqual(
            self.client.get(reverse("application_detail", args=[self.app.pk]), **auth(self.seeker)).status_code, 200
        )
        stranger = User.objects.create_user(email="stranger@example.com", password="secret1")
        self.assertEqual(
            self.client.get(reverse("application_detail", args=[self.app.pk]), **auth(stranger)).status_code, 403
        )


class JobApplicantsTests(ApplicationTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.app = self.make_application()
        other = User.objects.create_user(email="other@example.com", password="secret1", name="Other")
        self.other_app = self.make_application(
            applicant=other, name="Other", email="other@example.com", status=Application.Status.REJECTED
        )
        self.url = reverse("job_applicants", args=[self.job.pk])

    def test_lists_applicants_with_filters(self):
        resp = self.client.get(self.url, **auth(self.recruiter))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["total"], 2)
        self.assertEqual(data["job"], {"id": self.job.pk, "title": "Backend Developer", "company": "Acme"})

        resp = self.client.get(self.url, {"status": "rejected"}, **auth(self.recruiter))
        self.assertEqual([a["id"] for a in resp.json()["applications"]], [self.other_app.pk])

        resp = self.client.get(self.url, {"search": "seeker@"}, **auth(self.recruiter))
        self.assertEqual([a["id"] for a in resp.json()["applications"]], [self.app.pk])

    def test_requires_manager(self):
        resp = self.client.get(self.url, **auth(self.seeker))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"], "You don't have permission to view job applicants")

    def test_unknown_job(self):
        resp = self.client.get(reverse("job_applicants", args=[424242]), **auth(self.owner))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "Job not found")
