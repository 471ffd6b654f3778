from datetime import date, timedelta

from django.core import mail
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from companies.models import Company
from jobs.models import Job, SavedJob

from .models import Education, Experience, PortfolioLink, Staff, User
from .tokens import issue_token


def auth(user):
    return {"HTTP_AUTHORIZATION": f"Bearer {issue_token(user)}"}


class RegisterLoginTests(TestCase):
    def test_register_returns_token_and_user(self):
        resp = self.client.post(
            reverse("auth_register"),
            {"name": "Ana", "email": "Ana@Example.com", "age": 30, "role": "Looking for job", "password": "secret1"},
            content_type="application/json",
        )
        self.assertEqual(resp.status_code, 201)
        data = resp.json()
        self.assertTrue(data["success"])
        self.assertTrue(data["token"])
        self.assertEqual(data["user"]["email"], "ana@example.com")
        self.assertEqual(data["user"]["role"], "job_seeker")

    def test_register_duplicate_email(self):
        User.objects.create_user(email="dup@example.com", password="secret1")
        resp = self.client.post(
            reverse("auth_register"),
            {"name": "Dup", "email": "dup@example.com", "age": 22, "role": "employer", "password": "secret1"},
            content_type="application/json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "User already exists")

    def test_register_rejects_short_password(self):
        resp = self.client.post(
            reverse("auth_register"),
            {"name": "Short", "email": "short@example.com", "age": 22, "role": "employer", "password": "abc"},
            content_type="application/json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Password must be at least 6 characters")

    def test_login_and_bad_password(self):
        User.objects.create_user(email="log@example.com", password="secret1")
        ok = self.client.post(
            reverse("auth_login"), {"email": "log@example.com", "password": "secret1"}, content_type="application/json"
        )
        self.assertEqual(ok.status_code, 200)
        self.assertIn("token", ok.json())

        bad = self.client.post(
            reverse("auth_login"), {"email": "log@example.com", "password": "nope"}, content_type="application/json"
        )
        self.assertEqual(bad.status_code, 400)
        self.assertEqual(bad.json()["error"], "Invalid credentials")


class TokenTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="tok@example.com", password="secret1", name="Tok")

    def test_missing_token_is_401(self):
        resp = self.client.get(reverse("auth_user"))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "No token, authorization denied")

    def test_garbage_token_is_401(self):
        resp = self.client.get(reverse("auth_user"), HTTP_AUTHORIZATION="Bearer not-a-token")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "Token is not valid")

    def test_logout_revokes_previous_tokens(self):
        headers = auth(self.user)
        self.assertEqual(self.client.get(reverse("auth_user"), **headers).status_code, 200)
        self.client.post(reverse("auth_logout"), **headers)
        resp = self.client.get(reverse("auth_user"), **headers)
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "Token has been revoked")

    @override_settings(AUTH_TOKEN_MAX_AGE=-1)
    def test_expired_token(self):
        resp = self.client.get(reverse("auth_user"), **auth(self.user))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "Token has expired")


class PasswordResetTests(TestCase):
    def setUp(self):
        cache.clear()
        self.user = User.objects.create_user(email="reset@example.com", password="oldpass")

    def test_full_reset_flow(self):
        resp = self.client.post(
            reverse("auth_forgot_password"), {"email": "reset@example.com"}, content_type="application/json"
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(mail.outbox), 1)
        self.user.refresh_from_db()
        code = self.user.password_reset_code
        self.assertIn(code, mail.outbox[0].body)

        verify = self.client.post(
            reverse("auth_verify_code"), {"email": "reset@example.com", "code": code}, content_type="application/json"
        )
        self.assertEqual(verify.status_code, 200)

        reset = self.client.post(
            reverse("auth_reset_password"),
            {"email": "reset@example.com", "code": code, "newPassword": "newpass1"},
            content_type="application/json",
        )
        self.assertEqual(reset.status_code, 200)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("newpass1"))
        self.assertIsNone(self.user.password_reset_code)

    def test_wrong_code(self):
        self.client.post(reverse("auth_forgot_password"), {"email": "reset@example.com"}, content_type="application/json")
        resp = self.client.post(
            reverse("auth_verify_code"), {"email": "reset@example.com", "code": "000000"}, content_type="application/json"
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Invalid verification code")

    def test_unknown_email(self):
        resp = self.client.post(
            reverse("auth_forgot_password"), {"email": "ghost@example.com"}, content_type="application/json"
        )
        self.assertEqual(resp.status_code, 404)


class ProfileTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="pro@example.com", password="secret1", name="Pro", phone="123")

    def test_update_profile_replaces_experience_and_totals_years(self):
        resp = self.client.put(
            reverse("profile"),
            {
                "bio": "Backend developer",
                "skills": ["python", "django"],
                "experience": [
                    {
                        "title": "Dev",
                        "company": "A",
                        "startDate": "2015-01-01T00:00:00.000Z",
                        "endDate": "2020-01-01",
                        "currentlyWorking": False,
                    },
                ],
                "education": [
                    {
                        "institution": "TU Berlin",
                        "degree": "BSc",
                        "fieldOfStudy": "CS",
                        "startYear": 2010,
                        "endYear": 2014,
                        "isCurrentlyStudying": False,
                    },
                ],
            },
            content_type="application/json",
            **auth(self.user),
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        user = resp.json()["user"]
        self.assertEqual(user["bio"], "Backend developer")
        self.assertEqual(user["skills"], ["python", "django"])
        self.assertEqual(user["experience"][0]["startDate"], "2015-01-01")
        self.assertEqual(user["education"][0]["fieldOfStudy"], "CS")
        self.assertEqual(user["education"][0]["startYear"], 2010)
        self.assertEqual(user["totalExperience"], 5)

    def test_profile_round_trips_through_update(self):
        Experience.objects.create(user=self.user, title="Dev", company="A", start_date=date(2018, 3, 1), is_current=True)
        Education.objects.create(user=self.user, institution="MIT", degree="MSc", field_of_study="AI", start_year=2016)
        shown = self.client.get(reverse("profile"), **auth(self.user)).json()["user"]

        resp = self.client.put(
            reverse("auth_user_update"),
            {"headline": "Engineer", "experience": shown["experience"], "education": shown["education"]},
            content_type="application/json",
            **auth(self.user),
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        user = resp.json()["user"]
        self.assertEqual(user["headline"], "Engineer")
        self.assertTrue(user["experience"][0]["currentlyWorking"])
        self.assertEqual(user["education"][0]["fieldOfStudy"], "AI")
        self.assertEqual(self.user.experiences.count(), 1)

    def test_invalid_education_entry(self):
        resp = self.client.put(
            reverse("auth_user_update"),
            {"education": [{"institution": "MIT", "degree": "MSc"}]},
            content_type="application/json",
            **auth(self.user),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Invalid education entry")

    def test_profile_image_upload_and_type_check(self):
        url = reverse("profile_image")
        bad = self.client.post(url, {"profileImage": SimpleUploadedFile("me.svg", b"<svg/>")}, **auth(self.user))
        self.assertEqual(bad.status_code, 400)
        self.assertEqual(bad.json()["error"], "Only image files are allowed (jpeg, jpg, png, gif)")

        ok = self.client.post(url, {"profileImage": SimpleUploadedFile("me.jpg", b"jpeg")}, **auth(self.user))
        self.assertEqual(ok.status_code, 200, ok.content)
        self.user.refresh_from_db()
        self.assertTrue(self.user.profile_image)

        self.assertEqual(self.client.delete(url, **auth(self.user)).status_code, 200)
        again = self.client.delete(url, **auth(self.user))
        self.assertEqual(again.status_code, 400)
        self.assertEqual(again.json()["error"], "No profile image to delete")

    @override_settings(IMAGE_MAX_UPLOAD_BYTES=10)
    def test_profile_image_size_limit(self):
        resp = self.client.post(
            reverse("profile_image"), {"profileImage": SimpleUploadedFile("me.png", b"x" * 11)}, **auth(self.user)
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "File too large. Maximum size is 5MB.")

    def test_set_primary_portfolio_link(self):
        first = PortfolioLink.objects.create(user=self.user, title="One", url="https://one.example.com", is_primary=True)
        second = PortfolioLink.objects.create(user=self.user, title="Two", url="https://two.example.com")
        resp = self.client.put(reverse("portfolio_link_primary", args=[second.pk]), **auth(self.user))
        self.assertEqual(resp.status_code, 200)
        primary = [link["id"] for link in resp.json()["portfolioLinks"] if link["isPrimary"]]
        self.assertEqual(primary, [second.pk])
        first.refresh_from_db()
        self.assertFalse(first.is_primary)

        other = User.objects.create_user(email="other@example.com", password="secret1")
        resp = self.client.put(reverse("portfolio_link_primary", args=[second.pk]), **auth(other))
        self.assertEqual(resp.status_code, 404)

    def test_portfolio_links_limit_and_primary(self):
        url = reverse("portfolio_link_add")
        for i in range(3):
            resp = self.client.post(
                url, {"title": f"Site {i}", "url": f"https://example.com/{i}"}, content_type="application/json", **auth(self.user)
            )
            self.assertEqual(resp.status_code, 201)
        links = resp.json()["portfolioLinks"]
        self.assertEqual(sum(1 for link in links if link["isPrimary"]), 1)

        resp = self.client.post(
            url, {"title": "Too many", "url": "https://example.com/x"}, content_type="application/json", **auth(self.user)
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Maximum 3 portfolio links allowed")

    def test_deleting_primary_link_promotes_another(self):
        first = PortfolioLink.objects.create(user=self.user, title="One", url="https://one.example.com", is_primary=True)
        second = PortfolioLink.objects.create(user=self.user, title="Two", url="https://two.example.com")
        resp = self.client.delete(reverse("portfolio_link_delete", args=[first.pk]), **auth(self.user))
        self.assertEqual(resp.status_code, 200)
        second.refresh_from_db()
        self.assertTrue(second.is_primary)

    def test_public_profile_hides_private_fields(self):
        resp = self.client.get(reverse("public_profile", args=[self.user.pk]))
        self.assertEqual(resp.status_code, 200)
        self.assertNotIn("lastLogin", resp.json()["user"])
        self.assertNotIn("age", resp.json()["user"])


class AdminAllowListTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(email="admin@example.com", password="secret1")
        self.user = User.objects.create_user(email="plain@example.com", password="secret1")

    def test_check_reveals_allow_list_only_to_admins(self):
        resp = self.client.get(reverse("admin_check"), **auth(self.admin))
        self.assertTrue(resp.json()["isAdmin"])
        self.assertEqual(resp.json()["adminEmails"], ["admin@example.com"])

        resp = self.client.get(reverse("admin_check"), **auth(self.user))
        self.assertFalse(resp.json()["isAdmin"])
        self.assertEqual(resp.json()["adminEmails"], [])

    def test_non_admin_is_forbidden(self):
        resp = self.client.get(reverse("admin_stats"), **auth(self.user))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"], "Admin access required. Your email is not authorized.")

    def test_staff_crud(self):
        resp = self.client.post(
            reverse("admin_staff"),
            {"email": "Helper@Example.com", "name": "Helper", "departments": ["Billing", "Bug Report"]},
            content_type="application/json",
            **auth(self.admin),
        )
        self.assertEqual(resp.status_code, 201, resp.content)
        staff = Staff.objects.get(email="helper@example.com")
        self.assertEqual(staff.departments_list(), ["Billing", "Bug Report"])

        dup = self.client.post(
            reverse("admin_staff"),
            {"email": "helper@example.com", "name": "Again", "departments": ["Billing"]},
            content_type="application/json",
            **auth(self.admin),
        )
        self.assertEqual(dup.status_code, 400)

        resp = self.client.delete(reverse("admin_staff_item", args=[staff.pk]), **auth(self.admin))
        self.assertEqual(resp.status_code, 200)
        staff.refresh_from_db()
        self.assertFalse(staff.is_active)


class SessionAndAdminListTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(email="admin@example.com", password="secret1", name="Admin")
        self.user = User.objects.create_user(email="plain@example.com", password="secret1")

    def test_refresh_token_issues_a_working_token(self):
        resp = self.client.post(reverse("auth_refresh_token"), **auth(self.user))
        self.assertEqual(resp.status_code, 200)
        token = resp.json()["token"]
        me = self.client.get(reverse("auth_user"), HTTP_AUTHORIZATION=f"Bearer {token}")
        self.assertEqual(me.json()["user"]["email"], "plain@example.com")
        self.assertEqual(self.client.post(reverse("auth_refresh_token")).status_code, 401)

    def test_admin_emails_and_users(self):
        resp = self.client.get(reverse("admin_emails"), **auth(self.admin))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"], ["admin@example.com"])
        self.assertEqual(resp.json()["count"], 1)

        resp = self.client.get(reverse("admin_users"), **auth(self.admin))
        self.assertEqual([u["email"] for u in resp.json()["data"]], ["admin@example.com"])

        self.assertEqual(self.client.get(reverse("admin_emails"), **auth(self.user)).status_code, 403)
        self.assertEqual(self.client.get(reverse("admin_users")).status_code, 401)


class SavedJobsTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="saver@example.com", password="secret1")
        owner = User.objects.create_user(email="owner@example.com", password="secret1")
        company = Company.objects.create(
            name="Acme",
            email="acme@example.com",
            description="A company description that is comfortably longer than fifty characters.",
            location="Berlin",
            industry="Software",
            size="11-50",
            owner=owner,
        )
        description = "Build and maintain Django services that power our hiring platform for many users."
        self.alpha = Job.objects.create(company=company, title="Alpha", description=description, location="Berlin")
        self.beta = Job.objects.create(
            company=company, title="Beta", description=description, location="Berlin", status=Job.Status.CLOSED
        )
        self.gamma = Job.objects.create(
            company=company,
            title="Gamma",
            description=description,
            location="Berlin",
            application_deadline=timezone.now() - timedelta(days=1),
        )
        now = timezone.now()
        for offset, job in enumerate([self.alpha, self.beta, self.gamma]):
            saved = SavedJob.objects.create(user=self.user, job=job)
            SavedJob.objects.filter(pk=saved.pk).update(saved_at=now - timedelta(hours=offset))
        self.url = reverse("auth_saved_jobs", args=[self.user.pk])

    def _titles(self, **params):
        resp = self.client.get(self.url, params, **auth(self.user))
        self.assertEqual(resp.status_code, 200)
        return [item["job"]["title"] for item in resp.json()["savedJobs"]]

    def test_only_own_saved_jobs(self):
        other = User.objects.create_user(email="other@example.com", password="secret1")
        resp = self.client.get(self.url, **auth(other))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"], "You can only view your own saved jobs")

    def test_filters(self):
        self.assertEqual(self._titles(filter="active"), ["Alpha", "Gamma"])
        self.assertEqual(self._titles(filter="closed"), ["Beta"])
        self.assertEqual(self._titles(filter="expired"), ["Gamma"])
        self.assertEqual(self._titles(search="bet"), ["Beta"])

    def test_sorting(self):
        self.assertEqual(self._titles(), ["Alpha", "Beta", "Gamma"])
        self.assertEqual(self._titles(sort="oldest"), ["Gamma", "Beta", "Alpha"])
        self.assertEqual(self._titles(sort="title"), ["Alpha", "Beta", "Gamma"])

    def test_pagination_flags(self):
        first = self.client.get(self.url, {"limit": 2}, **auth(self.user)).json()
        self.assertEqual(first["totalJobs"], 3)
        self.assertEqual(first["totalPages"], 2)
        self.assertEqual(first["currentPage"], 1)
        self.assertTrue(first["hasNextPage"])
        self.assertFalse(first["hasPrevPage"])

        second = self.client.get(self.url, {"limit": 2, "page": 2}, **auth(self.user)).json()
        self.assertEqual(len(second["savedJobs"]), 1)
        self.assertFalse(second["hasNextPage"])
        self.assertTrue(second["hasPrevPage"])
