from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.test.client import BOUNDARY, MULTIPART_CONTENT, encode_multipart
from django.urls import reverse

from accounts.models import User
from accounts.tokens import issue_token
from jobs.models import Job
from notifications.models import Notification

from .models import Company, CompanyFollow, CompanyView, TeamMember
from .permissions import can_administer_company, can_edit_job, can_manage_company

DESCRIPTION = "We build hiring tools for small and medium sized engineering teams worldwide."


def auth(user):
    return {"HTTP_AUTHORIZATION": f"Bearer {issue_token(user)}"}


def make_company(owner, name="Acme", email=None, **kwargs):
    defaults = {
        "description": DESCRIPTION,
        "location": "Berlin, Germany",
        "industry": "Software",
        "size": "11-50",
    }
    defaults.update(kwargs)
    company = Company.objects.create(name=name, email=email or f"{name.lower()}@example.com", owner=owner, **defaults)
    TeamMember.objects.create(company=company, user=owner, role=TeamMember.Role.ADMIN)
    return company


class CompanyCreateTests(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email="owner@example.com", password="secret1", name="Owner", role="employer")

    def _payload(self, **overrides):
        data = {
            "name": "Globex",
            "email": "hello@globex.example.com",
            "description": DESCRIPTION,
            "location": "Paris, France",
            "industry": "Energy",
            "size": "51-200",
            "foundedYear": 1999,
            "socialLinks": {"twitter": "https://twitter.com/globex"},
        }
        data.update(overrides)
        return data

    def test_create_adds_owner_as_team_admin(self):
        resp = self.client.post(
            reverse("company_create"), self._payload(), content_type="application/json", **auth(self.owner)
        )
        self.assertEqual(resp.status_code, 201, resp.content)
        company = Company.objects.get(name="Globex")
        self.assertEqual(company.owner, self.owner)
        self.assertEqual(company.founded_year, 1999)
        self.assertEqual(company.social_links["twitter"], "https://twitter.com/globex")
        self.assertTrue(TeamMember.objects.filter(company=company, user=self.owner, role="admin").exists())

    def test_duplicate_name_is_rejected(self):
        make_company(self.owner, name="Globex", email="other@example.com")
        resp = self.client.post(
            reverse("company_create"), self._payload(), content_type="application/json", **auth(self.owner)
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Company with this name or email already exists")

    def test_short_description_is_rejected(self):
        resp = self.client.post(
            reverse("company_create"),
            self._payload(description="Too short"),
            content_type="application/json",
            **auth(self.owner),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Description should be at least 50 characters")

    def test_anonymous_cannot_create(self):
        resp = self.client.post(reverse("company_create"), self._payload(), content_type="application/json")
        self.assertEqual(resp.status_code, 401)


class CompanyPermissionTests(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email="owner@example.com", password="secret1")
        self.recruiter = User.objects.create_user(email="rec@example.com", password="secret1")
        self.member = User.objects.create_user(email="member@example.com", password="secret1")
        self.admin = User.objects.create_user(email="admin@example.com", password="secret1")
        self.company = make_company(self.owner)
        TeamMember.objects.create(company=self.company, user=self.recruiter, role=TeamMember.Role.RECRUITER)
        TeamMember.objects.create(company=self.company, user=self.member, role=TeamMember.Role.MEMBER)

    def test_manage_roles(self):
        self.assertTrue(can_manage_company(self.owner, self.company))
        self.assertTrue(can_manage_company(self.recruiter, self.company))
        self.assertTrue(can_manage_company(self.admin, self.company))
        self.assertFalse(can_manage_company(self.member, self.company))

    def test_administer_is_owner_or_team_admin(self):
        self.assertTrue(can_administer_company(self.owner, self.company))
        self.assertFalse(can_administer_company(self.recruiter, self.company))

    def test_job_poster_may_edit_own_job(self):
        job = Job.objects.create(
            company=self.company, posted_by=self.recruiter, title="Dev", description=DESCRIPTION, location="Berlin"
        )
        self.assertTrue(can_edit_job(self.recruiter, job))
        self.assertFalse(can_edit_job(self.member, job))

    def test_update_requires_administer(self):
        resp = self.client.patch(
            reverse("company_update", args=[self.company.pk]),
            {"location": "Munich, Germany"},
            content_type="application/json",
            **auth(self.recruiter),
        )
        self.assertEqual(resp.status_code, 403)

        resp = self.client.patch(
            reverse("company_update", args=[self.company.pk]),
            {"location": "Munich, Germany", "socialLinks": {"github": "https://github.com/acme"}},
            content_type="application/json",
            **auth(self.owner),
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.company.refresh_from_db()
        self.assertEqual(self.company.location, "Munich, Germany")
        self.assertEqual(self.company.name, "Acme")
        self.assertEqual(self.company.social_links["github"], "https://github.com/acme")

    def test_only_owner_deletes_and_delete_is_soft(self):
        resp = self.client.delete(reverse("company_detail", args=[self.company.pk]), **auth(self.recruiter))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"], "Only company owner can delete the company")

        resp = self.client.delete(reverse("company_detail", args=[self.company.pk]), **auth(self.owner))
        self.assertEqual(resp.status_code, 200)
        self.company.refresh_from_db()
        self.assertFalse(self.company.is_active)

        self.assertEqual(self.client.get(reverse("company_detail", args=[self.company.pk])).status_code, 404)
        self.assertEqual(
            self.client.get(reverse("company_detail", args=[self.company.pk]), **auth(self.owner)).status_code, 200
        )


class CompanyTeamTests(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email="owner@example.com", password="secret1")
        self.other = User.objects.create_user(email="other@example.com", password="secret1")
        self.company = make_company(self.owner)

    def test_add_and_remove_member(self):
        url = reverse("company_team_add", args=[self.company.pk])
        resp = self.client.post(
            url, {"userId": self.other.pk, "role": "recruiter"}, content_type="application/json", **auth(self.owner)
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertTrue(Notification.objects.filter(user=self.other).exists())

        again = self.client.post(
            url, {"userId": self.other.pk, "role": "recruiter"}, content_type="application/json", **auth(self.owner)
        )
        self.assertEqual(again.status_code, 400)
        self.assertEqual(again.json()["error"], "User is already a team member")

        resp = self.client.delete(
            reverse("company_team_remove", args=[self.company.pk, self.other.pk]), **auth(self.owner)
        )
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(TeamMember.objects.filter(company=self.company, user=self.other).exists())

    def test_owner_cannot_be_removed(self):
        resp = self.client.delete(
            reverse("company_team_remove", args=[self.company.pk, self.owner.pk]), **auth(self.owner)
        )
        self.assertEqual(resp.status_code, 400)

    def test_unknown_user(self):
        resp = self.client.post(
            reverse("company_team_add", args=[self.company.pk]),
            {"userId": 9999, "role": "member"},
            content_type="application/json",
            **auth(self.owner),
        )
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "User not found")


class CompanyFollowTests(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email="owner@example.com", password="secret1")
        self.fan = User.objects.create_user(email="fan@example.com", password="secret1", name="Fan")
        self.company = make_company(self.owner)

    def test_follow_notifies_owner_once(self):
        url = reverse("company_follow", args=[self.company.pk])
        resp = self.client.post(url, **auth(self.fan))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["followers"], 1)
        self.assertEqual(Notification.objects.filter(user=self.owner, type="company_follow").count(), 1)

        again = self.client.post(url, **auth(self.fan))
        self.assertEqual(again.status_code, 400)
        self.assertEqual(again.json()["error"], "Already following this company")

        check = self.client.get(reverse("company_follow_check", args=[self.company.pk]), **auth(self.fan))
        self.assertTrue(check.json()["isFollowing"])

        resp = self.client.delete(url, **auth(self.fan))
        self.assertFalse(resp.json()["isFollowing"])
        self.assertFalse(CompanyFollow.objects.exists())

    def test_bookmark_toggle(self):
        url = reverse("company_bookmark", args=[self.company.pk])
        self.assertEqual(self.client.post(url, **auth(self.fan)).status_code, 200)
        self.assertEqual(self.client.post(url, **auth(self.fan)).status_code, 400)
        check = self.client.get(reverse("company_bookmark_check", args=[self.company.pk]), **auth(self.fan))
        self.assertTrue(check.json()["isBookmarked"])


class CompanyDiscoveryTests(TestCase):
    def setUp(self):
        owner = User.objects.create_user(email="owner@example.com", password="secret1")
        self.acme = make_company(owner, name="Acme", location="Berlin, Germany", industry="Software")
        self.beta = make_company(owner, name="Beta", location="Berlin, Germany", industry="Software")
        self.gamma = make_company(owner, name="Gamma", location="Hamburg, Germany", industry="Software")
        self.delta = make_company(owner, name="Delta", location="Berlin, Germany", industry="Retail")
        Job.objects.create(company=self.beta, title="Dev", description=DESCRIPTION, location="Berlin")

    def test_similar_requires_industry_and_location(self):
        resp = self.client.get(reverse("company_similar"), {"industry": "Software"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Industry and location are required")

    def test_similar_orders_by_match(self):
        resp = self.client.get(
            reverse("company_similar"),
            {"industry": "Software", "location": "Berlin, Germany", "exclude": self.acme.pk, "limit": 10},
        )
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        names = [c["name"] for c in data["companies"]]
        self.assertNotIn("Acme", names)
        self.assertEqual(names[0], "Beta")
        self.assertEqual(data["companies"][0]["matchType"], "exact")
        self.assertEqual(data["searchStats"]["sameIndustrySameCity"], 1)
        self.assertEqual(data["searchCriteria"]["city"], "Berlin")

    def test_recommendations_only_companies_with_recent_jobs(self):
        resp = self.client.get(reverse("company_recommendations", args=[self.acme.pk]))
        self.assertEqual(resp.status_code, 200)
        names = [c["name"] for c in resp.json()["recommendations"]]
        self.assertEqual(names, ["Beta"])
        self.assertEqual(resp.json()["recommendations"][0]["jobCount"], 1)

    def test_list_filters_and_counts_jobs(self):
        resp = self.client.get(reverse("company_list"), {"industry": "software", "location": "berlin"})
        data = resp.json()
        self.assertEqual(data["total"], 2)
        by_name = {c["name"]: c for c in data["companies"]}
        self.assertEqual(by_name["Beta"]["jobCount"], 1)

    def test_detail_records_a_view(self):
        self.client.get(reverse("company_detail", args=[self.acme.pk]), HTTP_REFERER="https://www.google.com/search")
        view = CompanyView.objects.get(company=self.acme)
        self.assertEqual(view.source, CompanyView.Source.SEARCH)

    def test_stats(self):
        resp = self.client.get(reverse("company_stats", args=[self.beta.pk]))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["jobs"], 1)
        self.assertEqual(resp.json()["teamMembers"], 1)

    def test_missing_company_is_404(self):
        resp = self.client.get(reverse("company_detail", args=[424242]))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "Company not found")


class CompanyMediaTests(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email="owner@example.com", password="secret1")
        self.company = make_company(self.owner)
        self.url = reverse("company_update", args=[self.company.pk])

    def _multipart_put(self, data):
        return self.client.put(
            self.url, encode_multipart(BOUNDARY, data), content_type=MULTIPART_CONTENT, **auth(self.owner)
        )

    def test_multipart_put_updates_fields_and_images(self):
        resp = self._multipart_put(
            {
                "location": "Munich, Germany",
                "logo": SimpleUploadedFile("logo.png", b"\x89PNG logo", content_type="image/png"),
                "coverImage": SimpleUploadedFile("cover.jpg", b"cover", content_type="image/jpeg"),
            }
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.company.refresh_from_db()
        self.assertEqual(self.company.location, "Munich, Germany")
        self.assertEqual(self.company.name, "Acme")
        self.assertTrue(self.company.logo.name.endswith(".png"))
        self.assertTrue(self.company.cover_image)
        self.assertIsNotNone(resp.json()["company"]["logo"])

    def test_urlencoded_put(self):
        resp = self.client.put(
            self.url, "industry=Retail", content_type="application/x-www-form-urlencoded", **auth(self.owner)
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.company.refresh_from_db()
        self.assertEqual(self.company.industry, "Retail")

    def test_multipart_put_rejects_bad_logo_type(self):
        resp = self._multipart_put({"logo": SimpleUploadedFile("logo.exe", b"MZ")})
        self.assertEqual(resp.status_code, 400)
        self.company.refresh_from_db()
        self.assertFalse(self.company.logo)

    def test_delete_images(self):
        logo_url = reverse("company_logo_delete", args=[self.company.pk])
        cover_url = reverse("company_cover_delete", args=[self.company.pk])

        resp = self.client.delete(logo_url, **auth(self.owner))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "No logo to delete")
        resp = self.client.delete(cover_url, **auth(self.owner))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "No cover image to delete")

        self._multipart_put({"logo": SimpleUploadedFile("logo.png", b"png"), "coverImage": SimpleUploadedFile("c.png", b"png")})
        self.assertEqual(self.client.delete(logo_url, **auth(self.owner)).status_code, 200)
        self.assertEqual(self.client.delete(cover_url, **auth(self.owner)).status_code, 200)
        self.company.refresh_from_db()
        self.assertFalse(self.company.logo)
        self.assertFalse(self.company.cover_image)


class CompanyAnalyticsTests(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email="owner@example.com", password="secret1")
        self.recruiter = User.objects.create_user(email="rec@example.com", password="secret1")
        self.company = make_company(self.owner)
        TeamMember.objects.create(company=self.company, user=self.recruiter, role=TeamMember.Role.RECRUITER)
        Job.objects.create(company=self.company, title="Dev", description=DESCRIPTION, location="Berlin")
        Job.objects.create(
            company=self.company, title="Ops", description=DESCRIPTION, location="Berlin", status=Job.Status.CLOSED
        )

    def test_views_require_administer_and_group_by_source(self):
        detail = reverse("company_detail", args=[self.company.pk])
        self.client.get(detail, HTTP_REFERER="https://www.google.com/search?q=acme")
        self.client.get(detail, HTTP_REFERER="https://www.linkedin.com/feed")
        self.client.get(detail)

        url = reverse("company_views", args=[self.company.pk])
        self.assertEqual(self.client.get(url, **auth(self.recruiter)).status_code, 403)

        resp = self.client.get(url, **auth(self.owner))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        by_source = {row["source"]: row["count"] for row in data["viewsBySource"]}
        self.assertEqual(by_source, {"direct": 1, "search": 1, "social": 1})
        self.assertEqual(sum(row["count"] for row in data["viewsByHour"]), 3)

    def test_dashboard_summary(self):
        resp = self.client.get(reverse("company_dashboard_summary"), **auth(self.recruiter))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual([c["name"] for c in data["companies"]], ["Acme"])
        self.assertEqual(data["companies"][0]["jobCount"], 2)
        self.assertEqual(data["summary"]["totalJobs"], 2)
        self.assertEqual(data["summary"]["totalTeamMembers"], 2)
        self.assertEqual(data["summary"]["recentJobs"], 2)

    def test_dashboard_analytics(self):
        fan = User.objects.create_user(email="fan@example.com", password="secret1")
        CompanyFollow.objects.create(company=self.company, user=fan)
        resp = self.client.get(reverse("company_dashboard_analytics"), **auth(self.owner))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["jobs"]["total"], 2)
        self.assertEqual(data["jobs"]["active"], 1)
        self.assertEqual(data["jobs"]["closed"], 1)
        self.assertEqual(len(data["jobs"]["byMonth"]), 6)
        self.assertEqual(data["jobs"]["byMonth"][-1]["count"], 2)
        self.assertEqual(data["engagement"]["followers"], 1)

    def test_dashboard_is_empty_for_outsiders(self):
        stranger = User.objects.create_user(email="stranger@example.com", password="secret1")
        resp = self.client.get(reverse("company_dashboard_summary"), **auth(stranger))
        self.assertEqual(resp.json()["companies"], [])
        self.assertEqual(resp.json()["summary"]["totalJobs"], 0)
