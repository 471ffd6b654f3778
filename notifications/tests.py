from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from accounts.models import User
from accounts.tokens import issue_token

from .models import Notification
from .utils import create_in_app_notification


def auth(user):
    return {"HTTP_AUTHORIZATION": f"Bearer {issue_token(user)}"}


class NotificationUtilsTests(TestCase):
    def test_create_by_email_only(self):
        n = create_in_app_notification(email="Guest@Example.com", title="Hi", message="Hello")
        self.assertEqual(n.user_email, "guest@example.com")
        self.assertIsNone(n.user)

    def test_nobody_to_notify(self):
        self.assertIsNone(create_in_app_notification(title="Nobody"))
        self.assertFalse(Notification.objects.exists())

    def test_long_title_is_truncated(self):
        user = User.objects.create_user(email="u@example.com", password="secret1")
        n = create_in_app_notification(user, title="x" * 300)
        self.assertEqual(len(n.title), 200)
        self.assertEqual(n.message, "x" * 300)


class NotificationApiTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="me@example.com", password="secret1")
        self.other = User.objects.create_user(email="other@example.com", password="secret1")
        self.mine = create_in_app_notification(self.user, title="Mine", message="For me")
        self.by_email = create_in_app_notification(email="me@example.com", title="By email", message="Also for me")
        self.theirs = create_in_app_notification(self.other, title="Theirs", message="Not for me")
        self.expired = create_in_app_notification(self.user, title="Old", message="Expired")
        Notification.objects.filter(pk=self.expired.pk).update(expires_at=timezone.now() - timedelta(days=1))

    def test_list_includes_email_addressed_and_skips_expired(self):
        resp = self.client.get(reverse("notification_list"), **auth(self.user))
        self.assertEqual(resp.status_code, 200)
        titles = {n["title"] for n in resp.json()["notifications"]}
        self.assertEqual(titles, {"Mine", "By email"})
        self.assertEqual(resp.json()["pagination"]["total"], 2)

    def test_unread_count_and_mark_read(self):
        url = reverse("notification_unread_count")
        self.assertEqual(self.client.get(url, **auth(self.user)).json()["count"], 2)
        resp = self.client.patch(reverse("notification_read", args=[self.mine.pk]), **auth(self.user))
        self.assertTrue(resp.json()["notification"]["isRead"])
        self.assertEqual(self.client.get(url, **auth(self.user)).json()["count"], 1)

    def test_unread_only_filter(self):
        self.mine.mark_as_read()
        resp = self.client.get(reverse("notification_list"), {"unreadOnly": "true"}, **auth(self.user))
        self.assertEqual([n["title"] for n in resp.json()["notifications"]], ["By email"])

    def test_cannot_touch_someone_elses(self):
        resp = self.client.get(reverse("notification_detail", args=[self.theirs.pk]), **auth(self.user))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "Notification not found")

    def test_get_marks_read(self):
        self.client.get(reverse("notification_detail", args=[self.mine.pk]), **auth(self.user))
        self.mine.refresh_from_db()
        self.assertTrue(self.mine.is_read)
        self.assertIsNotNone(self.mine.read_at)

    def test_read_all_and_delete_all(self):
        resp = self.client.patch(reverse("notification_read_all"), **auth(self.user))
        self.assertEqual(resp.json()["updated"], 3)
        resp = self.client.delete(reverse("notification_delete_all"), **auth(self.user))
        self.assertEqual(resp.json()["deleted"], 3)
        self.assertEqual(Notification.objects.count(), 1)

    def test_requires_auth(self):
        self.assertEqual(self.client.get(reverse("notification_list")).status_code, 401)
