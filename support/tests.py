from django.core import mail
from django.test import TestCase
from django.urls import reverse

from accounts.models import Staff, User
from accounts.tokens import issue_token
from companies.models import Company
from notifications.models import Notification

from .models import ContactMessage, Reply


def auth(user):
    return {"HTTP_AUTHORIZATION": f"Bearer {issue_token(user)}"}


def make_message(**kwargs):
    defaults = {
        "name": "Visitor",
        "email": "visitor@example.com",
        "subject": "Help",
        "message": "I need help with my account",
        "category": ContactMessage.Category.SUPPORT,
    }
    defaults.update(kwargs)
    return ContactMessage.objects.create(**defaults)


class SubmitTests(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email="owner@example.com", password="secret1", name="Owner")
        self.company = Company.objects.create(
            name="Acme",
            email="acme@example.com",
            description="A company description that is comfortably longer than fifty characters.",
            location="Berlin",
            industry="Software",
            size="11-50",
            owner=self.owner,
        )

    def _submit(self, **overrides):
        data = {"name": "Visitor", "email": "visitor@example.com", "subject": "Question", "message": "Hello there"}
        data.update(overrides)
        return self.client.post(reverse("contact_submit"), data, content_type="application/json", HTTP_REFERER="https://site/contact")

    def test_platform_message_sends_confirmation_and_admin_copy(self):
        resp = self._submit()
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["message"], "Thank you for contacting us! We will get back to you soon.")
        msg = ContactMessage.objects.get()
        self.assertEqual(msg.category, "Other")
        self.assertEqual(msg.page_url, "https://site/contact")
        subjects = sorted(m.subject for m in mail.outbox)
        self.assertEqual(subjects, ["New Contact Form Submission: Question", "Thank you for contacting us!"])

    def test_missing_fields(self):
        resp = self._submit(subject="")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Subject is required")

    def test_message_too_long(self):
        resp = self._submit(message="x" * 2001)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Message cannot exceed 2000 characters")

    def test_company_message_is_assigned_to_owner(self):
        resp = self._submit(companyId=self.company.pk)
        self.assertEqual(resp.status_code, 201)
        msg = ContactMessage.objects.get()
        self.assertEqual(msg.assigned_to, self.owner)
        self.assertEqual(msg.company_name, "Acme")
        self.assertEqual(msg.category, "Partnership")
        note = Notification.objects.get(user=self.owner)
        self.assertEqual(note.type, "new_message")
        self.assertTrue(note.is_conversational)
        self.assertEqual(note.related_message, msg)

    def test_second_company_message_joins_conversation(self):
        self._submit(companyId=self.company.pk)
        resp = self._submit(companyId=self.company.pk, message="Any news?")
        self.assertEqual(resp.status_code, 201)
        self.assertTrue(resp.json()["data"]["hasExistingConversation"])
        self.assertEqual(ContactMessage.objects.count(), 1)
        reply = Reply.objects.get()
        self.assertEqual(reply.sender_context, "user")
        self.assertEqual(reply.content, "Any news?")

    def test_signed_in_sender_is_linked(self):
        user = User.objects.create_user(email="visitor@example.com", password="secret1")
        self.client.post(
            reverse("contact_submit"),
            {"name": "Visitor", "email": "visitor@example.com", "subject": "Q", "message": "Hi"},
            content_type="application/json",
            **auth(user),
        )
        self.assertEqual(ContactMessage.objects.get().user, user)


class SupportInboxTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(email="admin@example.com", password="secret1")
        self.staff_user = User.objects.create_user(email="billing@example.com", password="secret1")
        Staff.objects.create(email="billing@example.com", name="Bill", departments="Billing")
        self.nobody = User.objects.create_user(email="nobody@example.com", password="secret1")
        self.account_msg = make_message(subject="Invoice question", category="Account")
        self.tech_msg = make_message(subject="Crash", category="Technical", email="dev@example.com")

    def test_non_support_user_forbidden(self):
        resp = self.client.get(reverse("contact_list"), **auth(self.nobody))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"], "Admin access required. Your email is not authorized.")

    def test_admin_sees_all_with_stats(self):
        resp = self.client.get(reverse("contact_list"), **auth(self.admin))
        data = resp.json()
        self.assertEqual(data["total"], 2)
        self.assertEqual(data["stats"]["new"], 2)
        self.assertEqual(data["stats"]["unread"], 2)

    def test_company_conversations_are_excluded(self):
        owner = User.objects.create_user(email="owner@example.com", password="secret1")
        make_message(subject="Partnership", assigned_to=owner)
        resp = self.client.get(reverse("contact_list"), **auth(self.admin))
        self.assertEqual(resp.json()["total"], 2)

    def test_staff_only_sees_department_categories(self):
        resp = self.client.get(reverse("contact_list"), **auth(self.staff_user))
        self.assertEqual([m["subject"] for m in resp.json()["data"]], ["Invoice question"])

        resp = self.client.get(reverse("contact_list"), {"category": "Technical"}, **auth(self.staff_user))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"], "Access to this category is not allowed for your account")

    def test_search_and_sort(self):
        resp = self.client.get(reverse("contact_list"), {"search": "crash"}, **auth(self.admin))
        self.assertEqual(resp.json()["total"], 1)
        resp = self.client.get(reverse("contact_list"), {"sortBy": "email", "sortOrder": "asc"}, **auth(self.admin))
        self.assertEqual(resp.json()["data"][0]["email"], "dev@example.com")

    def test_status_change_notes_notifies_and_emails(self):
        sender = User.objects.create_user(email="visitor@example.com", password="secret1")
        resp = self.client.patch(
            reverse("contact_status", args=[self.account_msg.pk]),
            {"status": "resolved", "notes": "Refund issued"},
            content_type="application/json",
            **auth(self.admin),
        )
        self.assertEqual(resp.status_code, 200)
        self.account_msg.refresh_from_db()
        self.assertEqual(self.account_msg.status, "resolved")
        self.assertIsNotNone(self.account_msg.resolved_at)
        self.assertIn("Status changed from new to resolved by admin@example.com: Refund issued", self.account_msg.admin_notes)
        note = Notification.objects.get(type="message_status_changed")
        self.assertEqual(note.user, sender)
        self.assertEqual(mail.outbox[-1].subject, "Update on your support ticket: Invoice question")

    def test_invalid_status(self):
        resp = self.client.patch(
            reverse("contact_status", args=[self.account_msg.pk]),
            {"status": "archived"},
            content_type="application/json",
            **auth(self.admin),
        )
        self.assertEqual(resp.status_code, 400)

    def test_reply_moves_new_to_in_progress(self):
        resp = self.client.post(
            reverse("contact_reply", args=[self.account_msg.pk]),
            {"content": "We are on it"},
            content_type="application/json",
            **auth(self.staff_user),
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(resp.json()["message"], "Reply sent successfully")
        self.account_msg.refresh_from_db()
        self.assertEqual(self.account_msg.status, "in_progress")
        self.assertTrue(self.account_msg.is_replied)
        reply = self.account_msg.replies.get()
        self.assertEqual(reply.display_name, "Support Team")
        self.assertTrue(reply.email_sent)
        self.assertEqual(mail.outbox[-1].subject, "Re: Invoice question")
        self.assertTrue(Notification.objects.filter(type="message_replied", user_email="visitor@example.com").exists())

    def test_reply_without_email(self):
        resp = self.client.post(
            reverse("contact_reply", args=[self.account_msg.pk]),
            {"content": "Internal only", "sendEmail": False},
            content_type="application/json",
            **auth(self.admin),
        )
        self.assertEqual(resp.json()["message"], "Reply saved (email not sent)")
        self.assertEqual(len(mail.outbox), 0)

    def test_reply_to_closed_conversation(self):
        self.account_msg.status = "closed"
        self.account_msg.save()
        resp = self.client.post(
            reverse("contact_reply", args=[self.account_msg.pk]),
            {"content": "Late"},
            content_type="application/json",
            **auth(self.admin),
        )
        self.assertEqual(resp.status_code, 400)

    def test_reply_forbidden_for_outsider(self):
        resp = self.client.post(
            reverse("contact_reply", args=[self.account_msg.pk]),
            {"content": "Hi"},
            content_type="application/json",
            **auth(self.nobody),
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"], "You do not have permission to reply to this message")

    def test_note_read_toggle_and_soft_delete(self):
        url = reverse("contact_note", args=[self.account_msg.pk])
        empty = self.client.post(url, {"note": "  "}, content_type="application/json", **auth(self.admin))
        self.assertEqual(empty.status_code, 400)
        self.assertEqual(empty.json()["error"], "Note content is required")
        self.client.post(url, {"note": "Called back"}, content_type="application/json", **auth(self.admin))

        resp = self.client.patch(
            reverse("contact_read", args=[self.account_msg.pk]), {"isRead": False}, content_type="application/json", **auth(self.admin)
        )
        self.assertEqual(resp.json()["message"], "Marked as unread")

        self.client.delete(reverse("contact_detail", args=[self.account_msg.pk]), **auth(self.admin))
        self.account_msg.refresh_from_db()
        self.assertTrue(self.account_msg.is_deleted)
        self.assertIn("admin@example.com: Called back", self.account_msg.admin_notes)
        resp = self.client.get(reverse("contact_detail", args=[self.account_msg.pk]), **auth(self.admin))
        self.assertEqual(resp.status_code, 404)

    def test_stats(self):
        data = self.client.get(reverse("contact_stats"), **auth(self.admin)).json()["data"]
        self.assertEqual(data["total"], 2)
        self.assertEqual(data["categories"], {"Account": 1, "Technical": 1})
        self.assertEqual(data["dailyStats"][0]["count"], 2)

    def test_export_csv(self):
        resp = self.client.get(reverse("contact_export"), **auth(self.admin))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "text/csv")
        self.assertIn("contact_messages_", resp["Content-Disposition"])
        lines = resp.content.decode().strip().splitlines()
        self.assertTrue(lines[0].startswith("Name,Email,Subject,Message,Category,Status,Read,Replied"))
        self.assertEqual(len(lines), 3)

    def test_check_admin_and_staff(self):
        admin = self.client.get(reverse("contact_check_admin"), **auth(self.admin)).json()
        self.assertTrue(admin["isAdmin"])
        self.assertEqual(admin["adminEmails"], ["admin@example.com"])

        staff = self.client.get(reverse("contact_check_admin"), **auth(self.staff_user)).json()
        self.assertTrue(staff["isAdmin"])
        self.assertTrue(staff["isStaff"])
        self.assertNotIn("adminEmails", staff)

        check = self.client.get(reverse("contact_check_staff"), **auth(self.nobody)).json()
        self.assertEqual(check, {"success": True, "isStaff": False, "departments": []})


class SenderSideTests(TestCase):
    def setUp(self):
        self.sender = User.objects.create_user(email="visitor@example.com", password="secret1")
        self.owner = User.objects.create_user(email="owner@example.com", password="secret1")
        self.msg = make_message(assigned_to=self.owner, company_name="Acme", is_read=True)
        Reply.objects.create(message=self.msg, content="Thanks", sent_by="owner@example.com", sender_context="company")

    def test_unread_count_counts_unread_replies(self):
        resp = self.client.get(reverse("contact_user_unread_count"), **auth(self.sender))
        self.assertEqual(resp.json()["count"], 1)

    def test_list_own_messages(self):
        resp = self.client.get(reverse("contact_user_messages"), **auth(self.sender))
        data = resp.json()
        self.assertEqual(data["total"], 1)
        self.assertEqual(data["unreadCount"], 1)
        self.assertEqual(data["messages"][0]["replies"][0]["content"], "Thanks")

    def test_detail_marks_replies_read(self):
        resp = self.client.get(reverse("contact_user_detail", args=[self.msg.pk]), **auth(self.sender))
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(self.msg.replies.filter(is_read=False).exists())

    def test_other_users_cannot_read(self):
        stranger = User.objects.create_user(email="stranger@example.com", password="secret1")
        resp = self.client.get(reverse("contact_user_detail", args=[self.msg.pk]), **auth(stranger))
        self.assertEqual(resp.status_code, 404)
        resp = self.client.get(reverse("contact_detail", args=[self.msg.pk]), **auth(stranger))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"], "Access denied")

    def test_sender_reply_notifies_owner(self):
        resp = self.client.post(
            reverse("contact_user_reply", args=[self.msg.pk]),
            {"content": "Follow up"},
            content_type="application/json",
            **auth(self.sender),
        )
        self.assertEqual(resp.status_code, 201)
        self.assertTrue(Notification.objects.filter(user=self.owner, type="new_message").exists())

    def test_sender_cannot_reply_when_closed(self):
        self.msg.status = "closed"
        self.msg.save()
        resp = self.client.post(
            reverse("contact_user_reply", args=[self.msg.pk]),
            {"content": "Follow up"},
            content_type="application/json",
            **auth(self.sender),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "This conversation is closed. Please create a new contact request.")

    def test_owner_reply_keeps_status(self):
        resp = self.client.post(
            reverse("contact_reply", args=[self.msg.pk]),
            {"content": "Happy to chat", "sendEmail": False},
            content_type="application/json",
            **auth(self.owner),
        )
        self.assertEqual(resp.status_code, 200)
        self.msg.refresh_from_db()
        self.assertEqual(self.msg.status, "new")
        self.assertEqual(self.msg.replies.last().display_name, "Acme")
