from django import forms

from .models import ContactMessage


class ContactForm(forms.Form):
    name = forms.CharField(max_length=100, error_messages={"required": "Name is required"})
    email = forms.EmailField(
        error_messages={"required": "Email is required", "invalid": "Please provide a valid email"}
    )
    subject = forms.CharField(
        max_length=200,
        error_messages={"required": "Subject is required", "max_length": "Subject cannot exceed 200 characters"},
    )
    message = forms.CharField(
        max_length=2000,
        error_messages={"required": "Message is required", "max_length": "Message cannot exceed 2000 characters"},
    )
    category = forms.ChoiceField(
        choices=ContactMessage.Category.choices, required=False, error_messages={"invalid_choice": "Invalid category"}
    )
    priority = forms.ChoiceField(choices=ContactMessage.Priority.choices, required=False)
    companyId = forms.IntegerField(required=False)

    def clean_email(self):
        return self.cleaned_data["email"].strip().lower()


class MessageStatusForm(forms.Form):
    status = forms.ChoiceField(
        choices=ContactMessage.Status.choices,
        error_messages={"required": "Invalid status", "invalid_choice": "Invalid status"},
    )
    notes = forms.CharField(required=False)


class ReplyForm(forms.Form):
    content = forms.CharField(error_messages={"required": "Reply content is required"})
    sendEmail = forms.NullBooleanField(required=False)
