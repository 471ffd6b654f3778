from django import forms
from django.conf import settings
from django.core.validators import FileExtensionValidator

from .models import RESUME_EXTENSIONS, Application, Communication

DOCUMENT_ERROR = "Only document files are allowed (PDF, DOC, DOCX, TXT, RTF)"


def _check_document(f):
    if f is None:
        return f
    ext = f.name.rsplit(".", 1)[-1].lower() if "." in f.name else ""
    if ext not in RESUME_EXTENSIONS:
        raise forms.ValidationError(DOCUMENT_ERROR)
    if f.size > settings.RESUME_MAX_UPLOAD_BYTES:
        raise forms.ValidationError("File too large. Maximum size is 10MB.")
    return f


class ApplicationForm(forms.Form):
    jobId = forms.IntegerField(error_messages={"required": "Job ID is required", "invalid": "Job ID is required"})
    resume = forms.FileField(required=False, validators=[FileExtensionValidator(RESUME_EXTENSIONS, DOCUMENT_ERROR)])
    coverLetter = forms.FileField(required=False)
    coverLetterText = forms.CharField(required=False, max_length=5000, error_messages={"max_length": "Cover letter too long"})
    portfolio = forms.URLField(required=False, error_messages={"invalid": "Invalid portfolio URL"})
    linkedin = forms.URLField(required=False, error_messages={"invalid": "Invalid LinkedIn URL"})
    phone = forms.RegexField(
        regex=r"^\+?[\d\s\-()]{7,20}$", required=False, error_messages={"invalid": "Invalid phone number"}
    )
    location = forms.CharField(required=False, max_length=255)
    additionalInfo = forms.CharField(required=False)
    portfolioLinks = forms.CharField(required=False)
    questions = forms.CharField(required=False)

    def clean_resume(self):
        return _check_document(self.cleaned_data.get("resume"))

    def clean_coverLetter(self):
        return _check_document(self.cleaned_data.get("coverLetter"))


class StatusUpdateForm(forms.Form):
    status = forms.ChoiceField(
        choices=Application.Status.choices,
        error_messages={"required": "Status is required", "invalid_choice": "Invalid status"},
    )
    notes = forms.CharField(required=False)
    rejectionReason = forms.CharField(required=False)
    interviewDetails = forms.JSONField(required=False)


class InterviewDetailsForm(forms.Form):
    scheduledDate = forms.DateTimeField(required=False)
    interviewType = forms.ChoiceField(choices=Application.InterviewType.choices, required=False)
    location = forms.CharField(required=False, max_length=255)
    notes = forms.CharField(required=False)
    feedback = forms.CharField(required=False)
    rating = forms.IntegerField(required=False, min_value=1, max_value=5)


class NoteForm(forms.Form):
    note = forms.CharField(error_messages={"required": "Note is required"})


class CommunicationForm(forms.Form):
    type = forms.ChoiceField(choices=Communication.Type.choices, error_messages={"invalid_choice": "Invalid type"})
    subject = forms.CharField(max_length=255, error_messages={"required": "Subject is required"})
    message = forms.CharField(error_messages={"required": "Message is required"})


class ScoreForm(forms.Form):
    score = forms.IntegerField(min_value=0, max_value=100)
    skillsMatch = forms.IntegerField(min_value=0, max_value=100)
