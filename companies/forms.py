from django import forms
from django.conf import settings

from .models import Company, TeamMember


class CompanyForm(forms.ModelForm):
    class Meta:
        model = Company
        fields = [
            "name",
            "email",
            "description",
            "website",
            "location",
            "industry",
            "size",
            "founded_year",
            "phone",
            "logo",
            "cover_image",
        ]
        error_messages = {
            "name": {"required": "Company name is required", "unique": "Company with this name or email already exists"},
            "email": {"required": "Valid email is required", "unique": "Company with this name or email already exists"},
            "description": {"required": "Description is required"},
            "location": {"required": "Location is required"},
            "industry": {"required": "Industry is required"},
            "size": {"required": "Company size is required"},
        }

    def _check_image(self, name):
        f = self.cleaned_data.get(name)
        if f and hasattr(f, "size") and f.size > settings.IMAGE_MAX_UPLOAD_BYTES:
            raise forms.ValidationError("File too large. Maximum size is 5MB.")
        return f

    def clean_logo(self):
        return self._check_image("logo")

    def clean_cover_image(self):
        return self._check_image("cover_image")

    def clean_email(self):
        return self.cleaned_data["email"].strip().lower()


class TeamMemberForm(forms.Form):
    userId = forms.IntegerField(error_messages={"required": "User ID is required"})
    role = forms.ChoiceField(choices=TeamMember.Role.choices, error_messages={"invalid_choice": "Invalid role"})
    permissions = forms.JSONField(required=False)
