from django import forms
from django.conf import settings
from django.contrib.auth import get_user_model

from .models import Education, Experience, PortfolioLink, Staff

User = get_user_model()


def _validate_image_size(f):
    if f and f.size > settings.IMAGE_MAX_UPLOAD_BYTES:
        raise forms.ValidationError("File too large. Maximum size is 5MB.")


class RegisterForm(forms.Form):
    name = forms.CharField(max_length=50, error_messages={"required": "Name is required"})
    email = forms.EmailField(error_messages={"required": "Email is required", "invalid": "Invalid email"})
    age = forms.IntegerField(
        min_value=16,
        max_value=100,
        error_messages={"required": "Age is required", "invalid": "Age must be a number"},
    )
    role = forms.ChoiceField(choices=User.Role.choices, error_messages={"required": "Role is required"})
    password = forms.CharField(
        min_length=6,
        error_messages={"min_length": "Password must be at least 6 characters"},
    )

    def __init__(self, data=None, *args, **kwargs):
        # Role labels ("Looking for job", "Hiring job") are accepted as well as values.
        if data is not None and data.get("role"):
            labels = {str(label).lower(): value for value, label in User.Role.choices}
            data = dict(data)
            data["role"] = labels.get(str(data["role"]).lower(), data["role"])
        super().__init__(data, *args, **kwargs)

    def clean_email(self):
        return self.cleaned_data["email"].strip().lower()


class LoginForm(forms.Form):
    email = forms.EmailField(error_messages={"invalid": "Invalid email"})
    password = forms.CharField(error_messages={"required": "Password is required"})

    def clean_email(self):
        return self.cleaned_data["email"].strip().lower()


class ForgotPasswordForm(forms.Form):
    email = forms.EmailField()


class VerifyCodeForm(forms.Form):
    email = forms.EmailField()
    code = forms.RegexField(regex=r"^\d{6}$", error_messages={"invalid": "Invalid verification code"})


class ResetPasswordForm(VerifyCodeForm):
    newPassword = forms.CharField(
        min_length=6,
        error_messages={"min_length": "Password must be at least 6 characters"},
    )


class ProfileForm(forms.ModelForm):
    skills = forms.CharField(required=False)

    class Meta:
        model = User
        fields = [
            "name",
            "phone",
            "location",
            "bio",
            "headline",
            "current_position",
            "current_company",
            "linkedin",
            "portfolio",
            "skills",
        ]

    def clean_skills(self):
        raw = self.data.get("skills")
        if isinstance(raw, (list, tuple)):
            names = []
            for item in raw:
                name = item.get("name") if isinstance(item, dict) else item
                if name and str(name).strip():
                    names.append(str(name).strip())
            return ", ".join(names)
        return (self.cleaned_data.get("skills") or "").strip()


class ProfileImageForm(forms.Form):
    profileImage = forms.FileField(validators=[_validate_image_size])

    def clean_profileImage(self):
        f = self.cleaned_data["profileImage"]
        ext = f.name.rsplit(".", 1)[-1].lower() if "." in f.name else ""
        if ext not in {"jpeg", "jpg", "png", "gif"}:
            raise forms.ValidationError("Only image files are allowed (jpeg, jpg, png, gif)")
        return f


EDUCATION_ALIASES = {
    "fieldOfStudy": "field_of_study",
    "startYear": "start_year",
    "endYear": "end_year",
    "isCurrentlyStudying": "is_current",
}

EXPERIENCE_ALIASES = {
    "startDate": "start_date",
    "endDate": "end_date",
    "currentlyWorking": "is_current",
}


def entry_data(item, aliases: dict) -> dict:
    """Map a client education/experience entry onto model field names.

    Dates sent as full ISO timestamps keep only their date part.
    """
    if not isinstance(item, dict):
        return {}
    out = {}
    for key, value in item.items():
        field = aliases.get(key, key)
        if field in ("start_date", "end_date") and isinstance(value, str) and "T" in value:
            value = value.split("T", 1)[0]
        out[field] = value
    return out


class EducationForm(forms.ModelForm):
    class Meta:
        model = Education
        fields = ["institution", "degree", "field_of_study", "start_year", "end_year", "is_current", "description"]


class ExperienceForm(forms.ModelForm):
    class Meta:
        model = Experience
        fields = ["title", "company", "location", "start_date", "end_date", "is_current", "description"]

    def clean(self):
        cleaned = super().clean()
        start, end = cleaned.get("start_date"), cleaned.get("end_date")
        if start and end and end < start:
            raise forms.ValidationError("End date cannot be before start date")
        return cleaned


class PortfolioLinkForm(forms.ModelForm):
    url = forms.URLField(error_messages={"required": "URL is required"})
    type = forms.ChoiceField(choices=PortfolioLink.LinkType.choices, required=False)

    class Meta:
        model = PortfolioLink
        fields = ["title", "url", "description", "type"]

    def clean_type(self):
        return self.cleaned_data.get("type") or PortfolioLink.LinkType.WEBSITE


class StaffForm(forms.ModelForm):
    departments = forms.MultipleChoiceField(
        choices=Staff.Department.choices,
        error_messages={"required": "At least one department must be assigned"},
    )

    class Meta:
        model = Staff
        fields = ["email", "name", "departments"]

    def clean_email(self):
        return self.cleaned_data["email"].strip().lower()

    def clean_departments(self):
        return ", ".join(self.cleaned_data["departments"])
