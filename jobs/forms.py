from django import forms

from .models import Job

STATUS_UPDATE_CHOICES = [
    (Job.Status.ACTIVE, "Active"),
    (Job.Status.CLOSED, "Closed"),
    (Job.Status.DRAFT, "Draft"),
    (Job.Status.PAUSED, "Paused"),
]

# camelCase request keys -> model fields
FIELD_ALIASES = {
    "employmentType": "employment_type",
    "type": "employment_type",
    "salaryMin": "salary_min",
    "salaryMax": "salary_max",
    "salaryCurrency": "salary_currency",
    "salaryNegotiable": "salary_negotiable",
    "salaryPeriod": "salary_period",
    "experienceMinYears": "experience_min_years",
    "experienceMaxYears": "experience_max_years",
    "applicationInstructions": "application_instructions",
    "applicationDeadline": "application_deadline",
    "isFeatured": "is_featured",
    "isUrgent": "is_urgent",
}


def _join(value, sep: str) -> str:
    if isinstance(value, (list, tuple)):
        return sep.join(str(v).strip() for v in value if str(v).strip())
    return value or ""


def normalize_job_payload(data: dict) -> dict:
    """Map the JSON shape clients send onto JobForm field names."""
    out = {}
    for key, value in data.items():
        out[FIELD_ALIASES.get(key, key)] = value

    salary = out.pop("salary", None)
    if isinstance(salary, dict):
        for src, dst in (
            ("min", "salary_min"),
            ("max", "salary_max"),
            ("currency", "salary_currency"),
            ("isNegotiable", "salary_negotiable"),
            ("period", "salary_period"),
        ):
            if src in salary:
                out[dst] = salary[src]

    experience = out.pop("experience", None)
    if isinstance(experience, dict):
        if "minYears" in experience:
            out["experience_min_years"] = experience["minYears"]
        if "maxYears" in experience:
            out["experience_max_years"] = experience["maxYears"]

    for name in ("skills", "tags"):
        if name in out:
            out[name] = _join(out[name], ", ")
    for name in ("requirements", "responsibilities", "benefits"):
        if name in out:
            out[name] = _join(out[name], "\n")
    return out


class JobForm(forms.ModelForm):
    class Meta:
        model = Job
        fields = [
            "title",
            "description",
            "location",
            "employment_type",
            "salary_min",
            "salary_max",
            "salary_currency",
            "salary_negotiable",
            "salary_period",
            "skills",
            "tags",
            "requirements",
            "responsibilities",
            "benefits",
            "experience_min_years",
            "experience_max_years",
            "education",
            "application_instructions",
            "is_featured",
            "is_urgent",
            "application_deadline",
            "status",
        ]
        error_messages = {
            "title": {"required": "Job title is required", "max_length": "Title cannot exceed 100 characters"},
            "description": {"required": "Job description is required"},
            "location": {"required": "Location is required"},
        }

    def __init__(self, *args, creating: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.creating = creating
        for name in ("salary_currency", "salary_period", "employment_type", "education", "status", "experience_min_years"):
            self.fields[name].required = False

    def clean_description(self):
        description = (self.cleaned_data.get("description") or "").strip()
        if self.creating and len(description) < 50:
            raise forms.ValidationError("Description must be at least 50 characters")
        return description

    def clean(self):
        cleaned = super().clean()
        defaults = {
            "salary_currency": "USD",
            "salary_period": "year",
            "employment_type": "Full-time",
            "education": "Any",
            "experience_min_years": 0,
        }
        for name, default in defaults.items():
            if cleaned.get(name) in (None, ""):
                cleaned[name] = getattr(self.instance, name, None) if self.instance.pk else default
        if not cleaned.get("status"):
            cleaned["status"] = self.instance.status if self.instance.pk else Job.Status.ACTIVE
        lo, hi = cleaned.get("salary_min"), cleaned.get("salary_max")
        if lo is not None and hi is not None and hi < lo:
            self.add_error("salary_max", "Maximum salary cannot be less than minimum salary")
        return cleaned


class JobStatusForm(forms.Form):
    status = forms.ChoiceField(
        choices=STATUS_UPDATE_CHOICES,
        error_messages={"required": "Status is required", "invalid_choice": "Invalid status"},
    )
