"""Small helpers shared by the JSON views."""

import json
from io import BytesIO
from typing import Any

from django.core.paginator import Paginator
from django.http import JsonResponse, QueryDict
from django.utils.datastructures import MultiValueDict


class ApiBadRequest(Exception):
    """Raised inside a view to answer 400 with the given message."""

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.extra = extra


def json_ok(payload: dict | None = None, status: int = 200, **extra: Any) -> JsonResponse:
    data = {"success": True}
    data.update(payload or {})
    data.update(extra)
    return JsonResponse(data, status=status)


def json_error(message: str, status: int = 400, **extra: Any) -> JsonResponse:
    data = {"success": False, "error": message}
    data.update(extra)
    return JsonResponse(data, status=status)


def form_errors(form) -> dict:
    return {field: [str(e) for e in errs] for field, errs in form.errors.items()}


def form_error(form, status: int = 400) -> JsonResponse:
    errors = form_errors(form)
    first = next(iter(errors.values()), ["Invalid data"])[0]
    return json_error(first, status=status, errors=errors)


def _form_body(request):
    """Form fields and uploads for any method; Django only parses them for POST."""
    if request.method == "POST":
        return request.POST, request.FILES
    cached = getattr(request, "_api_form_body", None)
    if cached is not None:
        return cached
    if request.content_type == "multipart/form-data":
        stream = BytesIO(request._body) if hasattr(request, "_body") else request
        data, files = request.parse_file_upload(request.META, stream)
    elif request.content_type == "application/x-www-form-urlencoded":
        data, files = QueryDict(request.body, encoding=request.encoding), MultiValueDict()
    else:
        data, files = QueryDict(), MultiValueDict()
    request._api_form_body = (data, files)
    return data, files


def payload(request) -> dict:
    """Request data as a dict: JSON body when sent as JSON, otherwise form fields."""
    if request.content_type == "application/json":
        raw = request.body.decode("utf-8") if request.body else ""
        data = json.loads(raw) if raw.strip() else {}
        if not isinstance(data, dict):
            raise ApiBadRequest("JSON body must be an object")
        return data
    return _form_body(request)[0].dict()


def uploaded_files(request) -> MultiValueDict:
    """Uploaded files of a multipart body, for POST as well as PUT and PATCH."""
    if request.content_type == "application/json":
        return MultiValueDict()
    return _form_body(request)[1]


def json_field(value, default):
    """Accept an already decoded value or a JSON string sent in a multipart field."""
    if value in (None, ""):
        return default
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            raise ApiBadRequest("Invalid JSON value")
    return value


def _safe_int(v, default=None):
    try:
        if v is None or v == "":
            return default
        return int(v)
    except (TypeError, ValueError):
        return default


def _safe_bool(v) -> bool | None:
    if v is None or v == "":
        return None
    if isinstance(v, bool):
        return v
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


def page_params(request, default_limit: int = 10, max_limit: int = 100) -> tuple[int, int]:
    page = max(1, _safe_int(request.GET.get("page"), 1))
    limit = _safe_int(request.GET.get("limit"), default_limit)
    limit = min(max(1, limit), max_limit)
    return page, limit


def _paginate(queryset, page: int, per_page: int):
    paginator = Paginator(queryset, per_page)
    return paginator, paginator.get_page(page)


def iso(value) -> str | None:
    return value.isoformat() if value else None


def file_url(field) -> str | None:
    return field.url if field else None
