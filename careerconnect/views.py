from django.http import HttpResponseNotFound

from .api import json_error


def not_found(request, exception=None):
    if request.path.startswith("/api/"):
        return json_error("Not Found", status=404)
    return HttpResponseNotFound("Not Found")
