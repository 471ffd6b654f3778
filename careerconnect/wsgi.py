"""WSGI config for the careerconnect project."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "careerconnect.settings")

application = get_wsgi_application()
