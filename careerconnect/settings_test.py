"""Settings for the test suite: in-memory database, local mail and cache."""
import os
import tempfile
from pathlib import Path

os.environ.setdefault("DB_ENGINE", "django.db.backends.postgresql")

from .settings import *  # noqa: E402,F401,F403

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}}
MEDIA_ROOT = tempfile.mkdtemp(prefix="careerconnect-media-")
ADMIN_EMAILS = ["admin@example.com"]
LOG_DIR = Path(tempfile.mkdtemp(prefix="careerconnect-logs-"))
EMAIL_LOG = LOG_DIR / "email.log"
