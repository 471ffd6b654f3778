"""Outgoing mail.

Every message is appended to ``settings.EMAIL_LOG`` as a JSON line and to a
plain-text outbox next to it, then handed to Django's configured backend
(console by default in development).
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from django.conf import settings
from django.core.mail import send_mail


def _append_jsonl(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")


def _log_path() -> Path:
    path = getattr(settings, "EMAIL_LOG", None)
    if not path:
        path = Path(getattr(settings, "LOG_DIR", ".")) / "email.log"
    return Path(str(path))


def send_email(
    *,
    to_emails: Iterable[str],
    subject: str,
    message: str,
    tag: str = "EMAIL",
    meta: dict[str, Any] | None = None,
    from_email: str | None = None,
) -> int:
    """Log and send one email to every address in ``to_emails``.

    Returns the number of recipients; nothing is sent when the list is empty.
    """
    recipients = [e for e in (to_emails or []) if e]
    if not recipients:
        return 0

    now = datetime.now(timezone.utc).isoformat()
    record = {
        "ts": now,
        "tag": tag,
        "to": recipients,
        "subject": subject,
        "message": message,
        "meta": dict(meta or {}),
    }
    log_path = _log_path()
    _append_jsonl(log_path, record)

    with (log_path.parent / "email_outbox.txt").open("a", encoding="utf-8") as f:
        f.write("=" * 72 + "\n")
        f.write(f"Time: {now}\n")
        f.write(f"To: {', '.join(recipients)}\n")
        f.write(f"Tag: {tag}\n")
        f.write(f"Subject: {subject}\n\n")
        f.write((message or "").strip() + "\n\n")

    send_mail(
        subject=subject,
        message=message,
        from_email=from_email or settings.DEFAULT_FROM_EMAIL,
        recipient_list=recipients,
        fail_silently=False,
    )
    return len(recipients)
