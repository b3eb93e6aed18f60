# File: signlink/core/tokens.py
# DESCRIPTION: Token, expiry and link helpers shared by the engine and the web layer.

import hashlib
import re
import uuid
from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def generate_document_token() -> str:
    return str(uuid.uuid4())


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def calculate_expiry_date(now: datetime, days: int) -> datetime:
    return as_utc(now) + timedelta(days=days)


def is_expired(now: datetime, expires_at: datetime) -> bool:
    return as_utc(now) > as_utc(expires_at)


def generate_signature_link(token: str, base_url: str) -> str:
    return f"{base_url.rstrip('/')}/sign/{token}"


def sanitize_filename(filename: str) -> str:
    """Keep letters, digits, dots and dashes; everything else becomes '_'."""
    cleaned = re.sub(r"[^a-zA-Z0-9.-]", "_", filename or "")
    cleaned = re.sub(r"_{2,}", "_", cleaned)
    return cleaned[:255] or "document.pdf"


def get_client_ip(forwarded_for, remote_addr) -> str:
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return remote_addr or "unknown"


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))
