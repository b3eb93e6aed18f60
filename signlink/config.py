# File: signlink/config.py
# DESCRIPTION: Explicit runtime configuration for the signing engine and the web app.

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_MAX_PDF_BYTES = 50 * 1024 * 1024
DEFAULT_MAX_SIGNATURE_BYTES = 5 * 1024 * 1024


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Settings are built once and handed to create_app() / SigningEngine."""

    database_url: str = "sqlite:///signlink.db"
    storage_root: str = "storage"
    base_url: str = "http://localhost:3000"
    token_expiry_days: int = 30
    jwt_secret: str = "change-me-in-production"
    jwt_expiry_days: int = 7
    max_pdf_bytes: int = DEFAULT_MAX_PDF_BYTES
    max_signature_bytes: int = DEFAULT_MAX_SIGNATURE_BYTES
    min_signature_width: float = 50
    min_signature_height: float = 30
    webhook_url: Optional[str] = None
    disable_webhooks: bool = False

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        load_dotenv(env_file or os.environ.get("SIGNLINK_ENV_FILE", ".env"))
        return cls(
            database_url=os.environ.get("SIGNLINK_DATABASE_URL", cls.database_url),
            storage_root=os.environ.get("SIGNLINK_STORAGE_ROOT", cls.storage_root),
            base_url=os.environ.get("BASE_URL", cls.base_url).rstrip("/"),
            token_expiry_days=int(os.environ.get("TOKEN_EXPIRY_DAYS", cls.token_expiry_days)),
            jwt_secret=os.environ.get("JWT_SECRET", cls.jwt_secret),
            jwt_expiry_days=int(os.environ.get("JWT_EXPIRY_DAYS", cls.jwt_expiry_days)),
            max_pdf_bytes=int(os.environ.get("MAX_PDF_BYTES", cls.max_pdf_bytes)),
            max_signature_bytes=int(os.environ.get("MAX_SIGNATURE_BYTES", cls.max_signature_bytes)),
            webhook_url=os.environ.get("RC_WEBHOOK_URL") or None,
            disable_webhooks=_env_bool("DISABLE_WEBHOOKS"),
        )
