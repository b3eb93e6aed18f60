# File: signlink/api/auth.py
# DESCRIPTION: Bearer-token authentication for the administrative API.

from datetime import timedelta
from functools import wraps

import jwt
from flask import current_app, g, request

from signlink.config import Settings
from signlink.core.errors import AuthenticationError
from signlink.core.tokens import utcnow
from signlink.log_utils.logging_config import configure_logging

logger = configure_logging("signlink.auth", "signlink.log")

JWT_ALGORITHM = "HS256"


def generate_admin_token(settings: Settings, admin_id: str, email: str) -> str:
    now = utcnow()
    payload = {
        "adminId": admin_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expiry_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def verify_admin_token(settings: Settings, token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected admin token: {e}")
        raise AuthenticationError("Invalid token") from e

    if not payload.get("adminId"):
        raise AuthenticationError("Token carries no administrator identity")
    return payload


def get_token_from_request():
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[len("Bearer "):].strip()
    return None


def require_admin(view):
    """Reject the request unless it carries a valid admin JWT; exposes it as g.admin."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        token = get_token_from_request()
        if not token:
            raise AuthenticationError("Missing bearer token")
        g.admin = verify_admin_token(current_app.config["SIGNLINK_SETTINGS"], token)
        return view(*args, **kwargs)
    return wrapper
