# ------------------------------------------------------------------------
# File: lifecycle.py
# Location: signlink/core/lifecycle.py
# Description:
#     Document lifecycle. A document starts PENDING and can move exactly
#     once, to SIGNED, EXPIRED or CANCELLED. Expiry is discovered lazily
#     when a document is accessed after its deadline; there is no sweep.
#     Every write goes through DocumentRegistry.transition(), which only
#     succeeds if the stored status is still the one we read.
# ------------------------------------------------------------------------

from datetime import datetime
from typing import Callable, Optional

from signlink.core.errors import (
    AlreadySignedError,
    DocumentCancelledError,
    DocumentExpiredError,
    DocumentNotFoundError,
    InvalidStateError,
)
from signlink.core.tokens import is_expired, utcnow
from signlink.db.models import Document, DocumentStatus
from signlink.db.registry import DocumentRegistry
from signlink.log_utils.logging_config import configure_logging

logger = configure_logging(name="signlink.lifecycle", logfile="signlink.log", level=None)

ALLOWED_TRANSITIONS = {
    DocumentStatus.PENDING: {DocumentStatus.SIGNED, DocumentStatus.EXPIRED, DocumentStatus.CANCELLED},
    DocumentStatus.SIGNED: set(),
    DocumentStatus.EXPIRED: set(),
    DocumentStatus.CANCELLED: set(),
}


def can_transition(current: DocumentStatus, target: DocumentStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def evaluate_expiry(now: datetime, expires_at: datetime, status: DocumentStatus) -> DocumentStatus:
    """Status the document should have at `now`; only PENDING can lapse."""
    if status == DocumentStatus.PENDING and is_expired(now, expires_at):
        return DocumentStatus.EXPIRED
    return status


class DocumentLifecycle:
    def __init__(self, registry: DocumentRegistry, clock: Optional[Callable[[], datetime]] = None):
        self.registry = registry
        self.clock = clock or utcnow

    def _load(self, token: str) -> Document:
        document = self.registry.get_by_token(token)
        if document is None:
            logger.warning(f"Unknown token: {token[:8]}...")
            raise DocumentNotFoundError(token)
        return document

    def _guard(self, token: str, purpose: str) -> Document:
        document = self._load(token)

        if document.status == DocumentStatus.SIGNED:
            raise AlreadySignedError()
        if document.status == DocumentStatus.CANCELLED:
            raise DocumentCancelledError()
        if document.status == DocumentStatus.EXPIRED:
            raise DocumentExpiredError(document.expires_at)

        now = self.clock()
        if evaluate_expiry(now, document.expires_at, document.status) == DocumentStatus.EXPIRED:
            logger.info(f"Token {token[:8]}... expired at {document.expires_at} (seen while {purpose})")
            if not self.registry.transition(
                token, DocumentStatus.PENDING, DocumentStatus.EXPIRED, now, "expired"
            ):
                # Someone changed it in between; report what is stored now
                return self._guard(token, purpose)
            raise DocumentExpiredError(document.expires_at)

        return document

    def resolve_for_viewing(self, token: str) -> Document:
        return self._guard(token, "viewing")

    def resolve_for_signing(self, token: str) -> Document:
        return self._guard(token, "signing")

    def commit_signature(
        self,
        token: str,
        signed_content_ref: str,
        signer_ip: str,
        now: Optional[datetime] = None,
        user_agent: Optional[str] = None,
    ) -> Document:
        """
        PENDING -> SIGNED, at most once per token.

        A caller that lost the race (or found the document in any other
        state) gets InvalidStateError and nothing is written.
        """
        now = now or self.clock()
        document = self._load(token)
        if not can_transition(document.status, DocumentStatus.SIGNED):
            raise InvalidStateError(document.status.value, DocumentStatus.SIGNED.value)

        committed = self.registry.transition(
            token,
            DocumentStatus.PENDING,
            DocumentStatus.SIGNED,
            now,
            "signed",
            audit_details={"signer_ip": signer_ip},
            signed_at=now,
            signer_ip=signer_ip,
            signed_content_ref=signed_content_ref,
            user_agent=user_agent,
        )
        if not committed:
            current = self._load(token)
            raise InvalidStateError(
                current.status.value, DocumentStatus.SIGNED.value, "document changed during signing"
            )

        logger.info(f"Signature committed for token {token[:8]}... from {signer_ip}")
        return self._load(token)

    def cancel(self, token: str, admin_id: str) -> Document:
        now = self.clock()
        document = self._load(token)
        if not can_transition(document.status, DocumentStatus.CANCELLED):
            raise InvalidStateError(document.status.value, DocumentStatus.CANCELLED.value)

        if not self.registry.transition(
            token, DocumentStatus.PENDING, DocumentStatus.CANCELLED, now, "cancelled",
            audit_details={"admin_id": admin_id}, cancelled_at=now,
        ):
            current = self._load(token)
            raise InvalidStateError(current.status.value, DocumentStatus.CANCELLED.value)

        logger.info(f"Document {document.id} cancelled by {admin_id}")
        return self._load(token)
