# ------------------------------------------------------------------------
# File: engine.py
# Location: signlink/core/engine.py
# Description:
#     Entry point used by the web layer and scripts. It wires the
#     lifecycle, the overlay compositor, storage and notifications into
#     the create / view / sign / cancel operations. The status change to
#     SIGNED is only attempted once the signed PDF has been produced and
#     stored; if that commit fails the stored output is removed again.
# ------------------------------------------------------------------------

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Tuple, Union

from signlink.config import Settings
from signlink.core.errors import (
    DocumentNotFoundError,
    InvalidPlacementError,
    InvalidRequestError,
    InvalidStateError,
    PayloadTooLargeError,
    StorageError,
)
from signlink.core.geometry import Placement
from signlink.core.lifecycle import DocumentLifecycle
from signlink.core.pdf_loader import load_pdf, page_box
from signlink.core.signature_image import decode_signature_data
from signlink.core.signer import embed_signature_on_pdf
from signlink.core.tokens import (
    calculate_expiry_date,
    generate_document_token,
    generate_signature_link,
    hash_token,
    is_valid_email,
    sanitize_filename,
    utcnow,
)
from signlink.db.models import Document, DocumentStatus
from signlink.db.registry import DocumentRegistry, create_audit_log_event
from signlink.log_utils.logging_config import configure_logging
from signlink.notifications import WebhookNotifier
from signlink.storage import DocumentStorage

logger = configure_logging(name="signlink.engine", logfile="signlink.log", level=None)


@dataclass
class CreatedDocument:
    token: str
    expires_at: datetime
    signing_link: str
    document: Document


def _check_size(what: str, size: int, limit: int) -> None:
    if size > limit:
        logger.warning(f"{what} rejected: {size} bytes > {limit}")
        raise PayloadTooLargeError(what, size, limit)


class SigningEngine:
    def __init__(
        self,
        settings: Settings,
        registry: DocumentRegistry,
        storage: DocumentStorage,
        clock: Optional[Callable[[], datetime]] = None,
        notifier: Optional[WebhookNotifier] = None,
    ):
        self.settings = settings
        self.registry = registry
        self.storage = storage
        self.clock = clock or utcnow
        self.lifecycle = DocumentLifecycle(registry, self.clock)
        self.notifier = notifier or WebhookNotifier(settings)

    # ------------------------------------------------------------------
    # Administrative side
    # ------------------------------------------------------------------

    def create_document(
        self,
        original_pdf: bytes,
        title: str,
        placement: Placement,
        admin_id: str,
        file_name: Optional[str] = None,
        recipient_name: Optional[str] = None,
        recipient_email: Optional[str] = None,
        ttl_days: Optional[int] = None,
    ) -> CreatedDocument:
        if not admin_id:
            raise InvalidRequestError("An authenticated administrator is required", field="admin_id")
        if not title or not title.strip():
            raise InvalidRequestError("Title is required", field="title")
        _check_size("PDF", len(original_pdf or b""), self.settings.max_pdf_bytes)

        placement.validate(self.settings.min_signature_width, self.settings.min_signature_height)

        if recipient_email and not is_valid_email(recipient_email):
            raise InvalidRequestError("Invalid recipient email", field="recipient_email")

        ttl_days = self.settings.token_expiry_days if ttl_days is None else ttl_days
        if ttl_days < 1:
            raise InvalidRequestError("Expiry must be at least one day", field="ttl_days")

        reader = load_pdf(original_pdf)
        page = page_box(reader, placement.page_number)
        if placement.x + placement.width > page.width:
            raise InvalidPlacementError(
                f"Signature box runs past the right edge of page {placement.page_number} ({page.width} wide)",
                field="width",
            )
        if placement.y + placement.height > page.height:
            raise InvalidPlacementError(
                f"Signature box runs past the bottom of page {placement.page_number} ({page.height} high)",
                field="height",
            )

        now = self.clock()
        document_id = uuid.uuid4()
        token = generate_document_token()
        expires_at = calculate_expiry_date(now, ttl_days)

        original_path = self.storage.save_original(document_id, original_pdf)

        document = Document(
            id=document_id,
            title=title.strip(),
            file_name=sanitize_filename(file_name or "document.pdf"),
            file_size=len(original_pdf),
            original_path=original_path,
            signature_x=placement.x,
            signature_y=placement.y,
            signature_width=placement.width,
            signature_height=placement.height,
            page_number=placement.page_number,
            pdf_width=placement.pdf_width or page.width,
            pdf_height=placement.pdf_height or page.height,
            recipient_name=recipient_name or None,
            recipient_email=recipient_email or None,
            token=token,
            token_hash=hash_token(token),
            status=DocumentStatus.PENDING,
            admin_id=admin_id,
            created_at=now,
            updated_at=now,
            expires_at=expires_at,
            audit_log=[create_audit_log_event("created", now, admin_id=admin_id)],
        )
        try:
            self.registry.add(document)
        except Exception:
            logger.exception(f"Failed to store document record {document_id}")
            self.storage.delete(original_path)
            raise

        signing_link = generate_signature_link(token, self.settings.base_url)
        logger.info(f"Created document {document_id} ({len(reader.pages)} pages) for admin {admin_id}")

        self.notifier.send(
            f"New document ready for signing:\n"
            f"Title: {document.title}\n"
            f"URL: {signing_link}\n"
            f"Recipient: {recipient_name or ''} {recipient_email or ''}\n"
            f"Expires: {expires_at.date().isoformat()}"
        )
        return CreatedDocument(token=token, expires_at=expires_at, signing_link=signing_link, document=document)

    def cancel_document(self, token: str, admin_id: str) -> Document:
        return self.lifecycle.cancel(token, admin_id)

    def list_documents(self, admin_id: Optional[str] = None) -> List[Document]:
        return self.registry.list_documents(admin_id)

    # ------------------------------------------------------------------
    # Signer side
    # ------------------------------------------------------------------

    def resolve_for_viewing(self, token: str) -> Document:
        return self.lifecycle.resolve_for_viewing(token)

    def read_original(self, document: Document) -> bytes:
        return self.storage.read(document.original_path)

    def read_signed(self, token: str) -> Tuple[Document, bytes]:
        document = self.registry.get_by_token(token)
        if document is None:
            raise DocumentNotFoundError(token)
        if document.status != DocumentStatus.SIGNED:
            raise InvalidStateError(document.status.value, DocumentStatus.SIGNED.value, "document is not signed")
        return document, self.storage.read(document.signed_content_ref)

    def sign(
        self,
        token: str,
        signature_image: Union[bytes, str],
        signer_ip: str,
        user_agent: Optional[str] = None,
    ) -> Document:
        """
        Merge `signature_image` (PNG bytes or a PNG data URL) into the
        document behind `token` and mark it SIGNED.
        """
        limit = self.settings.max_signature_bytes
        if isinstance(signature_image, str):
            # base64 is 4/3 the size of the payload
            _check_size("Signature", len(signature_image) * 3 // 4, limit)
            signature_image = decode_signature_data(signature_image)
        _check_size("Signature", len(signature_image), limit)

        document = self.lifecycle.resolve_for_signing(token)
        logger.info(f"Signing document {document.id} for token {token[:8]}...")

        original_pdf = self.read_original(document)
        now = self.clock()
        signed_pdf = embed_signature_on_pdf(original_pdf, signature_image, document.placement, sign_date=now)

        signed_ref = self.storage.save_signed(document.id, signed_pdf, now)
        try:
            signed = self.lifecycle.commit_signature(token, signed_ref, signer_ip, now, user_agent)
        except Exception:
            logger.warning(f"Commit failed for document {document.id}; discarding {signed_ref}")
            self._discard(signed_ref)
            raise

        self.notifier.send(
            f"✅ Document signed:\n"
            f"Title: {signed.title}\n"
            f"Recipient: {signed.recipient_name or ''} {signed.recipient_email or ''}\n"
            f"Signer IP: {signer_ip}\n"
            f"Signed At: {signed.signed_at.isoformat()}"
        )
        return signed

    def _discard(self, ref: str) -> None:
        try:
            self.storage.delete(ref)
        except StorageError as e:
            logger.error(f"Could not remove orphaned output {ref}: {e.message}")
