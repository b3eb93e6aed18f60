# File: signlink/db/models.py

from sqlalchemy import (
    Column, String, DateTime, Enum, JSON, Text, Integer, Float, Uuid
)
from sqlalchemy.orm import declarative_base
import enum
import uuid
import datetime

from signlink.core.geometry import Placement
from signlink.core.tokens import as_utc

Base = declarative_base()


def _utcnow():
    return datetime.datetime.now(datetime.timezone.utc)


class DocumentStatus(enum.Enum):
    PENDING = "PENDING"
    SIGNED = "SIGNED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class Document(Base):
    __tablename__ = "documents"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False)
    file_name = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False)
    original_path = Column(String, nullable=False)

    # Signature box in capture space (top-left origin)
    signature_x = Column(Float, nullable=False)
    signature_y = Column(Float, nullable=False)
    signature_width = Column(Float, nullable=False)
    signature_height = Column(Float, nullable=False)
    page_number = Column(Integer, nullable=False, default=1)
    pdf_width = Column(Float, nullable=True)
    pdf_height = Column(Float, nullable=True)

    recipient_name = Column(String, nullable=True)
    recipient_email = Column(String, nullable=True)

    token = Column(String, nullable=False, unique=True)
    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    status = Column(Enum(DocumentStatus), nullable=False, default=DocumentStatus.PENDING)
    admin_id = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    signed_at = Column(DateTime(timezone=True), nullable=True)
    signer_ip = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    signed_content_ref = Column(String, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    audit_log = Column(JSON, nullable=True)

    @property
    def placement(self) -> Placement:
        return Placement(
            x=self.signature_x,
            y=self.signature_y,
            width=self.signature_width,
            height=self.signature_height,
            page_number=self.page_number,
            pdf_width=self.pdf_width,
            pdf_height=self.pdf_height,
        )

    def to_summary(self) -> dict:
        return {
            "id": str(self.id),
            "title": self.title,
            "file_name": self.file_name,
            "status": self.status.value,
            "recipient_name": self.recipient_name,
            "recipient_email": self.recipient_email,
            "page_number": self.page_number,
            "created_at": as_utc(self.created_at).isoformat() if self.created_at else None,
            "expires_at": as_utc(self.expires_at).isoformat() if self.expires_at else None,
            "signed_at": as_utc(self.signed_at).isoformat() if self.signed_at else None,
        }
