# File: signlink/db/registry.py
# DESCRIPTION: Token-keyed document store. Status changes go through a
#     status-guarded UPDATE so two callers acting on the same token can never
#     both win a transition.

from datetime import datetime
from typing import List, Optional

from sqlalchemy import update

from signlink.core.tokens import hash_token
from signlink.db.models import Document, DocumentStatus
from signlink.log_utils.logging_config import configure_logging

logger = configure_logging("signlink.registry", "signlink.log")


def create_audit_log_event(event: str, timestamp: datetime, **details) -> dict:
    return {
        "event": event,
        "timestamp": timestamp.isoformat(),
        **details
    }


class DocumentRegistry:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    def add(self, document: Document) -> Document:
        with self._session_factory() as session:
            session.add(document)
            session.commit()
            logger.debug(f"Stored document {document.id} with token hash {document.token_hash[:8]}...")
            return document

    def get_by_token(self, token: str) -> Optional[Document]:
        with self._session_factory() as session:
            return session.query(Document).filter_by(token_hash=hash_token(token)).first()

    def list_documents(self, admin_id: Optional[str] = None) -> List[Document]:
        with self._session_factory() as session:
            query = session.query(Document)
            if admin_id:
                query = query.filter_by(admin_id=admin_id)
            return query.order_by(Document.created_at.desc()).all()

    def transition(
        self,
        token: str,
        expected: DocumentStatus,
        new_status: DocumentStatus,
        now: datetime,
        event: str,
        audit_details: Optional[dict] = None,
        **values,
    ) -> bool:
        """
        Move the document from `expected` to `new_status` and set `values`.

        Returns False, without writing anything, when the stored status is no
        longer `expected` (someone else got there first).
        """
        token_hash = hash_token(token)
        with self._session_factory() as session:
            audit_log = session.query(Document.audit_log).filter_by(token_hash=token_hash).scalar()
            entry = create_audit_log_event(event, now, **(audit_details or {}))
            audit_log = list(audit_log or []) + [entry]

            stmt = (
                update(Document)
                .where(Document.token_hash == token_hash, Document.status == expected)
                .values(status=new_status, updated_at=now, audit_log=audit_log, **values)
                .execution_options(synchronize_session=False)
            )
            result = session.execute(stmt)
            if result.rowcount != 1:
                session.rollback()
                logger.warning(
                    f"Transition {expected.value} -> {new_status.value} lost for token hash {token_hash[:8]}..."
                )
                return False
            session.commit()

        logger.info(f"Document {token_hash[:8]}... moved {expected.value} -> {new_status.value}")
        return True
