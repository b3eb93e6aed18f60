# File: signlink/api/routes_api.py
# DESCRIPTION: Administrative API: upload a PDF with its signature box, list and cancel documents.

import math

from flask import Blueprint, current_app, g, jsonify, request

from signlink.api.auth import require_admin
from signlink.core.errors import InvalidPlacementError, InvalidRequestError, PayloadTooLargeError
from signlink.core.geometry import Placement
from signlink.core.tokens import generate_signature_link
from signlink.log_utils.logging_config import configure_logging

logger = configure_logging("signlink.routes_api", "signlink.log")

api_bp = Blueprint("signlink_api", __name__, url_prefix="/api/v1/admin")


def get_signing_engine():
    return current_app.extensions["signlink"]


def _form_value(name):
    value = request.form.get(name)
    return value.strip() if value else None


def _form_float(name, required=True):
    value = _form_value(name)
    if value is None:
        if required:
            raise InvalidPlacementError("Invalid signature coordinates", field=name)
        return None
    try:
        number = float(value)
    except ValueError:
        raise InvalidPlacementError("Invalid signature coordinates", field=name)
    if not math.isfinite(number):
        raise InvalidPlacementError("Invalid signature coordinates", field=name)
    return number


def _form_int(name, default):
    value = _form_value(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise InvalidRequestError(f"{name} must be an integer", field=name)


@api_bp.route("/documents", methods=["POST"])
@require_admin
def upload_document():
    engine = get_signing_engine()
    logger.info(f"Processing document upload from admin {g.admin['adminId']}")

    uploaded_file = request.files.get("file")
    title = _form_value("title")
    if not title or uploaded_file is None:
        raise InvalidRequestError("Title and PDF file are required", field="title" if not title else "file")

    if uploaded_file.mimetype != "application/pdf":
        logger.warning(f"Rejected upload with mimetype {uploaded_file.mimetype}")
        raise InvalidRequestError("Only PDF files are allowed", field="file")

    limit = engine.settings.max_pdf_bytes
    pdf_bytes = uploaded_file.read(limit + 1)
    if len(pdf_bytes) > limit:
        raise PayloadTooLargeError("PDF", len(pdf_bytes), limit)

    placement = Placement(
        x=_form_float("signatureX"),
        y=_form_float("signatureY"),
        width=_form_float("signatureWidth"),
        height=_form_float("signatureHeight"),
        page_number=_form_int("pageNumber", 1),
        pdf_width=_form_float("pdfWidth", required=False),
        pdf_height=_form_float("pdfHeight", required=False),
    )

    created = engine.create_document(
        original_pdf=pdf_bytes,
        title=title,
        placement=placement,
        admin_id=g.admin["adminId"],
        file_name=uploaded_file.filename,
        recipient_name=_form_value("recipientName"),
        recipient_email=_form_value("recipientEmail"),
        ttl_days=_form_int("ttlDays", None),
    )

    return jsonify({
        "success": True,
        "token": created.token,
        "signing_link": created.signing_link,
        "expires_at": created.expires_at.isoformat(),
        "document": created.document.to_summary(),
    }), 201


@api_bp.route("/documents", methods=["GET"])
@require_admin
def list_documents():
    engine = get_signing_engine()
    documents = engine.list_documents()
    base_url = engine.settings.base_url
    return jsonify({
        "success": True,
        "documents": [
            {**doc.to_summary(), "token": doc.token, "signing_link": generate_signature_link(doc.token, base_url)}
            for doc in documents
        ],
    }), 200


@api_bp.route("/documents/<token>/cancel", methods=["POST"])
@require_admin
def cancel_document(token):
    logger.info(f"Cancelling document for token: {token[:8]}...")
    document = get_signing_engine().cancel_document(token, g.admin["adminId"])
    return jsonify({"success": True, "document": document.to_summary()}), 200
