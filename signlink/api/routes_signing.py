# File: signlink/api/routes_signing.py
# DESCRIPTION: Public signing API. The token in the link is the only credential.

import io

from flask import Blueprint, current_app, jsonify, request, send_file

from signlink.core.errors import InvalidRequestError
from signlink.core.tokens import get_client_ip
from signlink.log_utils.logging_config import configure_logging

logger = configure_logging("signlink.routes_signing", "signlink.log")

signing_bp = Blueprint("signlink_signing", __name__, url_prefix="/api/v1/documents")


def get_signing_engine():
    return current_app.extensions["signlink"]


@signing_bp.route("/<token>", methods=["GET"])
def view_document(token):
    logger.info(f"Processing view request for token: {token[:8]}...")
    document = get_signing_engine().resolve_for_viewing(token)
    return jsonify({
        "success": True,
        "document": document.to_summary(),
        "placement": {
            "x": document.signature_x,
            "y": document.signature_y,
            "width": document.signature_width,
            "height": document.signature_height,
            "page_number": document.page_number,
            "pdf_width": document.pdf_width,
            "pdf_height": document.pdf_height,
        },
        "pdf_url": f"{signing_bp.url_prefix}/{token}/pdf",
    }), 200


@signing_bp.route("/<token>/pdf", methods=["GET"])
def serve_original_pdf(token):
    engine = get_signing_engine()
    document = engine.resolve_for_viewing(token)
    data = engine.read_original(document)
    return send_file(io.BytesIO(data), mimetype="application/pdf", download_name=document.file_name)


@signing_bp.route("/sign", methods=["POST"])
def submit_signature():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    token = data.get("token")
    signature = data.get("signature")
    if not token or not signature:
        raise InvalidRequestError("Token and signature are required")
    if not isinstance(token, str) or not isinstance(signature, str):
        raise InvalidRequestError("Token and signature must be strings")

    logger.info(f"Submitting signature for token: {token[:8]}...")
    signer_ip = get_client_ip(request.headers.get("X-Forwarded-For"), request.remote_addr)
    document = get_signing_engine().sign(
        token,
        signature,
        signer_ip=signer_ip,
        user_agent=request.headers.get("User-Agent", ""),
    )
    return jsonify({
        "success": True,
        "message": "Document signed successfully",
        "document": document.to_summary(),
        "signed_pdf_url": f"{signing_bp.url_prefix}/{token}/signed",
    }), 200


@signing_bp.route("/<token>/signed", methods=["GET"])
def download_signed_pdf(token):
    document, data = get_signing_engine().read_signed(token)
    return send_file(
        io.BytesIO(data),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=f"signed-{document.file_name}",
    )
