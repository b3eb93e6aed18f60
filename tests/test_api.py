# File: tests/test_api.py
# HTTP surface: admin upload/list/cancel behind a bearer token and the
# public view/sign/download routes keyed by the signing token.

import io

import pytest

from signlink import create_app
from signlink.api.auth import generate_admin_token
from signlink.db.models import DocumentStatus


@pytest.fixture
def app(settings, engine):
    app = create_app(settings, engine)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers(settings):
    return {"Authorization": f"Bearer {generate_admin_token(settings, 'admin-1', 'admin@example.com')}"}


def _upload_form(pdf_bytes, **overrides):
    form = {
        "file": (io.BytesIO(pdf_bytes), "lease.pdf", "application/pdf"),
        "title": "Lease agreement",
        "signatureX": "100",
        "signatureY": "700",
        "signatureWidth": "200",
        "signatureHeight": "60",
        "pageNumber": "1",
        "recipientName": "Jane Test",
        "recipientEmail": "jane@example.com",
    }
    form.update(overrides)
    return form


def _upload(client, headers, pdf_bytes, **overrides):
    return client.post(
        "/api/v1/admin/documents",
        data=_upload_form(pdf_bytes, **overrides),
        headers=headers,
        content_type="multipart/form-data",
    )


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


# ----------------------------------------------------------------------
# Admin API
# ----------------------------------------------------------------------

def test_admin_routes_require_bearer_token(client, sample_pdf):
    response = _upload(client, {}, sample_pdf)
    assert response.status_code == 401
    assert response.get_json()["error"]["code"] == "UNAUTHORIZED"

    assert client.get("/api/v1/admin/documents").status_code == 401


def test_token_signed_with_other_secret_is_rejected(client, settings):
    forged = generate_admin_token(settings.__class__(jwt_secret="other"), "admin-1", "a@example.com")
    response = client.get("/api/v1/admin/documents", headers={"Authorization": f"Bearer {forged}"})
    assert response.status_code == 401


def test_upload_document(client, admin_headers, sample_pdf, notifier):
    response = _upload(client, admin_headers, sample_pdf)
    assert response.status_code == 201

    body = response.get_json()
    assert body["success"] is True
    assert body["signing_link"] == f"https://sign.example.test/sign/{body['token']}"
    assert body["expires_at"].startswith("2024-02-14")
    assert body["document"]["status"] == "PENDING"
    assert body["document"]["file_name"] == "lease.pdf"
    assert len(notifier.messages) == 1


def test_upload_requires_title_and_file(client, admin_headers, sample_pdf):
    form = _upload_form(sample_pdf)
    del form["file"]
    response = client.post("/api/v1/admin/documents", data=form, headers=admin_headers,
                           content_type="multipart/form-data")
    assert response.status_code == 400
    assert response.get_json()["error"]["details"] == {"field": "file"}

    response = _upload(client, admin_headers, sample_pdf, title="")
    assert response.status_code == 400
    assert response.get_json()["error"] == {
        "code": "VALIDATION_ERROR",
        "message": "Title and PDF file are required",
        "details": {"field": "title"},
    }


def test_upload_rejects_non_pdf_mimetype(client, admin_headers, sample_pdf):
    response = _upload(client, admin_headers, sample_pdf, file=(io.BytesIO(sample_pdf), "lease.txt", "text/plain"))
    assert response.status_code == 400
    assert response.get_json()["error"]["message"] == "Only PDF files are allowed"
    assert response.get_json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.parametrize("overrides,status,code", [
    ({"signatureWidth": "40"}, 422, "INVALID_PLACEMENT"),
    ({"signatureX": "left"}, 422, "INVALID_PLACEMENT"),
    ({"signatureY": "nan"}, 422, "INVALID_PLACEMENT"),
    ({"pdfWidth": "nan"}, 422, "INVALID_PLACEMENT"),
    ({"pdfHeight": "inf"}, 422, "INVALID_PLACEMENT"),
    ({"signatureX": "500", "signatureY": "780"}, 422, "INVALID_PLACEMENT"),
    ({"pageNumber": "5"}, 422, "PAGE_OUT_OF_RANGE"),
    ({"pageNumber": "two"}, 400, "VALIDATION_ERROR"),
    ({"recipientEmail": "nope"}, 400, "VALIDATION_ERROR"),
])
def test_upload_validation_errors(client, admin_headers, sample_pdf, overrides, status, code):
    response = _upload(client, admin_headers, sample_pdf, **overrides)
    assert response.status_code == status
    assert response.get_json()["error"]["code"] == code


def test_upload_corrupt_pdf(client, admin_headers):
    response = _upload(client, admin_headers, b"%PDF-1.4 broken")
    assert response.status_code == 422
    assert response.get_json()["error"]["code"] == "CORRUPT_SOURCE"


def test_list_documents(client, admin_headers, created):
    response = client.get("/api/v1/admin/documents", headers=admin_headers)
    assert response.status_code == 200

    documents = response.get_json()["documents"]
    assert [d["token"] for d in documents] == [created.token]
    assert documents[0]["signing_link"] == created.signing_link


def test_cancel_document(client, admin_headers, created):
    response = client.post(f"/api/v1/admin/documents/{created.token}/cancel", headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()["document"]["status"] == "CANCELLED"

    again = client.post(f"/api/v1/admin/documents/{created.token}/cancel", headers=admin_headers)
    assert again.status_code == 409
    assert again.get_json()["error"]["code"] == "INVALID_STATE"

    assert client.get(f"/api/v1/documents/{created.token}").status_code == 410


# ----------------------------------------------------------------------
# Signing API
# ----------------------------------------------------------------------

def test_view_document(client, created):
    response = client.get(f"/api/v1/documents/{created.token}")
    assert response.status_code == 200

    body = response.get_json()
    assert body["document"]["title"] == "Lease agreement"
    assert body["placement"] == {
        "x": 100, "y": 700, "width": 200, "height": 60,
        "page_number": 1, "pdf_width": 600, "pdf_height": 800,
    }
    assert body["pdf_url"] == f"/api/v1/documents/{created.token}/pdf"


def test_unknown_token_is_404(client):
    response = client.get("/api/v1/documents/not-a-real-token")
    assert response.status_code == 404
    assert response.get_json()["error"]["code"] == "NOT_FOUND"


def test_serve_original_pdf(client, created, sample_pdf):
    response = client.get(f"/api/v1/documents/{created.token}/pdf")
    assert response.status_code == 200
    assert response.mimetype == "application/pdf"
    assert response.data == sample_pdf


def test_sign_and_download(client, created, signature_data_url, engine):
    response = client.post(
        "/api/v1/documents/sign",
        json={"token": created.token, "signature": signature_data_url},
        headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1", "User-Agent": "pytest-browser"},
    )
    assert response.status_code == 200
    body = response.get_json()
    assert body["document"]["status"] == "SIGNED"
    assert body["signed_pdf_url"] == f"/api/v1/documents/{created.token}/signed"

    stored = engine.registry.get_by_token(created.token)
    assert stored.status == DocumentStatus.SIGNED
    assert stored.signer_ip == "203.0.113.9"
    assert stored.user_agent == "pytest-browser"

    download = client.get(body["signed_pdf_url"])
    assert download.status_code == 200
    assert download.data.startswith(b"%PDF")
    assert "signed-lease.pdf" in download.headers["Content-Disposition"]

    # the link is spent
    assert client.get(f"/api/v1/documents/{created.token}").status_code == 409
    again = client.post("/api/v1/documents/sign", json={"token": created.token, "signature": signature_data_url})
    assert again.status_code == 409
    assert again.get_json()["error"]["code"] == "ALREADY_SIGNED"


def test_download_before_signing_is_409(client, created):
    assert client.get(f"/api/v1/documents/{created.token}/signed").status_code == 409


def test_expired_link_is_410(client, created, clock, signature_data_url):
    clock.advance(days=31)
    response = client.post("/api/v1/documents/sign", json={"token": created.token, "signature": signature_data_url})
    assert response.status_code == 410
    assert response.get_json()["error"]["code"] == "EXPIRED"


@pytest.mark.parametrize("payload", [
    None,
    {},
    {"token": "abc"},
    {"token": 123, "signature": "data:image/png;base64,AAAA"},
])
def test_sign_requires_token_and_signature(client, payload):
    response = client.post("/api/v1/documents/sign", json=payload)
    assert response.status_code == 400
    assert response.get_json()["error"]["code"] == "VALIDATION_ERROR"


def test_sign_with_svg_is_415(client, created, data_url_factory):
    svg = data_url_factory(b"<svg xmlns='http://www.w3.org/2000/svg'/>", mime="image/svg+xml")
    response = client.post("/api/v1/documents/sign", json={"token": created.token, "signature": svg})
    assert response.status_code == 415
    assert client.get(f"/api/v1/documents/{created.token}").status_code == 200


def test_timestamps_are_formatted_the_same_everywhere(client, admin_headers, sample_pdf, signature_data_url):
    created = _upload(client, admin_headers, sample_pdf).get_json()
    listed = client.get("/api/v1/admin/documents", headers=admin_headers).get_json()["documents"][0]

    assert listed["created_at"] == created["document"]["created_at"]
    assert listed["expires_at"] == created["document"]["expires_at"] == created["expires_at"]
    assert listed["created_at"].endswith("+00:00")

    signed = client.post(
        "/api/v1/documents/sign", json={"token": created["token"], "signature": signature_data_url}
    ).get_json()
    assert signed["document"]["signed_at"] == "2024-01-15T12:00:00+00:00"
