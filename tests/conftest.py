# File: tests/conftest.py
# Shared fixtures: temp SQLite database and storage, a controllable clock,
# and generated sample PDFs / signature images.

import base64
import io
import os

# Keep test runs from writing log files into the working tree
os.environ.setdefault("SIGNLINK_LOG_DIR", "")

from datetime import datetime, timedelta, timezone

import pytest
from PIL import Image, ImageDraw
from pypdf import PdfReader, PdfWriter
from pypdf.generic import RectangleObject
from reportlab.pdfgen import canvas

from signlink.config import Settings
from signlink.core.engine import SigningEngine
from signlink.core.geometry import Placement
from signlink.db.registry import DocumentRegistry
from signlink.db.session import create_session_factory, get_engine, init_db
from signlink.storage import DocumentStorage


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class RecordingNotifier:
    def __init__(self):
        self.messages = []

    def send(self, message):
        self.messages.append(message)
        return True


def make_pdf(pages=3, size=(600, 800)) -> bytes:
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=size)
    for number in range(1, pages + 1):
        c.drawString(100, size[1] - 100, f"Agreement page {number}")
        c.drawString(100, 100, "Signature goes here:")
        c.showPage()
    c.save()
    return buffer.getvalue()


def with_media_box(pdf_bytes: bytes, box) -> bytes:
    """Same document with every page's media box replaced by `box` (corners as given)."""
    writer = PdfWriter()
    for page in PdfReader(io.BytesIO(pdf_bytes)).pages:
        page.mediabox = RectangleObject(box)
        writer.add_page(page)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def make_signature_png(size=(400, 120), image_format="PNG", mode="RGBA") -> bytes:
    background = (255, 255, 255, 0) if mode == "RGBA" else (255, 255, 255)
    img = Image.new(mode, size, background)
    d = ImageDraw.Draw(img)
    d.line([10, size[1] - 20, size[0] - 10, 20], fill="black", width=4)
    d.text((20, 20), "J. Doe", fill="black")
    buffer = io.BytesIO()
    img.save(buffer, format=image_format)
    return buffer.getvalue()


def to_data_url(png: bytes, mime="image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(png).decode()}"


@pytest.fixture
def pdf_factory():
    return make_pdf


@pytest.fixture
def media_box_factory():
    return with_media_box


@pytest.fixture
def png_factory():
    return make_signature_png


@pytest.fixture
def sample_pdf():
    return make_pdf(pages=3, size=(600, 800))


@pytest.fixture
def signature_png():
    return make_signature_png()


@pytest.fixture
def signature_data_url(signature_png):
    return to_data_url(signature_png)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'signlink.db'}",
        storage_root=str(tmp_path / "storage"),
        base_url="https://sign.example.test",
        jwt_secret="test-secret",
        disable_webhooks=True,
    )


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def db_engine(settings):
    engine = get_engine(settings.database_url)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def registry(db_engine):
    return DocumentRegistry(create_session_factory(db_engine))


@pytest.fixture
def storage(settings):
    return DocumentStorage(settings.storage_root)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def engine(settings, registry, storage, clock, notifier):
    return SigningEngine(settings, registry, storage, clock=clock, notifier=notifier)


@pytest.fixture
def placement():
    return Placement(x=100, y=700, width=200, height=60, page_number=1)


@pytest.fixture
def created(engine, sample_pdf, placement):
    return engine.create_document(
        original_pdf=sample_pdf,
        title="Lease agreement",
        placement=placement,
        admin_id="admin-1",
        file_name="lease.pdf",
        recipient_name="Jane Test",
        recipient_email="jane@example.com",
        ttl_days=30,
    )


@pytest.fixture
def data_url_factory():
    return to_data_url
