# ------------------------------------------------------------------------
# File: signer.py
# Location: signlink/core/signer.py
# Description:
#     This module handles the embedding of a PNG signature image onto a
#     PDF document at the box the administrator drew when the document was
#     uploaded. It uses reportlab to generate a transparent overlay the
#     size of the target page and pypdf to merge the overlay with the
#     original page. The result is a brand new PDF byte stream; the source
#     bytes are never touched. Nothing here knows about tokens, statuses or
#     storage.
# ------------------------------------------------------------------------

import io
from datetime import date, datetime
from typing import Optional, Union

from pypdf import PdfWriter
from reportlab.lib.colors import Color
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from signlink.core.errors import SigningError
from signlink.core.geometry import Placement, to_page_space
from signlink.core.pdf_loader import load_pdf, page_box
from signlink.core.signature_image import decode_image
from signlink.core.tokens import utcnow
from signlink.log_utils.logging_config import configure_logging

logger = configure_logging(name="signlink.signer", logfile="signlink.log", level=None)

CAPTION_FONT = "Helvetica"
CAPTION_FONT_SIZE = 8
CAPTION_OFFSET = 15
CAPTION_COLOR = Color(0.5, 0.5, 0.5)
# Capture-time vs real page height mismatch worth a warning
HEIGHT_TOLERANCE = 1.0


def format_caption(sign_date: Union[date, datetime]) -> str:
    return f"Digitally Signed: {sign_date.strftime('%Y-%m-%d')}"


def _build_overlay(page, placement_rect, signature_img, caption: str) -> io.BytesIO:
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=(page.width, page.height))

    # Overlay is drawn in a 0,0-based space; shift onto the real media box
    x = placement_rect.x + page.left
    y = placement_rect.y + page.bottom

    c.drawImage(
        ImageReader(signature_img),
        x,
        y,
        width=placement_rect.width,
        height=placement_rect.height,
        mask="auto",
    )
    c.setFont(CAPTION_FONT, CAPTION_FONT_SIZE)
    c.setFillColor(CAPTION_COLOR)
    c.drawString(x, y - CAPTION_OFFSET, caption)
    c.save()

    buffer.seek(0)
    return buffer


def embed_signature_on_pdf(
    original_pdf: bytes,
    signature_image: bytes,
    placement: Placement,
    sign_date: Optional[Union[date, datetime]] = None,
) -> bytes:
    """
    Return a new PDF with `signature_image` drawn into `placement`.

    The box is converted from capture space with the target page's real
    height, and the image is stretched to the box exactly. A small
    "Digitally Signed: <date>" caption goes right below it.

    Raises CorruptSourceError, PageOutOfRangeError or
    UnsupportedImageFormatError; no partial output is ever returned.
    """
    try:
        logger.info("Starting signature embedding process.")

        reader = load_pdf(original_pdf)
        page = page_box(reader, placement.page_number)
        signature_img = decode_image(signature_image)
        logger.info("Signature image successfully decoded and verified.")

        if placement.pdf_height and abs(placement.pdf_height - page.height) > HEIGHT_TOLERANCE:
            logger.warning(
                f"Capture-time page height {placement.pdf_height} differs from actual "
                f"{page.height} on page {placement.page_number}; using actual height"
            )

        target = to_page_space(placement.rect, page.height)
        logger.debug(f"Placing signature on page {placement.page_number} at {target}")

        caption = format_caption(sign_date or utcnow())
        overlay_buffer = _build_overlay(page, target, signature_img, caption)
        overlay_page = load_pdf(overlay_buffer.getvalue()).pages[0]

        writer = PdfWriter()
        for i, source_page in enumerate(reader.pages):
            if i == placement.page_number - 1:
                source_page.merge_page(overlay_page)
            writer.add_page(source_page)

        output = io.BytesIO()
        writer.write(output)
        signed_pdf = output.getvalue()
        logger.info(f"Signed PDF produced ({len(signed_pdf)} bytes).")
        return signed_pdf
    except SigningError as e:
        logger.error(f"Error embedding signature on PDF: {e.message}")
        raise


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Manual test runner for embed_signature_on_pdf")
    parser.add_argument("--pdf", required=True, help="Path to the source PDF")
    parser.add_argument("--signature", required=True, help="Path to a PNG signature image")
    parser.add_argument("--output", required=True, help="Path to save the signed PDF")
    parser.add_argument("--page", type=int, default=1, help="1-based page number")
    parser.add_argument("--x", type=float, required=True, help="Left edge, from the page's left")
    parser.add_argument("--y", type=float, required=True, help="Top edge, from the page's top")
    parser.add_argument("--width", type=float, default=200)
    parser.add_argument("--height", type=float, default=60)

    args = parser.parse_args()

    with open(args.pdf, "rb") as pdf_file:
        pdf_data = pdf_file.read()
    with open(args.signature, "rb") as sig_file:
        signature_data = sig_file.read()

    signed = embed_signature_on_pdf(
        original_pdf=pdf_data,
        signature_image=signature_data,
        placement=Placement(args.x, args.y, args.width, args.height, args.page).validate(),
    )
    with open(args.output, "wb") as f_out:
        f_out.write(signed)
    print(f"Signed PDF written to: {args.output}")
