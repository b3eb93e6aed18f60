# ------------------------------------------------------------------------
# File: pdf_loader.py
# Location: signlink/core/pdf_loader.py
# Description:
#     This module handles loading of uploaded PDF documents for the
#     signing flow. It parses raw bytes with pypdf, validates 1-based page
#     numbers against the page collection and reports page dimensions.
#     Any parse problem is reported as CorruptSourceError; nothing here
#     attempts best-effort recovery.
# ------------------------------------------------------------------------

import io
from typing import NamedTuple

from pypdf import PdfReader

from signlink.core.errors import CorruptSourceError, InvalidPageGeometryError, PageOutOfRangeError
from signlink.log_utils.logging_config import configure_logging

logger = configure_logging(name="signlink.pdf_loader", logfile="signlink.log", level=None)


class PageDimensions(NamedTuple):
    width: float
    height: float
    left: float = 0.0
    bottom: float = 0.0


def load_pdf(data: bytes) -> PdfReader:
    """
    Parse `data` as a PDF and return the reader.
    Raises CorruptSourceError if the bytes are not a readable, unencrypted PDF.
    """
    if not data:
        raise CorruptSourceError("empty document")
    try:
        reader = PdfReader(io.BytesIO(data), strict=False)
        if reader.is_encrypted:
            raise CorruptSourceError("encrypted documents are not supported")
        page_count = len(reader.pages)
    except CorruptSourceError:
        raise
    except Exception as e:
        logger.error(f"Failed to parse PDF ({len(data)} bytes): {e}")
        raise CorruptSourceError(str(e)) from e

    if page_count == 0:
        raise CorruptSourceError("document has no pages")
    return reader


def check_page_number(reader: PdfReader, page_number: int) -> None:
    page_count = len(reader.pages)
    if page_number < 1 or page_number > page_count:
        logger.warning(f"Page {page_number} requested on a {page_count}-page document")
        raise PageOutOfRangeError(page_number, page_count)


def page_box(reader: PdfReader, page_number: int) -> PageDimensions:
    """
    Dimensions of the 1-based page's media box.

    Corners may be stored in any order; the box is normalised so width and
    height come out positive. A box with no height left after that raises
    InvalidPageGeometryError.
    """
    check_page_number(reader, page_number)
    try:
        x1, y1, x2, y2 = (float(v) for v in reader.pages[page_number - 1].mediabox)
    except Exception as e:
        raise CorruptSourceError(f"unreadable page {page_number}: {e}") from e

    dims = PageDimensions(
        width=max(x1, x2) - min(x1, x2),
        height=max(y1, y2) - min(y1, y2),
        left=min(x1, x2),
        bottom=min(y1, y2),
    )
    if dims.height <= 0:
        logger.warning(f"Page {page_number} has a degenerate media box {(x1, y1, x2, y2)}")
        raise InvalidPageGeometryError(dims.height)
    return dims


def get_page_count(data: bytes) -> int:
    return len(load_pdf(data).pages)


def get_page_dimensions(data: bytes, page_number: int = 1) -> PageDimensions:
    return page_box(load_pdf(data), page_number)


def validate_pdf(data: bytes) -> bool:
    try:
        load_pdf(data)
        return True
    except CorruptSourceError:
        return False


def smoke_test(path: str) -> None:
    logger.info(f"Starting pdf_loader smoke test on {path}...")
    with open(path, "rb") as f:
        data = f.read()
    try:
        count = get_page_count(data)
        for number in range(1, count + 1):
            logger.info(f"✔ Page {number}: {get_page_dimensions(data, number)}")
    except (CorruptSourceError, InvalidPageGeometryError) as e:
        logger.error(f"❌ Smoke test failed for '{path}': {e.message}")


if __name__ == "__main__":
    import sys

    smoke_test(sys.argv[1])
    print("Smoke test completed. Check logs.")
