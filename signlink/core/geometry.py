# ------------------------------------------------------------------------
# File: geometry.py
# Location: signlink/core/geometry.py
# Description:
#     Coordinate conversion between the capture space used by the signing
#     UI (origin at the page's top-left corner, Y grows downward) and PDF
#     page space (origin at the bottom-left corner, Y grows upward).
# ------------------------------------------------------------------------

import math
from dataclasses import dataclass
from typing import NamedTuple, Optional

from signlink.core.errors import InvalidPageGeometryError, InvalidPlacementError


class Rect(NamedTuple):
    x: float
    y: float
    width: float
    height: float


def to_page_space(rect: Rect, page_height: float) -> Rect:
    """
    Convert a top-left-origin rectangle to PDF page space.

    Only Y changes: the rectangle's bottom edge must land at
    page_height - y - height.
    """
    if page_height <= 0:
        raise InvalidPageGeometryError(page_height)
    return Rect(rect.x, page_height - rect.y - rect.height, rect.width, rect.height)


def to_capture_space(rect: Rect, page_height: float) -> Rect:
    """Inverse of to_page_space (the formula is its own inverse)."""
    if page_height <= 0:
        raise InvalidPageGeometryError(page_height)
    return Rect(rect.x, page_height - rect.y - rect.height, rect.width, rect.height)


MIN_SIGNATURE_WIDTH = 50
MIN_SIGNATURE_HEIGHT = 30


@dataclass(frozen=True)
class Placement:
    """Signature box in capture space plus the page it belongs to (1-based)."""

    x: float
    y: float
    width: float
    height: float
    page_number: int
    pdf_width: Optional[float] = None
    pdf_height: Optional[float] = None

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    def validate(self, min_width: float = MIN_SIGNATURE_WIDTH, min_height: float = MIN_SIGNATURE_HEIGHT) -> "Placement":
        for field in ("x", "y", "width", "height"):
            value = getattr(self, field)
            if value is None or not math.isfinite(value):
                raise InvalidPlacementError(f"Invalid signature coordinate: {field}", field=field)
        if self.x < 0 or self.y < 0:
            raise InvalidPlacementError("Signature box must start inside the page", field="x" if self.x < 0 else "y")
        if self.width < min_width:
            raise InvalidPlacementError(f"Signature box must be at least {min_width} wide", field="width")
        if self.height < min_height:
            raise InvalidPlacementError(f"Signature box must be at least {min_height} high", field="height")
        if isinstance(self.page_number, bool) or not isinstance(self.page_number, int) or self.page_number < 1:
            raise InvalidPlacementError("Page number must be a positive integer", field="page_number")
        for field in ("pdf_width", "pdf_height"):
            value = getattr(self, field)
            if value is not None and not (math.isfinite(value) and value > 0):
                raise InvalidPlacementError(f"Invalid page dimension: {field}", field=field)
        return self
