# ------------------------------------------------------------------------
# File: signature_image.py
# Location: signlink/core/signature_image.py
# Description:
#     Decoding of the hand-drawn signature submitted by the signer. The
#     signing pad posts a PNG data URL; this module turns it into raw PNG
#     bytes and then into a verified RGBA Pillow image ready for embedding.
#     Every other encoding is rejected.
# ------------------------------------------------------------------------

import base64
import binascii
import io
import re

from PIL import Image

from signlink.core.errors import UnsupportedImageFormatError
from signlink.log_utils.logging_config import configure_logging

logger = configure_logging(name="signlink.signature_image", logfile="signlink.log", level=None)

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
DATA_URL_RE = re.compile(r"^data:(?P<mime>[^;,]*);base64,(?P<data>.+)$", re.IGNORECASE | re.DOTALL)


def decode_signature_data(value: str) -> bytes:
    """
    Decode a `data:image/png;base64,...` URL (or bare base64) into bytes.
    Raises UnsupportedImageFormatError when the payload is not base64 PNG data.
    """
    if not value or not value.strip():
        raise UnsupportedImageFormatError("empty signature")

    b64_data = value.strip()
    match = DATA_URL_RE.match(b64_data)
    if match:
        mime = match.group("mime").lower()
        if mime and mime != "image/png":
            logger.warning(f"Rejected signature data URL with mime type {mime!r}")
            raise UnsupportedImageFormatError(f"mime type {mime}")
        b64_data = match.group("data")
    elif b64_data.lower().startswith("data:"):
        raise UnsupportedImageFormatError("malformed data URL")

    # Remove whitespace and anything else a browser may have wrapped in
    b64_clean = re.sub(r"[^A-Za-z0-9+/=]", "", b64_data)

    missing_padding = len(b64_clean) % 4
    if missing_padding:
        b64_clean += "=" * (4 - missing_padding)

    try:
        return base64.b64decode(b64_clean, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.error(f"Failed to decode base64 signature: {e}")
        raise UnsupportedImageFormatError("signature is not valid base64") from e


def decode_image(data: bytes) -> Image.Image:
    """Return the PNG in `data` as a fully loaded RGBA image."""
    if not data or not data.startswith(PNG_MAGIC):
        raise UnsupportedImageFormatError("not a PNG stream")

    try:
        with Image.open(io.BytesIO(data)) as probe:
            if probe.format != "PNG":
                raise UnsupportedImageFormatError(f"decoded as {probe.format}")
            probe.verify()
        # verify() leaves the image unusable; reopen to decode the pixels
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            signature_img = img.convert("RGBA")
    except UnsupportedImageFormatError:
        raise
    except Exception as e:
        logger.error(f"Failed to decode and parse signature image: {e}")
        raise UnsupportedImageFormatError("corrupt PNG data") from e

    if signature_img.width == 0 or signature_img.height == 0:
        raise UnsupportedImageFormatError("empty image")
    logger.debug(f"Signature image decoded: {signature_img.width}x{signature_img.height}")
    return signature_img
