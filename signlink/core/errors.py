# File: signlink/core/errors.py
# DESCRIPTION: Caller-visible failure conditions for the signing engine.
#     Each condition is its own class so the web layer can answer with an
#     actionable message instead of a generic error.


class SigningError(Exception):
    """Base exception for signlink errors"""
    def __init__(self, code: str, message: str, status_code: int = 400, details: dict = None):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}


class DocumentNotFoundError(SigningError):
    def __init__(self, token: str = None):
        details = {"token": token[:8]} if token else {}
        super().__init__("NOT_FOUND", "Document not found", 404, details)


class AlreadySignedError(SigningError):
    def __init__(self):
        super().__init__("ALREADY_SIGNED", "Document has already been signed", 409)


class DocumentExpiredError(SigningError):
    def __init__(self, expires_at=None):
        details = {"expires_at": expires_at.isoformat()} if expires_at else {}
        super().__init__("EXPIRED", "Document link has expired", 410, details)


class DocumentCancelledError(SigningError):
    def __init__(self):
        super().__init__("CANCELLED", "Document has been cancelled", 410)


class InvalidStateError(SigningError):
    def __init__(self, current_status: str, requested_status: str, reason: str = None):
        message = f"Invalid status transition from {current_status} to {requested_status}"
        if reason:
            message += f": {reason}"
        super().__init__(
            "INVALID_STATE",
            message,
            409,
            details={"current_status": current_status, "requested_status": requested_status}
        )


class CorruptSourceError(SigningError):
    def __init__(self, reason: str = None):
        message = "Source document is not a readable PDF"
        if reason:
            message += f": {reason}"
        super().__init__("CORRUPT_SOURCE", message, 422)


class PageOutOfRangeError(SigningError):
    def __init__(self, page_number: int, page_count: int):
        super().__init__(
            "PAGE_OUT_OF_RANGE",
            f"Invalid page number: {page_number} (document has {page_count} pages)",
            422,
            details={"page_number": page_number, "page_count": page_count}
        )


class UnsupportedImageFormatError(SigningError):
    def __init__(self, reason: str = None):
        message = "Only PNG signature images are supported"
        if reason:
            message += f": {reason}"
        super().__init__("UNSUPPORTED_IMAGE_FORMAT", message, 415)


class InvalidPageGeometryError(SigningError):
    def __init__(self, page_height):
        super().__init__(
            "INVALID_PAGE_GEOMETRY",
            f"Page height must be positive, got {page_height}",
            422,
            details={"page_height": page_height}
        )


class InvalidPlacementError(SigningError):
    def __init__(self, message: str, field: str = None):
        super().__init__("INVALID_PLACEMENT", message, 422, details={"field": field} if field else {})


class InvalidRequestError(SigningError):
    def __init__(self, message: str, field: str = None):
        super().__init__("VALIDATION_ERROR", message, 400, details={"field": field} if field else {})


class PayloadTooLargeError(SigningError):
    def __init__(self, what: str, size: int, limit: int):
        super().__init__(
            "PAYLOAD_TOO_LARGE",
            f"{what} exceeds the {limit} byte limit",
            413,
            details={"size": size, "limit": limit}
        )


class StorageError(SigningError):
    def __init__(self, operation: str, reason: str = None):
        message = f"Storage {operation} failed"
        if reason:
            message += f": {reason}"
        super().__init__("STORAGE_ERROR", message, 503, details={"operation": operation})


class AuthenticationError(SigningError):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__("UNAUTHORIZED", message, 401)
