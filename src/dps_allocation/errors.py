from __future__ import annotations


class AppError(Exception):
    """Base error for expected failures."""

    def __init__(self, message: str, *, http_status: int = 400):
        super().__init__(message)
        self.message = message
        self.http_status = http_status


class MalformedRequestError(AppError):
    def __init__(self, message: str = "malformed request body"):
        super().__init__(message, http_status=400)


class PayloadShapeError(AppError):
    """Payload is neither a record nor absent."""

    def __init__(self, message: str = "payload must be an object or null"):
        super().__init__(message, http_status=400)


class IndexSourceError(AppError):
    def __init__(self, message: str = "index source returned an out-of-range index"):
        super().__init__(message, http_status=500)
