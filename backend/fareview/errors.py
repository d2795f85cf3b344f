from typing import Any, Optional


class UpstreamError(Exception):
    """Raised when the flight-search API answers non-2xx, is unreachable, or sends an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload if payload is not None else {"errors": [{"detail": message}]}
