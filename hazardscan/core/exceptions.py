# hazardscan/core/exceptions.py
"""
Error taxonomy for the inspection API.

Every domain failure carries the HTTP status and a stable machine-readable
code; the exception handler in `hazardscan.main` renders them as
`{"ok": false, "error": <code>, "message": ..., **details}`.
"""
from typing import Any, Dict, Optional


class HazardScanError(Exception):
    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        body = {"ok": False, "error": self.code, "message": self.message}
        body.update(self.details)
        return body


class InvalidInput(HazardScanError):
    status_code = 400
    code = "invalid_input"


class Unauthenticated(HazardScanError):
    status_code = 401
    code = "unauthenticated"


class Forbidden(HazardScanError):
    status_code = 403
    code = "forbidden"


class NotFound(HazardScanError):
    status_code = 404
    code = "not_found"


class PayloadTooLarge(HazardScanError):
    status_code = 413
    code = "payload_too_large"


class QuotaExceeded(HazardScanError):
    status_code = 429
    code = "quota_exceeded"

    def __init__(self, limit: int, used: int):
        super().__init__(
            "Monthly inspection limit reached",
            {"limit": limit, "used": used},
        )
        self.limit = limit
        self.used = used


class InvalidModelOutput(HazardScanError):
    """The model answered, but not with a valid hazard report."""
    status_code = 502
    code = "invalid_model_output"


class UpstreamAuthFailure(HazardScanError):
    status_code = 502
    code = "upstream_auth_failed"


class StorageUnavailable(HazardScanError):
    status_code = 503
    code = "storage_unavailable"


class UpstreamUnavailable(HazardScanError):
    status_code = 503
    code = "upstream_unavailable"
