"""Error taxonomy shared by the services and the HTTP layer.

Every error carries an HTTP status and a stable code so the API handlers
can render it without knowing which service raised it.
"""

from __future__ import annotations


class ReferralError(Exception):
    code = "REFERRAL_ERROR"
    http_status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


class NotFoundError(ReferralError):
    """No matching service, no active codes, or an unknown id."""

    code = "NOT_FOUND"
    http_status = 404


class ValidationError(ReferralError):
    code = "VALIDATION_ERROR"
    http_status = 422


class ExternalStoreError(ReferralError):
    """Any failure reported by the hosted data store: network, validation or conflict."""

    code = "EXTERNAL_STORE_ERROR"
    http_status = 502


class AdminAccessDenied(ReferralError):
    code = "ADMIN_ACCESS_DENIED"
    http_status = 401
