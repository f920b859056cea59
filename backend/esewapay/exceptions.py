"""
eSewa Exception Hierarchy

Error codes are prefixed by the stage that failed so callers can tell a
payment that never started (esewa:initiation:*) from a callback that cannot
be trusted (esewa:callback:*).

A signature mismatch is not an error: it is reported through
ValidationResult.signature_valid.
"""
from typing import Optional, Dict, Any


class EsewaError(Exception):
    """Base exception for all eSewa integration errors."""

    def __init__(
        self,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API error response format."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


# ==================== Initiation ====================

class InitiationError(EsewaError):
    """The payment form could not be handed over to eSewa."""


class TransportError(InitiationError):
    """
    The outbound call to eSewa did not complete.

    Examples:
    - Connection refused or DNS failure
    - Request timed out
    - Redirect loop

    The only kind worth retrying.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("esewa:initiation:transport_failure", message, details)


class UnexpectedResponseStatusError(InitiationError):
    """
    eSewa answered, but not with the expected success page.

    Examples:
    - Final status is not 200
    - Form bounced back to the merchant failure_url
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        url: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.url = url
        merged = {"status_code": status_code, "url": url}
        merged.update(details or {})
        super().__init__("esewa:initiation:unexpected_status", message, merged)


# ==================== Signing ====================

class SignatureComputationError(EsewaError):
    """Reserved. HMAC-SHA256 accepts keys of any length, so this is never raised."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("esewa:signature:computation_failure", message, details)


# ==================== Callback decoding ====================

class DecodeError(EsewaError):
    """A callback blob could not be turned into a PaymentResponse."""


class EncodingError(DecodeError):
    """
    The blob is not valid base64, or the decoded bytes are not UTF-8.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("esewa:callback:encoding_failure", message, details)


class MalformedPayloadError(DecodeError):
    """
    The decoded text is not a JSON object matching the response schema.

    Examples:
    - Invalid JSON
    - Missing required field
    - Field present with a non-string value
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("esewa:callback:malformed_payload", message, details)
