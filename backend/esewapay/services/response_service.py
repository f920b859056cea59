"""
Response Service

Decodes the base64 callback blob eSewa appends to the success URL and
checks its signature.

Pipeline:
    blob -> base64 -> UTF-8 -> JSON -> PaymentResponse -> ValidationResult
"""
import base64
import binascii
import json
import logging
from pydantic import ValidationError

from ..exceptions import EncodingError, MalformedPayloadError
from ..models.payments import PaymentResponse, ValidationResult
from .signature_service import SecretKey, verify_signature

logger = logging.getLogger(__name__)


# ============================================================================
# Decoding
# ============================================================================

def decode_response(encoded_data: str) -> PaymentResponse:
    """
    Decode a callback blob into a PaymentResponse.

    Args:
        encoded_data: Standard base64 (padded) of a UTF-8 JSON object

    Returns:
        Decoded PaymentResponse. Unknown JSON fields are dropped.

    Raises:
        EncodingError: Not valid base64, or not valid UTF-8
        MalformedPayloadError: Not JSON, not an object, or schema mismatch
    """
    try:
        raw = base64.b64decode(encoded_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"Base64 decode failed: {e}") from e

    try:
        text = raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise EncodingError(f"UTF-8 decode failed: {e}") from e

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedPayloadError(f"JSON parse failed: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedPayloadError(
            f"Expected a JSON object, got {type(payload).__name__}"
        )

    try:
        response = PaymentResponse.model_validate(payload)
    except ValidationError as e:
        raise MalformedPayloadError(
            "Callback payload does not match the response schema",
            details={"errors": [
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]}
        ) from e

    # JSON \u escapes can smuggle lone surrogates past the UTF-8 check
    for field, value in response.model_dump().items():
        try:
            value.encode('utf-8')
        except UnicodeEncodeError as e:
            raise MalformedPayloadError(
                "Callback payload does not match the response schema",
                details={"errors": [
                    {"field": field, "message": "Value is not encodable as UTF-8"}
                ]}
            ) from e

    return response


def encode_response(response: PaymentResponse) -> str:
    """Encode a PaymentResponse the way eSewa does (JSON, then base64)."""
    return base64.b64encode(response.model_dump_json().encode('utf-8')).decode('ascii')


# ============================================================================
# Validation
# ============================================================================

def validate_response(response: PaymentResponse, secret_key: SecretKey) -> ValidationResult:
    """
    Recompute the signature of a decoded response and compare it.

    A mismatch is returned as signature_valid=False. Treat that as a
    business decision (reject the order), not as an exception.
    """
    signature_valid = verify_signature(
        response.total_amount,
        response.transaction_uuid,
        response.product_code,
        response.signature,
        secret_key
    )

    if signature_valid:
        logger.info(
            f"Callback signature valid: uuid={response.transaction_uuid}, "
            f"status={response.status}"
        )
    else:
        logger.warning(
            f"Callback signature mismatch: uuid={response.transaction_uuid}, "
            f"status={response.status}"
        )

    return ValidationResult(signature_valid=signature_valid, response=response)


def validate_encoded_response(encoded_data: str, secret_key: SecretKey) -> ValidationResult:
    """Decode a callback blob and validate its signature."""
    return validate_response(decode_response(encoded_data), secret_key)
