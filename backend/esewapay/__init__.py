"""
esewa-pay - eSewa ePay v2 integration helpers.

Exports signing, callback validation and payment initiation.
"""
from .exceptions import (
    EsewaError,
    InitiationError,
    TransportError,
    UnexpectedResponseStatusError,
    SignatureComputationError,
    DecodeError,
    EncodingError,
    MalformedPayloadError,
)
from .models.payments import (
    EsewaEnvironment,
    PaymentRequest,
    PaymentResponse,
    PaymentStatus,
    ValidationResult,
)
from .services.signature_service import (
    build_signing_message,
    generate_signature,
    verify_signature,
)
from .services.response_service import (
    decode_response,
    encode_response,
    validate_response,
    validate_encoded_response,
)
from .services.transaction_service import generate_transaction_uuid, create_payment_request
from .services.payment_service import (
    GatewayReply,
    GatewayTransport,
    HttpxGatewayTransport,
    build_payment_form,
    initiate_payment,
)

__version__ = "0.1.0"

__all__ = [
    "EsewaError",
    "InitiationError",
    "TransportError",
    "UnexpectedResponseStatusError",
    "SignatureComputationError",
    "DecodeError",
    "EncodingError",
    "MalformedPayloadError",
    "EsewaEnvironment",
    "PaymentRequest",
    "PaymentResponse",
    "PaymentStatus",
    "ValidationResult",
    "build_signing_message",
    "generate_signature",
    "verify_signature",
    "decode_response",
    "encode_response",
    "validate_response",
    "validate_encoded_response",
    "generate_transaction_uuid",
    "create_payment_request",
    "GatewayReply",
    "GatewayTransport",
    "HttpxGatewayTransport",
    "build_payment_form",
    "initiate_payment",
]
