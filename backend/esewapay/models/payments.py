"""
Pydantic Payment Models for eSewa ePay v2

Request, callback response and validation result records exchanged with
the gateway. All amounts are kept as strings: the exact text is part of the
signed message, so "100" and "100.0" are different values.
"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


DEFAULT_SIGNED_FIELD_NAMES = "total_amount,transaction_uuid,product_code"


class EsewaEnvironment(str, Enum):
    """Which eSewa deployment a payment form is posted to."""

    SANDBOX = "sandbox"
    PRODUCTION = "production"

    @property
    def form_url(self) -> str:
        """ePay v2 form endpoint for this environment."""
        return _FORM_URLS[self]


_FORM_URLS = {
    EsewaEnvironment.SANDBOX: "https://rc-epay.esewa.com.np/api/epay/main/v2/form",
    EsewaEnvironment.PRODUCTION: "https://epay.esewa.com.np/api/epay/main/v2/form",
}


class PaymentStatus(str, Enum):
    """Status values eSewa is known to report. Responses keep the raw string."""

    COMPLETE = "COMPLETE"
    PENDING = "PENDING"
    FULL_REFUND = "FULL_REFUND"
    PARTIAL_REFUND = "PARTIAL_REFUND"
    AMBIGUOUS = "AMBIGUOUS"
    NOT_FOUND = "NOT_FOUND"
    CANCELED = "CANCELED"


class PaymentRequest(BaseModel):
    """
    Payment initiation data posted to eSewa.

    total_amount must equal amount + tax_amount + service and delivery
    charges. That is the caller's job; it is not checked here.
    """

    amount: str
    tax_amount: str
    total_amount: str
    transaction_uuid: str
    product_code: str
    product_service_charge: str = "0"
    product_delivery_charge: str = "0"
    success_url: str
    failure_url: str
    signed_field_names: str = DEFAULT_SIGNED_FIELD_NAMES

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "amount": "100",
                "tax_amount": "10",
                "total_amount": "110",
                "transaction_uuid": "id-1700000000000-k3j9x0a2b",
                "product_code": "EPAYTEST",
                "product_service_charge": "0",
                "product_delivery_charge": "0",
                "success_url": "http://127.0.0.1:8000/api/payments/success",
                "failure_url": "http://127.0.0.1:8000/api/payments/failure",
                "signed_field_names": DEFAULT_SIGNED_FIELD_NAMES,
            }
        },
    )


class PaymentResponse(BaseModel):
    """Decoded callback payload eSewa appends to the success URL."""

    transaction_code: str
    status: str
    total_amount: str
    transaction_uuid: str
    product_code: str
    signed_field_names: str
    signature: str

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def is_complete(self) -> bool:
        return self.status == PaymentStatus.COMPLETE.value


class ValidationResult(BaseModel):
    """Signature verdict for a callback, paired with the decoded response."""

    signature_valid: bool = Field(
        description="True when the callback signature matches the recomputed one"
    )
    response: PaymentResponse

    model_config = ConfigDict(frozen=True)
