"""
Mock eSewa Gateway

Simulates the ePay v2 form endpoint and its success callback without any
network access. Used by the test suite and by the app when
ESEWA_USE_MOCK_GATEWAY is set.

Mock Behavior:
- Accepts every posted form with a valid signature (when a key is set)
- Answers 200 with a deterministic sandbox login URL
- Can be told to answer another status, bounce to failure_url, or fail
  at the transport level
"""
import hashlib
import logging
from typing import Dict, List, Optional

from ..exceptions import TransportError
from ..models.payments import PaymentRequest, PaymentResponse, PaymentStatus
from ..services.payment_service import GatewayReply, GatewayTransport
from ..services.response_service import encode_response
from ..services.signature_service import SecretKey, generate_signature, verify_signature

logger = logging.getLogger(__name__)


MOCK_LOGIN_URL = "https://rc-epay.esewa.com.np/esewa/login"


class MockGatewayTransport(GatewayTransport):
    """
    In-memory stand-in for the eSewa form endpoint.

    Args:
        secret_key: When set, forms with a bad signature are bounced to
            their failure_url, as the real gateway does
        status_code: Status to answer with (default 200)
        fail_with: Message for a simulated transport failure
    """

    def __init__(
        self,
        secret_key: Optional[SecretKey] = None,
        status_code: int = 200,
        fail_with: Optional[str] = None
    ):
        self.secret_key = secret_key
        self.status_code = status_code
        self.fail_with = fail_with
        self.posted_forms: List[Dict[str, str]] = []

    async def post_form(self, url: str, fields: Dict[str, str]) -> GatewayReply:
        self.posted_forms.append(dict(fields))

        if self.fail_with:
            raise TransportError(self.fail_with, details={"url": url})

        if self.status_code != 200:
            return GatewayReply(status_code=self.status_code, url=url)

        if self.secret_key is not None and not _form_signature_valid(fields, self.secret_key):
            logger.info(f"Mock gateway rejected form for uuid={fields.get('transaction_uuid')}")
            return GatewayReply(status_code=200, url=fields.get("failure_url", url))

        # Deterministic session token per transaction
        token = hashlib.sha256(fields.get("transaction_uuid", "").encode()).hexdigest()[:16]
        return GatewayReply(status_code=200, url=f"{MOCK_LOGIN_URL}?session={token}")


def _form_signature_valid(fields: Dict[str, str], secret_key: SecretKey) -> bool:
    return verify_signature(
        fields.get("total_amount", ""),
        fields.get("transaction_uuid", ""),
        fields.get("product_code", ""),
        fields.get("signature", ""),
        secret_key
    )


def build_callback(
    request: PaymentRequest,
    secret_key: SecretKey,
    status: str = PaymentStatus.COMPLETE.value,
    transaction_code: Optional[str] = None
) -> str:
    """
    Produce the base64 callback blob eSewa would append to success_url.

    Args:
        request: The request the payment was initiated with
        secret_key: Key used to sign the callback
        status: Reported payment status (default COMPLETE)
        transaction_code: eSewa reference; derived from the uuid when omitted

    Returns:
        Encoded callback data, suitable for ?data=
    """
    if transaction_code is None:
        transaction_code = hashlib.sha256(request.transaction_uuid.encode()).hexdigest()[:7].upper()

    response = PaymentResponse(
        transaction_code=transaction_code,
        status=status,
        total_amount=request.total_amount,
        transaction_uuid=request.transaction_uuid,
        product_code=request.product_code,
        signed_field_names="transaction_code,status,total_amount,transaction_uuid,product_code,signed_field_names",
        signature=generate_signature(
            request.total_amount,
            request.transaction_uuid,
            request.product_code,
            secret_key
        ),
    )
    return encode_response(response)
