"""
Payment Service

Signs a PaymentRequest and posts it to the eSewa ePay v2 form endpoint.
The HTTP call goes through a GatewayTransport so the signing path can run
without network access.

Outcome classification:
- Transport failure (connect, timeout, redirect loop) -> TransportError
- Final status other than 200 -> UnexpectedResponseStatusError
- 200 on the merchant failure_url -> UnexpectedResponseStatusError
- 200 anywhere else -> final URL returned for the customer redirect
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional
import logging

import httpx

from ..exceptions import TransportError, UnexpectedResponseStatusError
from ..models.payments import EsewaEnvironment, PaymentRequest
from .signature_service import SecretKey, generate_signature

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


# ============================================================================
# Transport
# ============================================================================

@dataclass(frozen=True)
class GatewayReply:
    """Final status and URL after the transport followed any redirects."""
    status_code: int
    url: str


class GatewayTransport(ABC):
    """Capability for posting a URL-encoded form to the gateway."""

    @abstractmethod
    async def post_form(self, url: str, fields: Dict[str, str]) -> GatewayReply:
        """
        Post fields as application/x-www-form-urlencoded.

        Raises:
            TransportError: The request could not complete
        """


class HttpxGatewayTransport(GatewayTransport):
    """GatewayTransport backed by httpx, following redirects."""

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def post_form(self, url: str, fields: Dict[str, str]) -> GatewayReply:
        async with httpx.AsyncClient(
            timeout=self.timeout_seconds,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(url, data=fields)
            except httpx.HTTPError as e:
                logger.error(f"eSewa connection failed: {type(e).__name__}: {e}")
                raise TransportError(
                    f"Could not reach eSewa: {e}",
                    details={"url": url, "error_type": type(e).__name__}
                )

        return GatewayReply(status_code=response.status_code, url=str(response.url))


# ============================================================================
# Initiation
# ============================================================================

def build_payment_form(request: PaymentRequest, secret_key: SecretKey) -> Dict[str, str]:
    """
    Build the form fields posted to eSewa, including the signature.

    Returns:
        The eleven ePay v2 fields, keyed by their exact wire names
    """
    signature = generate_signature(
        request.total_amount,
        request.transaction_uuid,
        request.product_code,
        secret_key
    )

    return {
        "amount": request.amount,
        "failure_url": request.failure_url,
        "product_delivery_charge": request.product_delivery_charge,
        "product_service_charge": request.product_service_charge,
        "product_code": request.product_code,
        "signature": signature,
        "signed_field_names": request.signed_field_names,
        "success_url": request.success_url,
        "tax_amount": request.tax_amount,
        "total_amount": request.total_amount,
        "transaction_uuid": request.transaction_uuid,
    }


async def initiate_payment(
    request: PaymentRequest,
    secret_key: SecretKey,
    environment: EsewaEnvironment = EsewaEnvironment.SANDBOX,
    transport: Optional[GatewayTransport] = None
) -> str:
    """
    Initiate a payment with eSewa and return the URL to redirect the user to.

    Args:
        request: Payment request details
        secret_key: Merchant secret key
        environment: Sandbox or production endpoint
        transport: Gateway transport (defaults to HttpxGatewayTransport)

    Returns:
        Final URL of the eSewa payment page

    Raises:
        TransportError: eSewa could not be reached
        UnexpectedResponseStatusError: eSewa answered without a payment page
    """
    transport = transport or HttpxGatewayTransport()
    fields = build_payment_form(request, secret_key)
    url = environment.form_url

    logger.info(
        f"Initiating eSewa payment: uuid={request.transaction_uuid}, "
        f"total={request.total_amount}, env={environment.value}"
    )

    reply = await transport.post_form(url, fields)

    if reply.status_code != 200:
        logger.warning(
            f"eSewa returned status {reply.status_code} for "
            f"uuid={request.transaction_uuid}"
        )
        raise UnexpectedResponseStatusError(
            f"Expected status 200, got {reply.status_code}",
            status_code=reply.status_code,
            url=reply.url
        )

    if _same_page(reply.url, request.failure_url):
        logger.warning(
            f"eSewa redirected to failure_url for uuid={request.transaction_uuid}"
        )
        raise UnexpectedResponseStatusError(
            "eSewa rejected the payment form and redirected to failure_url",
            status_code=reply.status_code,
            url=reply.url
        )

    logger.info(f"eSewa payment page ready: uuid={request.transaction_uuid}")
    return reply.url


def _same_page(url: str, other: str) -> bool:
    """Compare two URLs ignoring query string and fragment. Unparseable URLs never match."""
    try:
        a = httpx.URL(url)
        b = httpx.URL(other)
    except httpx.InvalidURL:
        return False
    return (a.scheme, a.host, a.port, a.path) == (b.scheme, b.host, b.port, b.path)
