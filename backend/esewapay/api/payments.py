"""
Payments API Endpoints

Minimal front end over the eSewa helpers: start a payment, receive the
success callback, acknowledge a failure.

Initiation errors and callback errors are raised as EsewaError subclasses
and rendered by the handlers in main.py.
"""
from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse, RedirectResponse
import logging

from ..config import settings
from ..models.payments import ValidationResult
from ..mocks.esewa_gateway import MockGatewayTransport
from ..services.payment_service import GatewayTransport, HttpxGatewayTransport, initiate_payment
from ..services.response_service import validate_encoded_response
from ..services.transaction_service import create_payment_request

logger = logging.getLogger(__name__)

router = APIRouter()


def get_gateway_transport() -> GatewayTransport:
    """Transport used for outbound eSewa calls."""
    if settings.use_mock_gateway:
        return MockGatewayTransport(secret_key=settings.secret_key.get_secret_value())
    return HttpxGatewayTransport(timeout_seconds=settings.request_timeout_seconds)


def get_secret_key() -> str:
    """Merchant secret key, read from settings per request."""
    return settings.secret_key.get_secret_value()


@router.get("/initiate")
async def initiate_payment_endpoint(
    amount: str = Query("100", description="Amount before tax and charges"),
    tax_amount: str = Query("10", description="Tax amount"),
    total_amount: str = Query("110", description="Signed total, posted verbatim"),
    product_service_charge: str = Query("0"),
    product_delivery_charge: str = Query("0"),
    transport: GatewayTransport = Depends(get_gateway_transport),
    secret_key: str = Depends(get_secret_key)
) -> RedirectResponse:
    """
    Start an eSewa payment and redirect the customer to the gateway.

    Returns:
        302 to the eSewa payment page

    Errors:
        502 with esewa:initiation:* error codes

    Example:
        GET /api/payments/initiate?amount=100&tax_amount=10&total_amount=110
    """
    request = create_payment_request(
        amount=amount,
        tax_amount=tax_amount,
        total_amount=total_amount,
        product_code=settings.product_code,
        success_url=settings.success_url,
        failure_url=settings.failure_url,
        product_service_charge=product_service_charge,
        product_delivery_charge=product_delivery_charge,
    )

    payment_url = await initiate_payment(
        request,
        secret_key,
        environment=settings.environment,
        transport=transport
    )

    return RedirectResponse(url=payment_url, status_code=302)


@router.get("/success", response_model=ValidationResult)
async def payment_success_endpoint(
    data: str = Query(..., description="Base64 callback data from eSewa"),
    secret_key: str = Depends(get_secret_key)
) -> ValidationResult:
    """
    Decode and validate the eSewa success callback.

    Returns:
        ValidationResult. signature_valid=false still answers 200; the
        caller must not fulfil the order in that case.

    Errors:
        400 with esewa:callback:* error codes
    """
    result = validate_encoded_response(data, secret_key)

    if not result.signature_valid:
        logger.warning(
            f"Rejecting callback with invalid signature: "
            f"uuid={result.response.transaction_uuid}"
        )

    return result


@router.get("/failure", response_class=PlainTextResponse)
async def payment_failure_endpoint() -> str:
    """Static acknowledgment for the eSewa failure redirect."""
    return "Payment failed"
