import pytest

from esewapay.mocks.esewa_gateway import MOCK_LOGIN_URL, MockGatewayTransport, build_callback
from esewapay.services.payment_service import build_payment_form
from esewapay.services.response_service import decode_response, validate_encoded_response


def test_build_callback_round_trips_through_validation(payment_request, secret_key):
    result = validate_encoded_response(build_callback(payment_request, secret_key), secret_key)

    assert result.signature_valid is True
    assert result.response.total_amount == payment_request.total_amount
    assert result.response.product_code == payment_request.product_code


def test_build_callback_custom_status_and_code(payment_request, secret_key):
    response = decode_response(
        build_callback(payment_request, secret_key, status="PENDING", transaction_code="XYZ1")
    )

    assert response.status == "PENDING"
    assert response.transaction_code == "XYZ1"
    assert not response.is_complete


@pytest.mark.asyncio
async def test_mock_gateway_is_deterministic_per_transaction(payment_request, secret_key):
    gateway = MockGatewayTransport(secret_key=secret_key)
    form = build_payment_form(payment_request, secret_key)

    first = await gateway.post_form("https://example.test/form", form)
    second = await gateway.post_form("https://example.test/form", form)

    assert first == second
    assert first.status_code == 200
    assert first.url.startswith(MOCK_LOGIN_URL)
    assert len(gateway.posted_forms) == 2
