"""Pytest fixtures for eSewa signing, callback and initiation tests."""

import pytest

from esewapay.models.payments import PaymentRequest, PaymentResponse
from esewapay.services.signature_service import generate_signature


SANDBOX_SECRET_KEY = "8gBm/:&EnhH.1/q"


@pytest.fixture
def secret_key():
    """Public eSewa sandbox key."""
    return SANDBOX_SECRET_KEY


@pytest.fixture
def payment_request():
    return PaymentRequest(
        amount="100",
        tax_amount="10",
        total_amount="110",
        transaction_uuid="id-123-abc",
        product_code="EPAYTEST",
        product_service_charge="0",
        product_delivery_charge="0",
        success_url="http://merchant.test/api/payments/success",
        failure_url="http://merchant.test/api/payments/failure",
    )


@pytest.fixture
def signed_response(secret_key):
    """A COMPLETE callback response correctly signed with the sandbox key."""
    return PaymentResponse(
        transaction_code="000D13A",
        status="COMPLETE",
        total_amount="110.0",
        transaction_uuid="id-123-abc",
        product_code="EPAYTEST",
        signed_field_names="transaction_code,status,total_amount,transaction_uuid,product_code,signed_field_names",
        signature=generate_signature("110.0", "id-123-abc", "EPAYTEST", secret_key),
    )
