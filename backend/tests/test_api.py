import base64
import json

import pytest
from fastapi.testclient import TestClient

from esewapay.api.payments import get_gateway_transport, get_secret_key
from esewapay.main import app
from esewapay.mocks.esewa_gateway import MOCK_LOGIN_URL, MockGatewayTransport, build_callback
from esewapay.services.response_service import encode_response


@pytest.fixture
def gateway(secret_key):
    return MockGatewayTransport(secret_key=secret_key)


@pytest.fixture
def client(gateway, secret_key):
    app.dependency_overrides[get_gateway_transport] = lambda: gateway
    app.dependency_overrides[get_secret_key] = lambda: secret_key
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_initiate_redirects_to_gateway(client, gateway):
    response = client.get("/api/payments/initiate", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"].startswith(MOCK_LOGIN_URL)
    form = gateway.posted_forms[0]
    assert form["total_amount"] == "110"
    assert form["success_url"].endswith("/api/payments/success")
    assert form["failure_url"].endswith("/api/payments/failure")


def test_initiate_passes_amounts_verbatim(client, gateway):
    client.get(
        "/api/payments/initiate",
        params={"amount": "250.0", "tax_amount": "0", "total_amount": "250.0"},
        follow_redirects=False,
    )

    assert gateway.posted_forms[0]["amount"] == "250.0"
    assert gateway.posted_forms[0]["total_amount"] == "250.0"


def test_initiate_gateway_status_error_is_502(client):
    app.dependency_overrides[get_gateway_transport] = lambda: MockGatewayTransport(status_code=500)

    response = client.get("/api/payments/initiate", follow_redirects=False)

    assert response.status_code == 502
    assert response.json()["error_code"] == "esewa:initiation:unexpected_status"


def test_initiate_transport_error_is_502(client):
    app.dependency_overrides[get_gateway_transport] = lambda: MockGatewayTransport(fail_with="timeout")

    response = client.get("/api/payments/initiate", follow_redirects=False)

    assert response.status_code == 502
    assert response.json()["error_code"] == "esewa:initiation:transport_failure"


def test_success_callback_with_valid_signature(client, payment_request, secret_key):
    blob = build_callback(payment_request, secret_key)

    response = client.get("/api/payments/success", params={"data": blob})

    assert response.status_code == 200
    body = response.json()
    assert body["signature_valid"] is True
    assert body["response"]["status"] == "COMPLETE"
    assert body["response"]["transaction_uuid"] == "id-123-abc"


def test_success_callback_with_invalid_signature_is_still_200(client, signed_response):
    tampered = signed_response.model_copy(update={"signature": "INVALID_SIGNATURE"})

    response = client.get("/api/payments/success", params={"data": encode_response(tampered)})

    assert response.status_code == 200
    assert response.json()["signature_valid"] is False


def test_success_callback_bad_base64_is_400(client):
    response = client.get("/api/payments/success", params={"data": "not-valid-base64!!!"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "esewa:callback:encoding_failure"


def test_success_callback_missing_data_is_422(client):
    response = client.get("/api/payments/success")
    assert response.status_code == 422


def test_failure_acknowledgment(client):
    response = client.get("/api/payments/failure")

    assert response.status_code == 200
    assert response.text == "Payment failed"


def test_success_callback_with_surrogate_escape_is_400(client, signed_response):
    payload = signed_response.model_dump()
    payload["signature"] = "\ud800"
    blob = base64.b64encode(json.dumps(payload).encode("ascii")).decode("ascii")

    response = client.get("/api/payments/success", params={"data": blob})

    assert response.status_code == 400
    assert response.json()["error_code"] == "esewa:callback:malformed_payload"
