import base64
import hashlib
import hmac

import pytest

from esewapay.services.signature_service import (
    build_signing_message,
    generate_signature,
    verify_signature,
)


def test_signing_message_is_verbatim_and_ordered():
    message = build_signing_message("110", "id-123-abc", "EPAYTEST")
    assert message == "total_amount=110,transaction_uuid=id-123-abc,product_code=EPAYTEST"


def test_signing_message_does_not_trim_values():
    message = build_signing_message(" 110 ", "a,b", "P=Q")
    assert message == "total_amount= 110 ,transaction_uuid=a,b,product_code=P=Q"


def test_signature_is_base64_hmac_sha256_of_message(secret_key):
    message = b"total_amount=110,transaction_uuid=id-123-abc,product_code=EPAYTEST"
    expected = base64.b64encode(
        hmac.new(secret_key.encode("utf-8"), message, hashlib.sha256).digest()
    ).decode("ascii")

    assert generate_signature("110", "id-123-abc", "EPAYTEST", secret_key) == expected


def test_sandbox_example_is_deterministic_and_32_bytes(secret_key):
    first = generate_signature("110", "id-123-abc", "EPAYTEST", secret_key)
    second = generate_signature("110", "id-123-abc", "EPAYTEST", secret_key)

    assert first == second
    assert len(first) == 44
    assert first.endswith("=") and not first.endswith("==")
    assert len(base64.b64decode(first)) == 32


@pytest.mark.parametrize(
    "total_amount, transaction_uuid, product_code",
    [
        ("250", "id-123-abc", "EPAYTEST"),
        ("110", "id-456-def", "EPAYTEST"),
        ("110", "id-123-abc", "EPAYLIVE"),
        ("110.0", "id-123-abc", "EPAYTEST"),
    ],
)
def test_changing_any_signed_field_changes_signature(secret_key, total_amount, transaction_uuid, product_code):
    baseline = generate_signature("110", "id-123-abc", "EPAYTEST", secret_key)
    assert generate_signature(total_amount, transaction_uuid, product_code, secret_key) != baseline


def test_amount_formatting_is_significant(secret_key):
    assert generate_signature("100", "id-1", "EPAYTEST", secret_key) != generate_signature(
        "100.0", "id-1", "EPAYTEST", secret_key
    )


def test_str_and_bytes_keys_are_equivalent(secret_key):
    assert generate_signature("110", "id-1", "EPAYTEST", secret_key) == generate_signature(
        "110", "id-1", "EPAYTEST", secret_key.encode("utf-8")
    )


def test_empty_and_long_keys_are_accepted():
    assert len(generate_signature("1", "id-1", "EPAYTEST", b"")) == 44
    assert len(generate_signature("1", "id-1", "EPAYTEST", b"k" * 500)) == 44


def test_verify_signature_accepts_matching_and_rejects_altered(secret_key):
    signature = generate_signature("110", "id-123-abc", "EPAYTEST", secret_key)

    assert verify_signature("110", "id-123-abc", "EPAYTEST", signature, secret_key)
    assert not verify_signature("110", "id-123-abc", "EPAYTEST", "INVALID_SIGNATURE", secret_key)
    assert not verify_signature("110", "id-123-abc", "EPAYTEST", signature, "other-key")


def test_verify_signature_handles_non_ascii_input(secret_key):
    assert not verify_signature("110", "id-123-abc", "EPAYTEST", "sïgnätüre", secret_key)
