"""
Signature Service for eSewa ePay v2

Implements HMAC-SHA256 signature generation and verification over the
canonical eSewa signing string.
"""
import base64
import hmac
import hashlib
from typing import Union


SecretKey = Union[str, bytes]


def _key_bytes(secret_key: SecretKey) -> bytes:
    if isinstance(secret_key, bytes):
        return secret_key
    return secret_key.encode('utf-8')


def build_signing_message(
    total_amount: str,
    transaction_uuid: str,
    product_code: str
) -> str:
    """
    Create the canonical signing string.

    Values are inserted verbatim: no trimming, no escaping and no numeric
    normalization. Field order is fixed.

    Example:
        total_amount=110,transaction_uuid=id-123-abc,product_code=EPAYTEST
    """
    return (
        f"total_amount={total_amount},"
        f"transaction_uuid={transaction_uuid},"
        f"product_code={product_code}"
    )


def generate_signature(
    total_amount: str,
    transaction_uuid: str,
    product_code: str,
    secret_key: SecretKey
) -> str:
    """
    Sign payment fields using HMAC-SHA256.

    Args:
        total_amount: Total payment amount, exactly as it will be posted
        transaction_uuid: Unique transaction identifier
        product_code: eSewa merchant product code (e.g. "EPAYTEST")
        secret_key: Merchant secret key; str keys are UTF-8 encoded

    Returns:
        Standard base64 (padded) of the 32-byte digest, 44 characters long
    """
    message = build_signing_message(total_amount, transaction_uuid, product_code)

    # Compute HMAC-SHA256
    signature_bytes = hmac.new(
        _key_bytes(secret_key),
        message.encode('utf-8'),
        hashlib.sha256
    ).digest()

    return base64.b64encode(signature_bytes).decode('ascii')


def verify_signature(
    total_amount: str,
    transaction_uuid: str,
    product_code: str,
    signature: str,
    secret_key: SecretKey
) -> bool:
    """
    Verify a signature using constant-time comparison.

    Args:
        total_amount: Total amount as reported by eSewa
        transaction_uuid: Transaction identifier as reported by eSewa
        product_code: Product code as reported by eSewa
        signature: Signature supplied by eSewa (untrusted, any text)
        secret_key: Merchant secret key

    Returns:
        True if signature valid, False otherwise
    """
    expected_signature = generate_signature(
        total_amount,
        transaction_uuid,
        product_code,
        secret_key
    )

    # Compared as bytes: compare_digest rejects non-ASCII str arguments
    return hmac.compare_digest(
        expected_signature.encode('utf-8'),
        signature.encode('utf-8')
    )
