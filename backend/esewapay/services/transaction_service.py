"""
Transaction Service

Generates transaction identifiers and assembles payment requests.
Nothing is stored: a request lives for one initiation call.
"""
import secrets
import string
import time
from typing import Optional

from ..models.payments import DEFAULT_SIGNED_FIELD_NAMES, PaymentRequest


TRANSACTION_UUID_ALPHABET = string.digits + string.ascii_lowercase
TRANSACTION_UUID_RANDOM_LENGTH = 9


def generate_transaction_uuid() -> str:
    """
    Generate a transaction identifier.

    Format: id-<epoch milliseconds>-<9 chars from [0-9a-z]>

    Example:
        id-1760781234567-q8w2k0z1m
    """
    now_ms = time.time_ns() // 1_000_000
    random_part = "".join(
        secrets.choice(TRANSACTION_UUID_ALPHABET)
        for _ in range(TRANSACTION_UUID_RANDOM_LENGTH)
    )
    return f"id-{now_ms}-{random_part}"


def create_payment_request(
    amount: str,
    tax_amount: str,
    total_amount: str,
    product_code: str,
    success_url: str,
    failure_url: str,
    product_service_charge: str = "0",
    product_delivery_charge: str = "0",
    transaction_uuid: Optional[str] = None
) -> PaymentRequest:
    """
    Build a PaymentRequest, generating a transaction uuid when none is given.

    Amounts are passed through untouched; total_amount is not recomputed.
    """
    return PaymentRequest(
        amount=amount,
        tax_amount=tax_amount,
        total_amount=total_amount,
        transaction_uuid=transaction_uuid or generate_transaction_uuid(),
        product_code=product_code,
        product_service_charge=product_service_charge,
        product_delivery_charge=product_delivery_charge,
        success_url=success_url,
        failure_url=failure_url,
        signed_field_names=DEFAULT_SIGNED_FIELD_NAMES
    )
