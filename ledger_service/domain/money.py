"""Fixed-point money arithmetic at 4 fractional digits"""

from decimal import Decimal, InvalidOperation
from typing import Union

from ledger_service.domain.exceptions import InvalidRequestError

SCALE = 4
QUANTUM = Decimal(1).scaleb(-SCALE)  # Decimal("0.0001")
ZERO = Decimal(0).quantize(QUANTUM)
# Largest amount whose minor units fit a signed 64-bit column
MAX_AMOUNT = Decimal(2**63 - 1).scaleb(-SCALE)

AmountLike = Union[Decimal, int, str]


def to_decimal(value: AmountLike) -> Decimal:
    """
    Coerce input to an exact Decimal at ledger scale.

    Floats are rejected: their binary representation is not exact.
    Values with more than 4 fractional digits are rejected rather than rounded.

    Raises:
        InvalidRequestError: On non-numeric, non-finite, over-precise or out-of-range input
    """
    if isinstance(value, (float, bool)):
        raise InvalidRequestError(f"Amount must be an exact decimal, got {type(value).__name__}")

    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidRequestError(f"Invalid amount: {value!r}") from e

    if not amount.is_finite():
        raise InvalidRequestError(f"Invalid amount: {value!r}")

    try:
        quantized = amount.quantize(QUANTUM)
    except InvalidOperation as e:
        raise InvalidRequestError(f"Amount out of range: {value!r}") from e

    if quantized != amount:
        raise InvalidRequestError(f"Amount supports at most {SCALE} decimal places")

    return require_in_range(quantized)


def require_in_range(amount: Decimal, what: str = "Amount") -> Decimal:
    """Reject values whose magnitude exceeds what a balance column can hold"""
    if abs(amount) > MAX_AMOUNT:
        raise InvalidRequestError(f"{what} out of range")
    return amount


def require_positive(value: AmountLike) -> Decimal:
    """Validate a deposit or transfer amount (> 0)"""
    amount = to_decimal(value)
    if amount <= 0:
        raise InvalidRequestError("Amount should be positive")
    return amount


def to_units(amount: Decimal) -> int:
    """
    Convert a Decimal to integer minor units for storage.

    Example:
        Decimal("10.5") → 105000
    """
    return int(amount.quantize(QUANTUM).scaleb(SCALE))


def from_units(units: int) -> Decimal:
    """Convert stored minor units back to a Decimal with exactly 4 fractional digits"""
    return Decimal(units).scaleb(-SCALE)
