"""
Fixed-scale money arithmetic.

Every monetary value in the system is a Decimal quantized to four
fractional digits with ROUND_HALF_UP. str() of such a value is the
canonical representation ("1000.0000"), which is also what the
database stores in Numeric(19, 4) columns.

Floats never take part in ledger arithmetic. Values coming from the
outside world are converted once with to_amount(); every sum in the
ledger and reporting services goes through add().
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from entity_ledger.errors import ValidationError

SCALE = 4
QUANTUM = Decimal("0.0001")
ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0.0000")

# Numeric(19, 4) leaves 15 digits before the point
MAX_AMOUNT = Decimal("1e15")


def _quantize(value: Decimal) -> Decimal:
    try:
        return value.quantize(QUANTUM, rounding=ROUNDING)
    except InvalidOperation:
        raise ValidationError(f"Invalid amount: {value!r}") from None


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValidationError(f"Invalid amount: {value!r}")
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value.strip() if isinstance(value, str) else value)
        except InvalidOperation:
            raise ValidationError(f"Invalid amount: {value!r}") from None
    elif isinstance(value, float):
        # repr of a float is its shortest round-trip string
        result = Decimal(repr(value))
    else:
        raise ValidationError(f"Invalid amount: {value!r}")

    if not result.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    return result


def to_amount(value) -> Decimal:
    """
    Parse a boundary value into a 4-place Decimal.

    Values that do not fit a Numeric(19, 4) column are rejected.
    """
    result = _quantize(_to_decimal(value))
    if abs(result) >= MAX_AMOUNT:
        raise ValidationError(f"Invalid amount: {value!r}")
    return result


def add(*values) -> Decimal:
    """Sum any number of operands, rounding once at the end."""
    total = Decimal(0)
    for value in values:
        total += _to_decimal(value)
    return _quantize(total)


def subtract(a, b) -> Decimal:
    return _quantize(_to_decimal(a) - _to_decimal(b))


def multiply(a, b) -> Decimal:
    return _quantize(_to_decimal(a) * _to_decimal(b))


def divide(a, b) -> Decimal:
    divisor = _to_decimal(b)
    if divisor == 0:
        raise ValidationError("Cannot divide an amount by zero")
    return _quantize(_to_decimal(a) / divisor)


def is_equal(a, b) -> bool:
    """
    Compare two amounts at the fixed scale.

    This is the equality used for the double-entry invariant.
    """
    return _quantize(_to_decimal(a)) == _quantize(_to_decimal(b))


def is_zero(value) -> bool:
    return _quantize(_to_decimal(value)) == ZERO


def format_amount(value) -> str:
    """Canonical 4-place string for output."""
    return str(_quantize(_to_decimal(value)))
