"""
Module: invoice_kernel.domain.money
Responsibility: Decimal conversion, rounding and display formatting for
    monetary amounts.  Every engine rounds and formats through this module so
    that documents printed today match documents printed before.
Architecture position: Kernel > Domain.  Pure functions, zero I/O.

Invariants enforced:
    - round2() is the ONLY rounding applied to document amounts.  It shifts
      the binary double of the value by 100 and rounds half toward positive
      infinity, so round2(1.005) is 1.00 and round2(-0.125) is -0.12.  These
      are the amounts already printed on existing documents.
    - round_money() is exact Decimal rounding, half away from zero.  It is
      used for display formatting only.
    - Float arithmetic happens only where to_double() reproduces the double
      figures of existing documents.  Other floats entering the kernel are
      converted through their shortest repr, so 0.1 becomes Decimal("0.1").

Failure modes:
    - InvalidAmountError when a value cannot be read as a Decimal.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from invoice_kernel.exceptions import InvalidAmountError

MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Any) -> Decimal:
    """
    Convert a caller-supplied number to Decimal.

    Accepts Decimal, int, str and float.  bool is rejected even though it is
    an int subclass.

    Raises:
        InvalidAmountError: If the value is not numeric or not finite.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise InvalidAmountError(str(value))
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip().replace(",", ""))
        except InvalidOperation:
            raise InvalidAmountError(value) from None
    else:
        raise InvalidAmountError(str(value))

    if not result.is_finite():
        raise InvalidAmountError(str(value))
    return result


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to specified decimal places.

    Args:
        value: The Decimal value to round.
        decimal_places: Number of decimal places to round to.
        rounding: Rounding mode (default: ROUND_HALF_UP).

    Returns:
        Rounded Decimal value.
    """
    return value.quantize(Decimal(10) ** -decimal_places, rounding=rounding)


def to_double(value: Any) -> float:
    """
    Nearest binary double of a caller-supplied number.

    Tax and payment figures that get rounded for a document are computed in
    double arithmetic, the same operations in the same order as the amounts
    already printed, so the rounding ties fall the same way.

    Raises:
        InvalidAmountError: If the value is not numeric or not finite.
    """
    if isinstance(value, float) and math.isfinite(value):
        return value
    return float(to_decimal(value))


def round2(value: Any) -> Decimal:
    """
    Round to 2 decimal places the way existing documents were rounded.

    The value is taken as the nearest binary double and multiplied by 100 in
    double arithmetic.  The product is rounded to an integer with ties going
    toward positive infinity, then shifted back as an exact Decimal.

    Examples:
        round2(1.005)   -> Decimal("1.00")   (1.005 * 100 == 100.49999...)
        round2(0.125)   -> Decimal("0.13")
        round2(-0.125)  -> Decimal("-0.12")

    Raises:
        InvalidAmountError: If the value is not numeric or not finite.
    """
    shifted = to_double(value) * 100
    if not math.isfinite(shifted):
        raise InvalidAmountError(str(value))
    whole = math.floor(shifted)
    # shifted - whole is exact for doubles
    if shifted - whole >= 0.5:
        whole += 1
    return Decimal(whole).scaleb(-MONEY_DECIMAL_PLACES)


def format_amount(value: Any, decimals: int = 2) -> str:
    """
    Format an amount with thousands separators.

    Examples:
        format_amount(1234567.89)   -> "1,234,567.89"
        format_amount(-1234.56)     -> "-1,234.56"
        format_amount(1234.5678, 0) -> "1,235"
    """
    rounded = round_money(to_decimal(value), decimals)
    if rounded.is_zero():
        rounded = abs(rounded)
    return f"{rounded:,.{decimals}f}"
