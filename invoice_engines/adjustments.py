"""
Adjustments Engine - Discounts and partial (installment) payments.

Applied strictly after the tax breakdown, in a fixed order:

    tax total -> discount -> partial payment

A percentage discount is taken from the document subtotal (the gross base
in gross-up mode), not from the post-tax total.  A partial payment bills a
slice of the post-discount total, or of the remaining contract balance when
the document is one installment of a larger contract.

Neither step clamps at zero.  A discount larger than the total yields a
negative total, which is passed through unchanged.

Pure functions with no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping

from invoice_engines.tracer import traced_engine
from invoice_kernel.domain.money import HUNDRED, ZERO, round2, to_decimal, to_double
from invoice_kernel.exceptions import InputError
from invoice_kernel.logging_config import get_logger

logger = get_logger("engines.adjustments")

DISCOUNT_LABEL = "ส่วนลด"


class AdjustmentType(str, Enum):
    """How an adjustment value is interpreted."""

    PERCENT = "percent"  # value is a percentage (10 for 10%)
    FIXED = "fixed"  # value is a literal amount

    @classmethod
    def parse(cls, value: AdjustmentType | str) -> AdjustmentType:
        try:
            return cls(value)
        except ValueError:
            raise InputError(
                f"Unknown adjustment type: {value!r} (expected 'percent' or 'fixed')"
            ) from None


def _optional_decimal(value: Any) -> Decimal | None:
    return None if value is None else to_decimal(value)


def _format_value(value: Decimal) -> str:
    """10.0 -> "10", 7.50 -> "7.5" for labels."""
    return format(value.normalize(), "f")


@dataclass(frozen=True)
class DiscountSpec:
    """Discount as entered on the document."""

    enabled: bool = False
    type: AdjustmentType = AdjustmentType.PERCENT
    value: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", AdjustmentType.parse(self.type))
        object.__setattr__(self, "value", to_decimal(self.value))

    @property
    def is_active(self) -> bool:
        return self.enabled and self.value > ZERO

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> DiscountSpec:
        if not data:
            return cls()
        return cls(
            enabled=bool(data.get("enabled", False)),
            type=data.get("type", AdjustmentType.PERCENT.value),
            value=data.get("value", 0),
        )


@dataclass(frozen=True)
class DiscountResult:
    amount: Decimal
    new_total: Decimal
    label: str = ""


@dataclass(frozen=True)
class PartialPaymentSpec:
    """
    Slice of the total billed on this document.

    ``base_amount`` overrides the base a percentage is taken from.
    """

    enabled: bool = False
    type: AdjustmentType = AdjustmentType.PERCENT
    value: Decimal = ZERO
    base_amount: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", AdjustmentType.parse(self.type))
        object.__setattr__(self, "value", to_decimal(self.value))
        object.__setattr__(self, "base_amount", _optional_decimal(self.base_amount))

    @property
    def is_active(self) -> bool:
        return self.enabled and self.value > ZERO

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> PartialPaymentSpec:
        if not data:
            return cls()
        return cls(
            enabled=bool(data.get("enabled", False)),
            type=data.get("type", AdjustmentType.PERCENT.value),
            value=data.get("value", 0),
            base_amount=data.get("baseAmount"),
        )


@dataclass(frozen=True)
class InstallmentContext:
    """Where this document sits within a larger installment contract."""

    is_installment: bool = False
    total_contract_amount: Decimal | None = None
    paid_to_date: Decimal | None = None
    remaining_amount: Decimal | None = None

    def __post_init__(self) -> None:
        for name in ("total_contract_amount", "paid_to_date", "remaining_amount"):
            object.__setattr__(self, name, _optional_decimal(getattr(self, name)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> InstallmentContext | None:
        if not data:
            return None
        return cls(
            is_installment=bool(data.get("isInstallment", False)),
            total_contract_amount=data.get("totalContractAmount"),
            paid_to_date=data.get("paidToDate"),
            remaining_amount=data.get("remainingAmount"),
        )


@dataclass(frozen=True)
class PartialPaymentResult:
    payment_amount: Decimal
    remaining_before: Decimal
    remaining_after: Decimal
    paid_to_date: Decimal
    is_installment: bool = False
    label: str = ""

    @property
    def shows_remaining_after(self) -> bool:
        """The remaining balance is printed only while something is still owed."""
        return self.remaining_after > ZERO

    @property
    def shows_installment_history(self) -> bool:
        """Earlier installments are summarized only once something was paid."""
        return self.is_installment and self.paid_to_date > ZERO


@traced_engine("adjustments.discount", "1.0", fingerprint_fields=(
    "breakdown_total", "subtotal_for_percent", "spec",
))
def apply_discount(
    breakdown_total: Decimal | float | str,
    subtotal_for_percent: Decimal | float | str,
    spec: DiscountSpec | None,
) -> DiscountResult:
    """
    Apply a discount to the post-tax total.

    Args:
        breakdown_total: Total after tax
        subtotal_for_percent: Base for percentage discounts (document subtotal)
        spec: Discount as entered; None or inactive means no discount

    Returns:
        DiscountResult; new_total may be negative
    """
    total = to_decimal(breakdown_total)
    if spec is None or not spec.is_active:
        return DiscountResult(amount=ZERO, new_total=total)

    if spec.type is AdjustmentType.PERCENT:
        amount = to_decimal(subtotal_for_percent) * spec.value / HUNDRED
        label = f"{DISCOUNT_LABEL} {_format_value(spec.value)}%"
    else:
        amount = spec.value
        label = DISCOUNT_LABEL

    new_total = total - amount
    if new_total < ZERO:
        logger.warning("discount_exceeds_total", extra={
            "total": str(total),
            "discount_amount": str(amount),
            "new_total": str(new_total),
        })

    logger.debug("discount_applied", extra={
        "type": spec.type.value,
        "value": str(spec.value),
        "discount_amount": str(amount),
        "new_total": str(new_total),
    })
    return DiscountResult(amount=amount, new_total=new_total, label=label)


@traced_engine("adjustments.partial_payment", "1.0", fingerprint_fields=(
    "post_discount_total", "spec", "installment",
))
def apply_partial_payment(
    post_discount_total: Decimal | float | str,
    spec: PartialPaymentSpec | None,
    installment: InstallmentContext | None = None,
) -> PartialPaymentResult | None:
    """
    Compute this document's slice of the total.

    Percentage base, first non-zero of: spec.base_amount,
    installment.remaining_amount, post_discount_total.

    Args:
        post_discount_total: Total after discount
        spec: Partial payment as entered
        installment: Contract position, if this is one installment

    Returns:
        PartialPaymentResult, or None when the spec is absent or inactive
    """
    if spec is None or not spec.is_active:
        return None

    total = to_decimal(post_discount_total)
    remaining_amount = installment.remaining_amount if installment else None

    if spec.type is AdjustmentType.PERCENT:
        base = spec.base_amount or remaining_amount or total
        payment_amount = base * spec.value / HUNDRED
        payment_double = to_double(base) * to_double(spec.value) / 100
        label = f"{_format_value(spec.value)}%"
    else:
        payment_amount = spec.value
        payment_double = to_double(spec.value)
        label = ""

    contract_total = (installment.total_contract_amount if installment else None) or total
    paid_to_date = (installment.paid_to_date if installment else None) or ZERO
    remaining_before = contract_total - paid_to_date
    remaining_after = round2(
        to_double(contract_total) - to_double(paid_to_date) - payment_double
    )

    logger.debug("partial_payment_applied", extra={
        "type": spec.type.value,
        "value": str(spec.value),
        "payment_amount": str(payment_amount),
        "remaining_before": str(remaining_before),
        "remaining_after": str(remaining_after),
    })

    return PartialPaymentResult(
        payment_amount=payment_amount,
        remaining_before=remaining_before,
        remaining_after=remaining_after,
        paid_to_date=paid_to_date,
        is_installment=bool(installment and installment.is_installment),
        label=label,
    )
