"""
Tax Engine - Subtotal, VAT and withholding for freelance documents.

Two calculation paths are kept side by side:

- Legacy single-tax (``compute_legacy_tax``): one rate, either withholding
  (deducted) or VAT (added).  Nothing is rounded; documents round at display
  time.  Older documents were produced this way and must reprint identically.
- Multi-tax (``compute_multi_tax``): VAT and withholding together, with an
  optional gross-up so the contractor receives a fixed net amount.  Every
  field of the breakdown is computed in double arithmetic, the way existing
  documents computed it, and rounded to 2 places on its own.

The two rounding policies differ on purpose.  Unifying them changes
historical output.

Pure functions with no I/O.

Usage:
    from decimal import Decimal
    from invoice_engines.tax import LineItem, TaxConfig, TaxSetting, compute_multi_tax

    config = TaxConfig(
        vat=TaxSetting(enabled=False),
        withholding=TaxSetting(enabled=True, rate=Decimal("0.03")),
        gross_up=True,
    )
    breakdown = compute_multi_tax(Decimal("899"), config)
    print(breakdown.subtotal)           # 926.80
    print(breakdown.withholding_amount) # 27.80
    print(breakdown.total)              # 899.00
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Sequence

from invoice_engines.tracer import traced_engine
from invoice_kernel.domain.money import ZERO, round2, to_decimal, to_double
from invoice_kernel.exceptions import GrossUpConfigurationError, InputError
from invoice_kernel.logging_config import get_logger

logger = get_logger("engines.tax")

ONE = Decimal("1")


class TaxKind(str, Enum):
    """Legacy single-tax kind."""

    WITHHOLDING = "withholding"  # Deducted from the payable total
    VAT = "vat"  # Added on top of the payable total

    @classmethod
    def parse(cls, value: TaxKind | str) -> TaxKind:
        try:
            return cls(value)
        except ValueError:
            raise InputError(
                f"Unknown tax kind: {value!r} (expected 'withholding' or 'vat')"
            ) from None


@dataclass(frozen=True)
class LineItem:
    """
    One billable line.

    Immutable once passed to the engine.  Quantity and unit price are
    normalized to Decimal on construction.
    """

    description: str
    quantity: Decimal
    unit: str
    unit_price: Decimal
    details: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_decimal(self.quantity))
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price))

    @property
    def line_total(self) -> Decimal:
        """quantity x unit_price, never rounded."""
        return self.quantity * self.unit_price

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LineItem:
        """Build from the document JSON shape (``unitPrice`` key)."""
        return cls(
            description=data["description"],
            quantity=data["quantity"],
            unit=data.get("unit", ""),
            unit_price=data["unitPrice"],
            details=data.get("details"),
        )


@dataclass(frozen=True)
class TaxSetting:
    """One tax switch: enabled flag plus rate as a decimal fraction."""

    enabled: bool = False
    rate: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "rate", to_decimal(self.rate))

    @property
    def effective_rate(self) -> Decimal:
        return self.rate if self.enabled else ZERO

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> TaxSetting:
        if not data:
            return cls()
        return cls(enabled=bool(data.get("enabled", False)), rate=data.get("rate", 0))


@dataclass(frozen=True)
class TaxConfig:
    """
    Which taxes apply and whether the amount entered is the net to receive.

    gross_up=False: the items subtotal is the base; VAT is added and
    withholding deducted.
    gross_up=True: the items subtotal is the net the contractor must
    receive; the engine solves for the gross base.
    """

    vat: TaxSetting = TaxSetting()
    withholding: TaxSetting = TaxSetting()
    gross_up: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TaxConfig:
        """Build from the document JSON shape (``grossUp`` key)."""
        return cls(
            vat=TaxSetting.from_dict(data.get("vat")),
            withholding=TaxSetting.from_dict(data.get("withholding")),
            gross_up=bool(data.get("grossUp", False)),
        )


@dataclass(frozen=True)
class LegacyTaxResult:
    """Unrounded legacy single-tax totals."""

    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal
    kind: TaxKind


@dataclass(frozen=True)
class TaxBreakdown:
    """
    Multi-tax breakdown.

    All amounts are rounded to 2 places independently.  In gross-up mode
    ``subtotal`` is the gross base and ``gross_up_amount`` is set.
    """

    subtotal: Decimal
    vat_amount: Decimal
    withholding_amount: Decimal
    total: Decimal
    gross_up_amount: Decimal | None = None

    @property
    def is_gross_up(self) -> bool:
        return self.gross_up_amount is not None


def line_total(item: LineItem) -> Decimal:
    """Line total for display; quantity x unit_price with no rounding."""
    return item.line_total


def items_subtotal(items: Sequence[LineItem]) -> Decimal:
    """Exact sum of line totals."""
    return sum((item.line_total for item in items), ZERO)


class TaxCalculator:
    """
    Calculate document taxes.

    Pure functions - no I/O, no state.

    Handles:
        - Legacy single-tax (withholding or VAT), unrounded
        - VAT and withholding together, rounded per field
        - Gross-up to a fixed net amount
    """

    def calculate_legacy(
        self,
        items: Sequence[LineItem],
        rate: Decimal | float | str,
        kind: TaxKind | str,
    ) -> LegacyTaxResult:
        """
        Legacy single-tax totals.

        Args:
            items: Line items
            rate: Tax rate as decimal fraction (0.03 for 3%)
            kind: "withholding" (deduct) or "vat" (add)

        Returns:
            LegacyTaxResult with exact, unrounded figures

        Raises:
            InputError: If kind is not withholding or vat
        """
        tax_kind = TaxKind.parse(kind)
        tax_rate = to_decimal(rate)

        subtotal = items_subtotal(items)
        tax_amount = subtotal * tax_rate
        if tax_kind is TaxKind.WITHHOLDING:
            total = subtotal - tax_amount
        else:
            total = subtotal + tax_amount

        logger.debug("legacy_tax_calculated", extra={
            "item_count": len(items),
            "rate": str(tax_rate),
            "kind": tax_kind.value,
            "subtotal": str(subtotal),
            "tax_amount": str(tax_amount),
            "total": str(total),
        })

        return LegacyTaxResult(
            subtotal=subtotal,
            tax_amount=tax_amount,
            total=total,
            kind=tax_kind,
        )

    def calculate_multi_tax(
        self,
        items_subtotal: Decimal | float | str,
        tax_config: TaxConfig,
    ) -> TaxBreakdown:
        """
        VAT and withholding breakdown, optionally grossed up.

        Args:
            items_subtotal: Sum of line totals (the net to receive when
                tax_config.gross_up is set)
            tax_config: Enabled taxes, rates and gross-up flag

        Returns:
            TaxBreakdown with every field rounded to 2 places

        Raises:
            GrossUpConfigurationError: If gross-up has a zero or negative
                net factor
        """
        t0 = time.monotonic()
        amount = to_decimal(items_subtotal)
        logger.info("multi_tax_calculation_started", extra={
            "items_subtotal": str(amount),
            "vat_enabled": tax_config.vat.enabled,
            "vat_rate": str(tax_config.vat.rate),
            "withholding_enabled": tax_config.withholding.enabled,
            "withholding_rate": str(tax_config.withholding.rate),
            "gross_up": tax_config.gross_up,
        })

        if tax_config.gross_up:
            result = self._calculate_gross_up(amount, tax_config)
        else:
            result = self._calculate_normal(amount, tax_config)

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("multi_tax_calculation_completed", extra={
            "subtotal": str(result.subtotal),
            "vat_amount": str(result.vat_amount),
            "withholding_amount": str(result.withholding_amount),
            "total": str(result.total),
            "gross_up_amount": (
                str(result.gross_up_amount) if result.is_gross_up else None
            ),
            "duration_ms": duration_ms,
        })
        return result

    def _calculate_normal(self, amount: Decimal, config: TaxConfig) -> TaxBreakdown:
        """Tax on top of / against the items subtotal, in double arithmetic."""
        subtotal = to_double(amount)
        vat_amount = (
            subtotal * to_double(config.vat.rate) if config.vat.enabled else 0.0
        )
        withholding_amount = (
            subtotal * to_double(config.withholding.rate)
            if config.withholding.enabled else 0.0
        )
        total = subtotal + vat_amount - withholding_amount

        return TaxBreakdown(
            subtotal=round2(subtotal),
            vat_amount=round2(vat_amount),
            withholding_amount=round2(withholding_amount),
            total=round2(total),
        )

    def _calculate_gross_up(self, net: Decimal, config: TaxConfig) -> TaxBreakdown:
        """Solve for the gross base that nets ``net`` after taxes."""
        vat, withholding = config.vat, config.withholding

        if vat.enabled and withholding.enabled:
            denominator = ONE + vat.rate - withholding.rate
        elif withholding.enabled:
            denominator = ONE - withholding.rate
        elif vat.enabled:
            denominator = ONE + vat.rate
        else:
            denominator = ONE

        if denominator <= ZERO:
            logger.error("gross_up_denominator_invalid", extra={
                "denominator": str(denominator),
                "vat_rate": str(vat.effective_rate),
                "withholding_rate": str(withholding.effective_rate),
            })
            raise GrossUpConfigurationError(
                denominator=str(denominator),
                vat_rate=str(vat.effective_rate),
                withholding_rate=str(withholding.effective_rate),
            )

        vat_rate, withholding_rate = to_double(vat.rate), to_double(withholding.rate)
        if vat.enabled and withholding.enabled:
            factor = 1 + vat_rate - withholding_rate
        elif withholding.enabled:
            factor = 1 - withholding_rate
        elif vat.enabled:
            factor = 1 + vat_rate
        else:
            factor = 1.0

        net_amount = to_double(net)
        gross = net_amount / factor
        vat_amount = gross * vat_rate if vat.enabled else 0.0
        withholding_amount = gross * withholding_rate if withholding.enabled else 0.0

        logger.debug("gross_up_solved", extra={
            "net": str(net),
            "denominator": str(denominator),
            "gross": repr(gross),
        })

        # total is the requested net, not recomputed from the rounded parts
        return TaxBreakdown(
            subtotal=round2(gross),
            vat_amount=round2(vat_amount),
            withholding_amount=round2(withholding_amount),
            total=round2(net),
            gross_up_amount=round2(gross - net_amount),
        )


# Convenience functions


@traced_engine("tax.legacy", "1.0", fingerprint_fields=("items", "rate", "kind"))
def compute_legacy_tax(
    items: Sequence[LineItem],
    rate: Decimal | float | str,
    kind: TaxKind | str,
) -> LegacyTaxResult:
    """Legacy single-tax totals (unrounded). See TaxCalculator.calculate_legacy."""
    return TaxCalculator().calculate_legacy(items, rate, kind)


@traced_engine("tax.multi", "1.0", fingerprint_fields=("items_subtotal", "tax_config"))
def compute_multi_tax(
    items_subtotal: Decimal | float | str,
    tax_config: TaxConfig,
) -> TaxBreakdown:
    """Multi-tax breakdown. See TaxCalculator.calculate_multi_tax."""
    return TaxCalculator().calculate_multi_tax(items_subtotal, tax_config)
