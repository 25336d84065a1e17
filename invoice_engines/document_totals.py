"""
Document Totals - The figures printed in a document's summary block.

Chains the engines in the order the document generator prints them:

    items -> tax (multi-tax breakdown or legacy single tax)
          -> discount -> partial payment -> amount in words

The renderer never re-derives a monetary value; it formats what this
module returns.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Sequence

from invoice_engines.adjustments import (
    DiscountResult,
    DiscountSpec,
    InstallmentContext,
    PartialPaymentResult,
    PartialPaymentSpec,
    apply_discount,
    apply_partial_payment,
)
from invoice_engines.tax import (
    LegacyTaxResult,
    LineItem,
    TaxBreakdown,
    TaxConfig,
    TaxKind,
    compute_legacy_tax,
    compute_multi_tax,
    items_subtotal,
)
from invoice_engines.thai_text import baht_text
from invoice_kernel.exceptions import InputError
from invoice_kernel.logging_config import get_logger

logger = get_logger("engines.document_totals")


@dataclass(frozen=True)
class DocumentTotals:
    """
    Summary figures for one document.

    Exactly one of ``breakdown`` (multi-tax) and ``legacy`` is set.
    ``amount_due`` is the partial payment when one applies, otherwise the
    post-discount total; ``amount_in_words`` spells out ``amount_due``.
    """

    items_subtotal: Decimal
    discount: DiscountResult
    final_total: Decimal
    amount_due: Decimal
    amount_in_words: str
    breakdown: TaxBreakdown | None = None
    legacy: LegacyTaxResult | None = None
    partial_payment: PartialPaymentResult | None = None

    @property
    def subtotal(self) -> Decimal:
        return self.breakdown.subtotal if self.breakdown else self.legacy.subtotal

    @property
    def tax_total(self) -> Decimal:
        return self.breakdown.total if self.breakdown else self.legacy.total


def compute_document_totals(
    items: Sequence[LineItem],
    *,
    tax_config: TaxConfig | None = None,
    legacy_rate: Decimal | float | str | None = None,
    legacy_kind: TaxKind | str | None = None,
    discount: DiscountSpec | None = None,
    partial_payment: PartialPaymentSpec | None = None,
    installment: InstallmentContext | None = None,
) -> DocumentTotals:
    """
    Compute every figure of a document's summary block.

    Args:
        items: Line items
        tax_config: Multi-tax configuration; when None the legacy single-tax
            path is used with legacy_rate and legacy_kind
        legacy_rate: Legacy tax rate (decimal fraction)
        legacy_kind: "withholding" or "vat"
        discount: Optional discount
        partial_payment: Optional partial payment
        installment: Optional installment contract position

    Returns:
        DocumentTotals

    Raises:
        InputError: If neither tax_config nor both legacy parameters are given
        GrossUpConfigurationError: From the multi-tax engine
    """
    subtotal = items_subtotal(items)
    breakdown: TaxBreakdown | None = None
    legacy: LegacyTaxResult | None = None

    if tax_config is not None:
        breakdown = compute_multi_tax(subtotal, tax_config)
        percent_base, starting_total = breakdown.subtotal, breakdown.total
    else:
        if legacy_rate is None or legacy_kind is None:
            raise InputError(
                "Either tax_config or both legacy_rate and legacy_kind are required"
            )
        legacy = compute_legacy_tax(items, legacy_rate, legacy_kind)
        percent_base, starting_total = legacy.subtotal, legacy.total

    discount_result = apply_discount(starting_total, percent_base, discount)
    final_total = discount_result.new_total

    partial = apply_partial_payment(final_total, partial_payment, installment)
    amount_due = partial.payment_amount if partial is not None else final_total

    totals = DocumentTotals(
        items_subtotal=subtotal,
        breakdown=breakdown,
        legacy=legacy,
        discount=discount_result,
        final_total=final_total,
        partial_payment=partial,
        amount_due=amount_due,
        amount_in_words=baht_text(amount_due),
    )

    logger.info("document_totals_computed", extra={
        "item_count": len(items),
        "tax_mode": "multi" if breakdown else "legacy",
        "items_subtotal": str(subtotal),
        "final_total": str(final_total),
        "amount_due": str(amount_due),
        "has_discount": discount_result.amount != 0,
        "has_partial_payment": partial is not None,
    })
    return totals


def compute_document_totals_from_dict(data: Mapping[str, Any]) -> DocumentTotals:
    """
    Compute totals from validated document JSON.

    Reads ``items``, ``taxConfig`` (or ``taxRate`` / ``taxType``),
    ``discount``, ``partialPayment`` and ``installment``.
    """
    items = [LineItem.from_dict(item) for item in data.get("items", [])]
    tax_config_data = data.get("taxConfig")

    return compute_document_totals(
        items,
        tax_config=TaxConfig.from_dict(tax_config_data) if tax_config_data else None,
        legacy_rate=data.get("taxRate"),
        legacy_kind=data.get("taxType"),
        discount=DiscountSpec.from_dict(data.get("discount")),
        partial_payment=PartialPaymentSpec.from_dict(data.get("partialPayment")),
        installment=InstallmentContext.from_dict(data.get("installment")),
    )
