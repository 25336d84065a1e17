"""
Module: invoice_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the import surface for the document
    generator and the dashboard API.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import invoice_kernel (and sibling engine modules).
    MUST NOT import invoice_services or invoice_config.

Invariants enforced:
    - Decimal arithmetic, except for rounded multi-tax and payment figures,
      which follow the double arithmetic of existing documents.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from invoice_engines import compute_document_totals, LineItem, TaxConfig
    from invoice_engines import baht_text, format_date_thai
"""

from invoice_engines.adjustments import (
    AdjustmentType,
    DiscountResult,
    DiscountSpec,
    InstallmentContext,
    PartialPaymentResult,
    PartialPaymentSpec,
    apply_discount,
    apply_partial_payment,
)
from invoice_engines.document_totals import (
    DocumentTotals,
    compute_document_totals,
    compute_document_totals_from_dict,
)
from invoice_engines.tax import (
    LegacyTaxResult,
    LineItem,
    TaxBreakdown,
    TaxCalculator,
    TaxConfig,
    TaxKind,
    TaxSetting,
    compute_legacy_tax,
    compute_multi_tax,
    items_subtotal,
    line_total,
)
from invoice_engines.thai_text import baht_text, format_date_thai
from invoice_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "AdjustmentType",
    "DiscountResult",
    "DiscountSpec",
    "DocumentTotals",
    "InstallmentContext",
    "LegacyTaxResult",
    "LineItem",
    "PartialPaymentResult",
    "PartialPaymentSpec",
    "TaxBreakdown",
    "TaxCalculator",
    "TaxConfig",
    "TaxKind",
    "TaxSetting",
    "apply_discount",
    "apply_partial_payment",
    "baht_text",
    "compute_document_totals",
    "compute_document_totals_from_dict",
    "compute_input_fingerprint",
    "compute_legacy_tax",
    "compute_multi_tax",
    "format_date_thai",
    "items_subtotal",
    "line_total",
    "traced_engine",
]
