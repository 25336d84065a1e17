"""
Tests for the adjustments engine (discounts and partial payments).

Covers:
- Percentage and fixed discounts, labels, inactive specs
- Negative totals passed through
- Partial payment base selection (override, installment remainder, total)
- Remaining balance before and after this document
- Building specs from document JSON
"""

from decimal import Decimal

import pytest

from invoice_engines.adjustments import (
    AdjustmentType,
    DiscountSpec,
    InstallmentContext,
    PartialPaymentSpec,
    apply_discount,
    apply_partial_payment,
)
from invoice_engines.tax import TaxConfig, TaxSetting, compute_multi_tax
from invoice_kernel.exceptions import InputError


class TestApplyDiscount:

    def test_percent_of_subtotal(self):
        spec = DiscountSpec(enabled=True, type="percent", value=10)
        result = apply_discount(Decimal("10400"), Decimal("10000"), spec)

        assert result.amount == Decimal("1000")
        assert result.new_total == Decimal("9400")
        assert result.label == "ส่วนลด 10%"

    def test_fixed_amount(self):
        spec = DiscountSpec(enabled=True, type=AdjustmentType.FIXED, value=Decimal("500"))
        result = apply_discount(Decimal("10400"), Decimal("10000"), spec)

        assert result.amount == Decimal("500")
        assert result.new_total == Decimal("9900")
        assert result.label == "ส่วนลด"

    def test_fractional_percent_label(self):
        spec = DiscountSpec(enabled=True, type="percent", value=Decimal("7.50"))
        result = apply_discount(Decimal("1000"), Decimal("1000"), spec)

        assert result.amount == Decimal("75")
        assert result.label == "ส่วนลด 7.5%"

    def test_percent_uses_gross_subtotal_in_gross_up(self):
        breakdown = compute_multi_tax(
            Decimal("899"),
            TaxConfig(withholding=TaxSetting(enabled=True, rate=Decimal("0.03")), gross_up=True),
        )
        spec = DiscountSpec(enabled=True, type="percent", value=10)
        result = apply_discount(breakdown.total, breakdown.subtotal, spec)

        assert result.amount == Decimal("92.68")
        assert result.new_total == Decimal("806.32")

    def test_no_spec(self):
        result = apply_discount(Decimal("1000"), Decimal("1000"), None)

        assert result.amount == Decimal("0")
        assert result.new_total == Decimal("1000")
        assert result.label == ""

    def test_disabled_spec(self):
        spec = DiscountSpec(enabled=False, type="fixed", value=100)
        assert apply_discount(Decimal("1000"), Decimal("1000"), spec).new_total == Decimal("1000")

    def test_zero_value_inactive(self):
        spec = DiscountSpec(enabled=True, type="fixed", value=0)
        assert not spec.is_active
        assert apply_discount(Decimal("1000"), Decimal("1000"), spec).amount == Decimal("0")

    def test_negative_total_not_clamped(self, captured_logs):
        spec = DiscountSpec(enabled=True, type="fixed", value=20000)
        result = apply_discount(Decimal("10400"), Decimal("10000"), spec)

        assert result.new_total == Decimal("-9600")
        warnings = [r for r in captured_logs() if r["level"] == "WARNING"]
        assert warnings[0]["message"] == "discount_exceeds_total"

    def test_unknown_type_rejected(self):
        with pytest.raises(InputError, match="Unknown adjustment type"):
            DiscountSpec(enabled=True, type="bogus", value=10)

    def test_from_dict(self):
        spec = DiscountSpec.from_dict({"enabled": True, "type": "fixed", "value": 250.5})

        assert spec.type is AdjustmentType.FIXED
        assert spec.value == Decimal("250.5")
        assert DiscountSpec.from_dict(None) == DiscountSpec()


class TestApplyPartialPayment:

    def test_no_spec_returns_none(self):
        assert apply_partial_payment(Decimal("10000"), None) is None

    def test_inactive_returns_none(self):
        spec = PartialPaymentSpec(enabled=False, type="percent", value=50)
        assert apply_partial_payment(Decimal("10000"), spec) is None
        assert apply_partial_payment(Decimal("10000"), PartialPaymentSpec(enabled=True)) is None

    def test_percent_of_total(self):
        spec = PartialPaymentSpec(enabled=True, type="percent", value=50)
        result = apply_partial_payment(Decimal("10000"), spec)

        assert result.payment_amount == Decimal("5000")
        assert result.remaining_before == Decimal("10000")
        assert result.remaining_after == Decimal("5000.00")
        assert result.paid_to_date == Decimal("0")
        assert result.label == "50%"
        assert result.shows_remaining_after
        assert not result.shows_installment_history

    def test_fixed_amount(self):
        spec = PartialPaymentSpec(enabled=True, type="fixed", value=3000)
        result = apply_partial_payment(Decimal("10000"), spec)

        assert result.payment_amount == Decimal("3000")
        assert result.remaining_after == Decimal("7000.00")
        assert result.label == ""

    def test_base_amount_override(self):
        spec = PartialPaymentSpec(enabled=True, type="percent", value=30, base_amount=20000)
        result = apply_partial_payment(Decimal("10000"), spec)

        assert result.payment_amount == Decimal("6000")

    def test_installment_remaining_is_percent_base(self):
        spec = PartialPaymentSpec(enabled=True, type="percent", value=50)
        installment = InstallmentContext(
            is_installment=True,
            total_contract_amount=Decimal("100000"),
            paid_to_date=Decimal("40000"),
            remaining_amount=Decimal("60000"),
        )
        result = apply_partial_payment(Decimal("10000"), spec, installment)

        assert result.payment_amount == Decimal("30000")
        assert result.remaining_before == Decimal("60000")
        assert result.remaining_after == Decimal("30000.00")
        assert result.paid_to_date == Decimal("40000")
        assert result.shows_installment_history

    def test_zero_base_amount_falls_through(self):
        spec = PartialPaymentSpec(enabled=True, type="percent", value=50, base_amount=0)
        installment = InstallmentContext(remaining_amount=Decimal("8000"))
        result = apply_partial_payment(Decimal("10000"), spec, installment)

        assert result.payment_amount == Decimal("4000")

    def test_installment_without_history(self):
        spec = PartialPaymentSpec(enabled=True, type="fixed", value=1000)
        installment = InstallmentContext(is_installment=True, total_contract_amount=Decimal("5000"))
        result = apply_partial_payment(Decimal("5000"), spec, installment)

        assert result.is_installment
        assert not result.shows_installment_history

    def test_full_payment_hides_remaining(self):
        spec = PartialPaymentSpec(enabled=True, type="percent", value=100)
        result = apply_partial_payment(Decimal("10000"), spec)

        assert result.remaining_after == Decimal("0.00")
        assert not result.shows_remaining_after

    def test_overpayment_not_clamped(self):
        spec = PartialPaymentSpec(enabled=True, type="fixed", value=12000)
        result = apply_partial_payment(Decimal("10000"), spec)

        assert result.remaining_after == Decimal("-2000.00")
        assert not result.shows_remaining_after

    def test_remaining_after_rounded(self):
        spec = PartialPaymentSpec(enabled=True, type="percent", value=Decimal("33.333"))
        result = apply_partial_payment(Decimal("1000"), spec)

        assert result.payment_amount == Decimal("333.33")
        assert result.remaining_after == Decimal("666.67")
        assert result.label == "33.333%"


class TestFromDict:

    def test_partial_payment_from_dict(self):
        spec = PartialPaymentSpec.from_dict({
            "enabled": True,
            "type": "percent",
            "value": 50,
            "baseAmount": 20000,
        })

        assert spec.is_active
        assert spec.base_amount == Decimal("20000")

    def test_installment_from_dict(self):
        installment = InstallmentContext.from_dict({
            "isInstallment": True,
            "totalContractAmount": 100000,
            "paidToDate": 40000.5,
        })

        assert installment.is_installment
        assert installment.total_contract_amount == Decimal("100000")
        assert installment.paid_to_date == Decimal("40000.5")
        assert installment.remaining_amount is None

    def test_empty_installment_is_none(self):
        assert InstallmentContext.from_dict({}) is None
        assert InstallmentContext.from_dict(None) is None
