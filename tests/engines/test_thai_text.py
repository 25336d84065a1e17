"""
Tests for Thai amount-in-words and Buddhist-era dates.
"""

from datetime import date
from decimal import Decimal

import pytest

from invoice_engines.thai_text import ZERO_BAHT, baht_text, format_date_thai
from invoice_kernel.exceptions import InputError


class TestBahtTextDigits:

    @pytest.mark.parametrize("amount, expected", [
        (1, "หนึ่งบาทถ้วน"),
        (5, "ห้าบาทถ้วน"),
        (9, "เก้าบาทถ้วน"),
    ])
    def test_single_digits(self, amount, expected):
        assert baht_text(amount) == expected

    @pytest.mark.parametrize("amount, expected", [
        (10, "สิบบาทถ้วน"),
        (11, "สิบเอ็ดบาทถ้วน"),
        (20, "ยี่สิบบาทถ้วน"),
        (21, "ยี่สิบเอ็ดบาทถ้วน"),
        (25, "ยี่สิบห้าบาทถ้วน"),
    ])
    def test_tens(self, amount, expected):
        assert baht_text(amount) == expected

    @pytest.mark.parametrize("amount, expected", [
        (100, "หนึ่งร้อยบาทถ้วน"),
        (101, "หนึ่งร้อยเอ็ดบาทถ้วน"),
        (111, "หนึ่งร้อยสิบเอ็ดบาทถ้วน"),
        (899, "แปดร้อยเก้าสิบเก้าบาทถ้วน"),
        (1000, "หนึ่งพันบาทถ้วน"),
        (1234, "หนึ่งพันสองร้อยสามสิบสี่บาทถ้วน"),
    ])
    def test_hundreds_and_thousands(self, amount, expected):
        assert baht_text(amount) == expected


class TestBahtTextSatang:

    def test_satang_only(self):
        assert baht_text(0.50) == "ห้าสิบสตางค์"

    def test_baht_and_satang(self):
        assert baht_text(1.25) == "หนึ่งบาทยี่สิบห้าสตางค์"
        assert baht_text(Decimal("926.80")) == "เก้าร้อยยี่สิบหกบาทแปดสิบสตางค์"
        assert baht_text(1234.50) == "หนึ่งพันสองร้อยสามสิบสี่บาทห้าสิบสตางค์"

    def test_whole_decimal_ends_even(self):
        assert baht_text(Decimal("899.00")) == "แปดร้อยเก้าสิบเก้าบาทถ้วน"

    def test_one_satang(self):
        assert baht_text(Decimal("0.01")) == "หนึ่งสตางค์"

    def test_twenty_one_satang(self):
        assert baht_text(Decimal("3.21")) == "สามบาทยี่สิบเอ็ดสตางค์"

    def test_rounded_before_split(self):
        assert baht_text(Decimal("1.996")) == "สองบาทถ้วน"
        assert baht_text(Decimal("0.006")) == "หนึ่งสตางค์"

    def test_rounding_follows_printed_documents(self):
        """1.005 is stored as 1.00499999...; printed documents read one baht."""
        assert baht_text(1.005) == "หนึ่งบาทถ้วน"


class TestBahtTextLargeAmounts:

    def test_one_million(self):
        assert baht_text(1_000_000) == "หนึ่งล้านบาทถ้วน"

    def test_millions_with_remainder(self):
        assert baht_text(1234567.89) == (
            "หนึ่งล้านสองแสนสามหมื่นสี่พันห้าร้อยหกสิบเจ็ดบาทแปดสิบเก้าสตางค์"
        )

    def test_remainder_of_one_after_million(self):
        """The remainder group is read on its own, so a lone 1 is หนึ่ง."""
        assert baht_text(1_000_001) == "หนึ่งล้านหนึ่งบาทถ้วน"

    def test_ten_million(self):
        assert baht_text(21_000_000) == "ยี่สิบเอ็ดล้านบาทถ้วน"

    def test_million_million(self):
        assert baht_text(10 ** 12) == "หนึ่งล้านล้านบาทถ้วน"


class TestBahtTextSignAndZero:

    def test_zero(self):
        assert baht_text(0) == ZERO_BAHT == "ศูนย์บาทถ้วน"

    def test_rounds_to_zero(self):
        assert baht_text(Decimal("0.001")) == "ศูนย์บาทถ้วน"
        assert baht_text(Decimal("-0.001")) == "ศูนย์บาทถ้วน"

    def test_negative(self):
        assert baht_text(-100) == "ลบหนึ่งร้อยบาทถ้วน"
        assert baht_text(Decimal("-1.25")) == "ลบ" + baht_text(Decimal("1.25"))


class TestFormatDateThai:

    def test_iso_string(self):
        assert format_date_thai("2024-10-15") == "15 ตุลาคม 2567"

    @pytest.mark.parametrize("month, name", [
        (1, "มกราคม"), (2, "กุมภาพันธ์"), (3, "มีนาคม"), (4, "เมษายน"),
        (5, "พฤษภาคม"), (6, "มิถุนายน"), (7, "กรกฎาคม"), (8, "สิงหาคม"),
        (9, "กันยายน"), (10, "ตุลาคม"), (11, "พฤศจิกายน"), (12, "ธันวาคม"),
    ])
    def test_month_names(self, month, name):
        assert format_date_thai(date(2024, month, 1)) == f"1 {name} 2567"

    def test_buddhist_era_years(self):
        assert format_date_thai("2023-06-15") == "15 มิถุนายน 2566"
        assert format_date_thai("2025-06-15") == "15 มิถุนายน 2568"

    def test_leap_day(self):
        assert format_date_thai("2024-02-29") == "29 กุมภาพันธ์ 2567"

    def test_no_zero_padding(self):
        assert format_date_thai("2024-01-05") == "5 มกราคม 2567"

    def test_invalid_string_rejected(self):
        with pytest.raises(InputError):
            format_date_thai("15/10/2024")
        with pytest.raises(InputError):
            format_date_thai("2023-02-29")
