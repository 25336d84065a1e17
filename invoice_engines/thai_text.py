"""
Thai Text Engine - Amount in words and Buddhist-era dates.

``baht_text`` writes an amount the way it is printed on Thai invoices and
receipts ("amount in words"):

    899.00     -> แปดร้อยเก้าสิบเก้าบาทถ้วน
    926.80     -> เก้าร้อยยี่สิบหกบาทแปดสิบสตางค์
    1234567.89 -> หนึ่งล้านสองแสนสามหมื่นสี่พันห้าร้อยหกสิบเจ็ดบาทแปดสิบเก้าสตางค์

Digits are read by position within a group of up to six digits (ones to
hundred-thousands).  Larger amounts recurse on the millions with a ล้าน
suffix.  Three positions are irregular:

    tens digit 1                    -> สิบ      (not หนึ่งสิบ)
    tens digit 2                    -> ยี่สิบ    (not สองสิบ)
    ones digit 1, group of 2+ digits -> เอ็ด     (not หนึ่ง)

``format_date_thai`` prints a date as "day month-name BE-year".

Pure functions with no I/O.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from invoice_engines.tracer import traced_engine
from invoice_kernel.domain.money import HUNDRED, round2
from invoice_kernel.exceptions import InputError
from invoice_kernel.logging_config import get_logger

logger = get_logger("engines.thai_text")

DIGIT_WORDS = ("", "หนึ่ง", "สอง", "สาม", "สี่", "ห้า", "หก", "เจ็ด", "แปด", "เก้า")
POSITION_WORDS = ("", "สิบ", "ร้อย", "พัน", "หมื่น", "แสน")

ONE_ELIDED = "เอ็ด"
TWENTY = "ยี่สิบ"
TEN = "สิบ"
MILLION = "ล้าน"

BAHT = "บาท"
SATANG = "สตางค์"
EVEN = "ถ้วน"
NEGATIVE = "ลบ"
ZERO_BAHT = "ศูนย์บาทถ้วน"

GROUP_SIZE = 1_000_000

THAI_MONTHS = (
    "มกราคม", "กุมภาพันธ์", "มีนาคม", "เมษายน",
    "พฤษภาคม", "มิถุนายน", "กรกฎาคม", "สิงหาคม",
    "กันยายน", "ตุลาคม", "พฤศจิกายน", "ธันวาคม",
)
BUDDHIST_ERA_OFFSET = 543

# (position, digit) -> word replacing digit word + position word
_IRREGULAR = {
    (1, 1): TEN,
    (1, 2): TWENTY,
}


def _convert_group(number: int) -> str:
    """Words for 0 < number < 1,000,000. Empty string for zero."""
    if number == 0:
        return ""

    digits = str(number)
    length = len(digits)
    words: list[str] = []
    for index, char in enumerate(digits):
        digit = int(char)
        position = length - index - 1
        if digit == 0:
            continue
        if position == 0 and digit == 1 and length > 1:
            words.append(ONE_ELIDED)
        elif (position, digit) in _IRREGULAR:
            words.append(_IRREGULAR[(position, digit)])
        else:
            words.append(DIGIT_WORDS[digit] + POSITION_WORDS[position])
    return "".join(words)


def _convert_integer(number: int) -> str:
    """Words for any non-negative integer, recursing on millions."""
    if number < GROUP_SIZE:
        return _convert_group(number)
    millions, remainder = divmod(number, GROUP_SIZE)
    return _convert_integer(millions) + MILLION + _convert_group(remainder)


@traced_engine("thai_text.baht", "1.0", fingerprint_fields=("amount",))
def baht_text(amount: Decimal | float | int | str) -> str:
    """
    Amount in Thai words, baht and satang.

    The amount is rounded to 2 places with round2() before it is
    split.  Whole amounts end with ถ้วน; amounts with satang never do.

    Args:
        amount: Monetary amount; negative amounts are prefixed with ลบ

    Returns:
        Thai text, e.g. "หนึ่งบาทยี่สิบห้าสตางค์" for 1.25
    """
    rounded = round2(amount)
    if rounded < 0:
        return NEGATIVE + baht_text(-rounded)
    if rounded == 0:
        return ZERO_BAHT

    baht = int(rounded)
    satang = int((rounded - baht) * HUNDRED)

    text = ""
    if baht > 0:
        text += _convert_integer(baht) + BAHT
    if satang == 0:
        text += EVEN
    else:
        text += _convert_group(satang) + SATANG

    logger.debug("baht_text_converted", extra={
        "amount": str(rounded),
        "baht": baht,
        "satang": satang,
    })
    return text


def format_date_thai(value: date | str) -> str:
    """
    Format a date as "day Thai-month BE-year".

    Args:
        value: date, or ISO "YYYY-MM-DD" string

    Returns:
        e.g. "15 ตุลาคม 2567" for 2024-10-15

    Raises:
        InputError: If the string is not an ISO date
    """
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise InputError(f"Invalid date (expected YYYY-MM-DD): {value!r}") from None

    return f"{value.day} {THAI_MONTHS[value.month - 1]} {value.year + BUDDHIST_ERA_OFFSET}"

