"""
Pure domain layer.

Money primitives and the clock abstraction, with NO dependencies on:
- Files or the metadata store
- Logging configuration
- Wall-clock time (except SystemClock)
"""

from invoice_kernel.domain.clock import (
    Clock,
    DeterministicClock,
    SequentialClock,
    SystemClock,
)
from invoice_kernel.domain.money import (
    DEFAULT_ROUNDING,
    MONEY_DECIMAL_PLACES,
    format_amount,
    round2,
    round_money,
    to_decimal,
    to_double,
)

__all__ = [
    "Clock",
    "DEFAULT_ROUNDING",
    "DeterministicClock",
    "MONEY_DECIMAL_PLACES",
    "SequentialClock",
    "SystemClock",
    "format_amount",
    "round2",
    "round_money",
    "to_decimal",
    "to_double",
]
