"""
Invoice Kernel - financial core for freelance documents

Shared foundation for invoices, quotations and receipts:
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging
- Injectable clock for period-sensitive numbering
- Decimal money primitives with half-away-from-zero rounding
"""

__version__ = "0.1.0"
