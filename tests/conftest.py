"""
Pytest fixtures for the invoice core test suite.

Provides:
- Structured logging configured for the whole session
- Log capture as parsed JSON records
- Deterministic clocks and in-memory / on-disk metadata stores
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest

from invoice_engines.tax import LineItem
from invoice_kernel.domain.clock import DeterministicClock
from invoice_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from invoice_services.metadata_store import InMemoryMetadataStore, JsonFileMetadataStore
from invoice_services.numbering_service import DocumentNumberingService

# October 2024, the month most numbering tests run in
OCTOBER_2024 = datetime(2024, 10, 15, 12, 0, 0, tzinfo=timezone.utc)
NOVEMBER_2024 = datetime(2024, 11, 1, 9, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture invoice_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            compute_multi_tax(Decimal("100"), TaxConfig())
            logs = captured_logs()
            assert any(r["message"] == "multi_tax_calculation_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("invoice_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Clock pinned to 15 October 2024."""
    return DeterministicClock(OCTOBER_2024)


@pytest.fixture
def sample_items():
    """Two lines: 2 x 1000 and 3 x 500 (subtotal 3500)."""
    return [
        LineItem(description="Web design", quantity=2, unit="page", unit_price=Decimal("1000")),
        LineItem(description="Revisions", quantity=3, unit="hour", unit_price=Decimal("500")),
    ]


@pytest.fixture
def memory_store():
    return InMemoryMetadataStore()


@pytest.fixture
def file_store(tmp_path):
    return JsonFileMetadataStore(tmp_path / ".metadata.json")


@pytest.fixture
def numbering_service(memory_store, deterministic_clock):
    return DocumentNumberingService(memory_store, clock=deterministic_clock)
