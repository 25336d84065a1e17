"""
DocumentNumberingService -- per-type document numbers with monthly rollover.

Responsibility:
    Issues sequential document numbers of the form ``PREFIX-YYYYMM-NNN``
    for invoices, quotations and receipts, and advances the persisted
    counter once a document has actually been generated.

Architecture position:
    Services -- imperative shell.  The numbering record is an explicit
    ``Metadata`` value; the pure functions in this module (``rollover``,
    ``next_document_number``, ``apply_commit``, ``apply_reset``) take a
    record and return a new one.  The service wraps them with exactly one
    store read and, for mutating calls, one store write.

Invariants enforced:
    - Monotonic counter: ``commit`` sets ``last_number`` to
      max(current, committed) and never decreases it.
    - Rollover: when the stored (year, month) differs from the current
      calendar month the counter restarts at 0.  ``peek_next`` computes the
      rollover without persisting it; ``commit`` and ``reset`` persist it.
    - Read-before-write: every call re-reads the store.  Nothing is cached
      between calls.

Failure modes:
    - Corrupt or unreadable store: logged as a warning, defaults used.
    - Write failure in ``commit``: DocumentNumberNotCommittedError.  The
      document exists but its number was not recorded and may be reissued.
    - Unknown document type: UnknownDocumentTypeError.

Known latitude:
    ``commit`` does not compare the period embedded in the committed number
    with the current period.  Committing ``INV-202410-007`` after the month
    rolled over to November advances November's counter to 7.  Concurrent
    processes are not coordinated (last writer wins).
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from invoice_kernel.domain.clock import Clock, SystemClock
from invoice_kernel.exceptions import (
    DocumentNumberNotCommittedError,
    MetadataReadError,
    MetadataWriteError,
    UnknownDocumentTypeError,
)
from invoice_kernel.logging_config import LogContext, get_logger
from invoice_services.metadata_store import MetadataStore

logger = get_logger("services.numbering")


class DocumentType(str, Enum):
    """Document types that carry their own counter."""

    INVOICE = "invoice"
    QUOTATION = "quotation"
    RECEIPT = "receipt"

    @classmethod
    def parse(cls, value: DocumentType | str) -> DocumentType:
        try:
            return cls(value)
        except ValueError:
            raise UnknownDocumentTypeError(str(value)) from None


DEFAULT_PREFIXES: dict[DocumentType, str] = {
    DocumentType.INVOICE: "INV",
    DocumentType.QUOTATION: "QT",
    DocumentType.RECEIPT: "REC",
}
DEFAULT_SEQUENCE_WIDTH = 3

_SEQUENCE_SUFFIX = re.compile(r"-([0-9]+)\Z")


@dataclass(frozen=True, order=True)
class Period:
    """Calendar month a counter belongs to."""

    year: int
    month: int

    @classmethod
    def from_clock(cls, clock: Clock) -> Period:
        now = clock.now()
        return cls(year=now.year, month=now.month)

    @property
    def label(self) -> str:
        """YYYYMM"""
        return f"{self.year}{self.month:02d}"


@dataclass(frozen=True)
class DocumentTypeMetadata:
    """Counter for one document type. Persisted as lastNumber/prefix/year/month."""

    last_number: int
    prefix: str
    year: int
    month: int

    @property
    def period(self) -> Period:
        return Period(self.year, self.month)

    def to_dict(self) -> dict[str, Any]:
        return {
            "lastNumber": self.last_number,
            "prefix": self.prefix,
            "year": self.year,
            "month": self.month,
        }

    @classmethod
    def from_dict(cls, data: Any) -> DocumentTypeMetadata:
        """
        Raises:
            ValueError: If the entry does not have the persisted shape.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"expected an object, got {type(data).__name__}")
        for key in ("lastNumber", "year", "month"):
            value = data.get(key)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{key} must be an integer, got {value!r}")
        if not isinstance(data.get("prefix"), str):
            raise ValueError(f"prefix must be a string, got {data.get('prefix')!r}")
        if data["lastNumber"] < 0:
            raise ValueError(f"lastNumber must be >= 0, got {data['lastNumber']}")
        if not 1 <= data["month"] <= 12:
            raise ValueError(f"month must be in 1..12, got {data['month']}")
        return cls(
            last_number=data["lastNumber"],
            prefix=data["prefix"],
            year=data["year"],
            month=data["month"],
        )


@dataclass(frozen=True)
class Metadata:
    """The whole numbering record, one counter per document type."""

    invoice: DocumentTypeMetadata
    quotation: DocumentTypeMetadata
    receipt: DocumentTypeMetadata

    def get(self, document_type: DocumentType) -> DocumentTypeMetadata:
        return getattr(self, document_type.value)

    def with_entry(
        self, document_type: DocumentType, entry: DocumentTypeMetadata
    ) -> Metadata:
        return dataclasses.replace(self, **{document_type.value: entry})

    def to_dict(self) -> dict[str, Any]:
        return {t.value: self.get(t).to_dict() for t in DocumentType}

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        defaults: Metadata,
    ) -> tuple[Metadata, list[DocumentType]]:
        """
        Parse a stored record.

        Types missing from the record are taken from ``defaults`` and
        returned in the second element so the caller can log them.

        Raises:
            ValueError: If a present entry is malformed.
        """
        entries: dict[str, DocumentTypeMetadata] = {}
        missing: list[DocumentType] = []
        for document_type in DocumentType:
            raw = data.get(document_type.value)
            if raw is None:
                missing.append(document_type)
                entries[document_type.value] = defaults.get(document_type)
                continue
            try:
                entries[document_type.value] = DocumentTypeMetadata.from_dict(raw)
            except ValueError as exc:
                raise ValueError(f"{document_type.value}: {exc}") from exc
        return cls(**entries), missing


# ---------------------------------------------------------------------------
# Pure record operations
# ---------------------------------------------------------------------------


def period_of(clock: Clock) -> Period:
    """Current calendar month according to ``clock``."""
    return Period.from_clock(clock)


def default_metadata(
    period: Period,
    prefixes: Mapping[DocumentType, str] = DEFAULT_PREFIXES,
) -> Metadata:
    """Zeroed counters for all document types in ``period``."""
    return Metadata(**{
        t.value: DocumentTypeMetadata(
            last_number=0, prefix=prefixes[t], year=period.year, month=period.month
        )
        for t in DocumentType
    })


def rollover(entry: DocumentTypeMetadata, period: Period) -> DocumentTypeMetadata:
    """Counter as it stands in ``period``: reset to 0 if the period changed."""
    if entry.period == period:
        return entry
    return dataclasses.replace(entry, last_number=0, year=period.year, month=period.month)


def format_document_number(
    prefix: str,
    period: Period,
    sequence: int,
    width: int = DEFAULT_SEQUENCE_WIDTH,
) -> str:
    """``PREFIX-YYYYMM-NNN``. Sequences wider than ``width`` are not truncated."""
    return f"{prefix}-{period.label}-{sequence:0{width}d}"


def extract_sequence(document_number: str) -> int | None:
    """Trailing sequence of a document number, or None if there is none."""
    match = _SEQUENCE_SUFFIX.search(document_number)
    return int(match.group(1)) if match else None


def next_document_number(
    metadata: Metadata,
    document_type: DocumentType,
    period: Period,
    width: int = DEFAULT_SEQUENCE_WIDTH,
) -> str:
    entry = rollover(metadata.get(document_type), period)
    return format_document_number(entry.prefix, period, entry.last_number + 1, width)


def apply_commit(
    metadata: Metadata,
    document_type: DocumentType,
    document_number: str,
    period: Period,
) -> Metadata:
    """Record ``document_number`` as issued; the counter never decreases."""
    entry = rollover(metadata.get(document_type), period)
    sequence = extract_sequence(document_number)
    if sequence is not None and sequence > entry.last_number:
        entry = dataclasses.replace(entry, last_number=sequence)
    return metadata.with_entry(document_type, entry)


def apply_reset(
    metadata: Metadata,
    document_type: DocumentType,
    period: Period,
) -> Metadata:
    entry = dataclasses.replace(
        metadata.get(document_type), last_number=0, year=period.year, month=period.month
    )
    return metadata.with_entry(document_type, entry)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class DocumentNumberingService:
    """
    Issue and commit document numbers against a MetadataStore.

    Contract:
        ``peek_next`` is a pure read.  ``commit`` must be called only after
        the document was generated successfully.

    Non-goals:
        - No locking across processes.
        - No validation of the committed number's embedded period.

    Usage:
        service = DocumentNumberingService(JsonFileMetadataStore(), SystemClock())
        number = service.peek_next(DocumentType.INVOICE)
        render_pdf(number)
        service.commit(DocumentType.INVOICE, number)
    """

    def __init__(
        self,
        store: MetadataStore,
        clock: Clock | None = None,
        prefixes: Mapping[DocumentType, str] | None = None,
        sequence_width: int = DEFAULT_SEQUENCE_WIDTH,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._prefixes = dict(prefixes or DEFAULT_PREFIXES)
        self._sequence_width = sequence_width

    def _period(self) -> Period:
        return period_of(self._clock)

    def _load(self, period: Period) -> Metadata:
        """Read the record, falling back to defaults if absent or corrupt."""
        defaults = default_metadata(period, self._prefixes)
        try:
            raw = self._store.read()
        except MetadataReadError as exc:
            logger.warning("metadata_unreadable_using_defaults", extra={
                "location": exc.location,
                "reason": exc.reason,
            })
            return defaults

        if raw is None:
            logger.debug("metadata_absent_using_defaults", extra={
                "location": self._store.location,
            })
            return defaults

        try:
            metadata, missing = Metadata.from_dict(raw, defaults)
        except ValueError as exc:
            logger.warning("metadata_unreadable_using_defaults", extra={
                "location": self._store.location,
                "reason": str(exc),
            })
            return defaults

        if missing:
            logger.warning("metadata_types_missing_using_defaults", extra={
                "location": self._store.location,
                "missing_types": [t.value for t in missing],
            })
        return metadata

    def current(self, document_type: DocumentType | str) -> DocumentTypeMetadata:
        """Stored counter for a type, as read (no rollover applied)."""
        doc_type = DocumentType.parse(document_type)
        return self._load(self._period()).get(doc_type)

    def peek_next(self, document_type: DocumentType | str) -> str:
        """
        Next document number for a type, without persisting anything.

        Calling twice without a commit returns the same number.
        """
        doc_type = DocumentType.parse(document_type)
        period = self._period()
        metadata = self._load(period)
        number = next_document_number(metadata, doc_type, period, self._sequence_width)

        stored = metadata.get(doc_type)
        logger.debug("document_number_peeked", extra={
            "document_type": doc_type.value,
            "next_number": number,
            "rolled_over": stored.period != period,
        })
        return number

    def commit(self, document_type: DocumentType | str, document_number: str) -> Metadata:
        """
        Record a generated document's number.

        Postconditions:
            - Stored period is the current period (rollover persisted).
            - ``last_number`` is max(previous, committed sequence).
            - The record is written even when the counter did not move.

        Raises:
            DocumentNumberNotCommittedError: If the record cannot be written.
        """
        doc_type = DocumentType.parse(document_type)
        with LogContext.bind(document_type=doc_type.value, document_number=document_number):
            period = self._period()
            before = self._load(period)
            after = apply_commit(before, doc_type, document_number, period)

            if extract_sequence(document_number) is None:
                logger.warning("document_number_without_sequence", extra={
                    "document_number": document_number,
                })

            try:
                self._store.write(after.to_dict())
            except MetadataWriteError as exc:
                logger.error("document_number_commit_failed", extra={
                    "location": exc.location,
                    "reason": exc.reason,
                })
                raise DocumentNumberNotCommittedError(
                    document_type=doc_type.value,
                    document_number=document_number,
                    location=exc.location,
                    reason=exc.reason,
                ) from exc

            logger.info("document_number_committed", extra={
                "previous_last_number": before.get(doc_type).last_number,
                "last_number": after.get(doc_type).last_number,
                "period": period.label,
            })
            return after

    def reset(self, document_type: DocumentType | str) -> Metadata:
        """
        Set a type's counter to 0 in the current period.

        Raises:
            MetadataWriteError: If the record cannot be written.
        """
        doc_type = DocumentType.parse(document_type)
        period = self._period()
        metadata = apply_reset(self._load(period), doc_type, period)
        self._store.write(metadata.to_dict())
        logger.info("document_counter_reset", extra={
            "document_type": doc_type.value,
            "period": period.label,
        })
        return metadata

    def initialize(self) -> bool:
        """
        Create the record with zeroed counters if the store is empty.

        Returns:
            True if the record was created, False if one already existed.
        """
        if self._store.exists():
            logger.info("metadata_already_exists", extra={
                "location": self._store.location,
            })
            return False
        self._store.write(default_metadata(self._period(), self._prefixes).to_dict())
        logger.info("metadata_initialized", extra={"location": self._store.location})
        return True
