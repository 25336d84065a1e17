"""
Services layer -- stateful operations over injected persistence.

The numbering registry is the only service: it owns the document counters
and is the only component that writes the metadata record.

Usage:
    from invoice_services import create_numbering_service
    from invoice_config import get_active_config

    service = create_numbering_service(get_active_config())
    number = service.peek_next("invoice")
"""

from __future__ import annotations

from invoice_config import InvoiceConfig, get_active_config, log_level
from invoice_kernel.domain.clock import Clock
from invoice_kernel.logging_config import configure_logging
from invoice_services.metadata_store import (
    DEFAULT_METADATA_PATH,
    InMemoryMetadataStore,
    JsonFileMetadataStore,
    MetadataStore,
)
from invoice_services.numbering_service import (
    DEFAULT_PREFIXES,
    DEFAULT_SEQUENCE_WIDTH,
    DocumentNumberingService,
    DocumentType,
    DocumentTypeMetadata,
    Metadata,
    Period,
    apply_commit,
    apply_reset,
    default_metadata,
    extract_sequence,
    format_document_number,
    next_document_number,
    period_of,
    rollover,
)


def create_numbering_service(
    config: InvoiceConfig | None = None,
    clock: Clock | None = None,
    store: MetadataStore | None = None,
) -> DocumentNumberingService:
    """
    Build the numbering service from configuration.

    Also configures structured logging at ``config.logging.level`` unless
    logging was already configured by the caller.

    Args:
        config: Active configuration; loaded from the packaged defaults
            when None.
        clock: Clock for period decisions; the system clock when None.
        store: Overrides the JSON file store at
            ``config.numbering.metadata_path``.
    """
    config = config or get_active_config()
    configure_logging(level=log_level(config))
    numbering = config.numbering
    return DocumentNumberingService(
        store or JsonFileMetadataStore(numbering.metadata_path),
        clock=clock,
        prefixes={DocumentType(name): prefix for name, prefix in numbering.prefixes},
        sequence_width=numbering.sequence_width,
    )


__all__ = [
    "DEFAULT_METADATA_PATH",
    "DEFAULT_PREFIXES",
    "DEFAULT_SEQUENCE_WIDTH",
    "DocumentNumberingService",
    "DocumentType",
    "DocumentTypeMetadata",
    "InMemoryMetadataStore",
    "JsonFileMetadataStore",
    "Metadata",
    "MetadataStore",
    "Period",
    "apply_commit",
    "apply_reset",
    "create_numbering_service",
    "default_metadata",
    "extract_sequence",
    "format_document_number",
    "next_document_number",
    "period_of",
    "rollover",
]
