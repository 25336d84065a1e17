"""
Invoice configuration schema.

Frozen dataclasses the YAML configuration is parsed into.  Nothing at
runtime reads YAML directly; components receive these objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Numbering
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NumberingConfig:
    """Where the numbering record lives and how numbers are printed."""

    metadata_path: str = ".metadata.json"
    sequence_width: int = 3
    prefixes: tuple[tuple[str, str], ...] = (
        ("invoice", "INV"),
        ("quotation", "QT"),
        ("receipt", "REC"),
    )


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InvoiceConfig:
    """Complete runtime configuration."""

    numbering: NumberingConfig = field(default_factory=NumberingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    source: str = "<defaults>"
    checksum: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Plain data form, the input of the checksum."""
        return {
            "numbering": {
                "metadata_path": self.numbering.metadata_path,
                "sequence_width": self.numbering.sequence_width,
                "prefixes": dict(self.numbering.prefixes),
            },
            "logging": {"level": self.logging.level},
        }
