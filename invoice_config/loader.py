"""
Configuration Loader (``invoice_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into the frozen dataclasses of
``invoice_config.schema``.  The single public entry point for runtime
configuration is ``invoice_config.get_active_config()``.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` with a message naming the offending
  key; no silent defaults for keys that are present but malformed.
* ``compute_checksum`` is deterministic for identical data.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrong shape or value  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Mapping

import yaml

from invoice_config.schema import InvoiceConfig, LoggingConfig, NumberingConfig

DOCUMENT_TYPES = ("invoice", "quotation", "receipt")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"top level must be a mapping, got {type(data).__name__}")
    return data


def merge_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursive merge; ``override`` wins, nested mappings are merged key by key."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"{name} must be a mapping, got {type(section).__name__}")
    return section


def parse_numbering(data: Mapping[str, Any]) -> NumberingConfig:
    """Parse the ``numbering`` section."""
    metadata_path = data.get("metadata_path", NumberingConfig.metadata_path)
    if not isinstance(metadata_path, str) or not metadata_path.strip():
        raise ValueError(f"numbering.metadata_path must be a non-empty string, got {metadata_path!r}")

    width = data.get("sequence_width", NumberingConfig.sequence_width)
    if not isinstance(width, int) or isinstance(width, bool) or width < 1:
        raise ValueError(f"numbering.sequence_width must be a positive integer, got {width!r}")

    raw_prefixes = data.get("prefixes") or {}
    if not isinstance(raw_prefixes, Mapping):
        raise ValueError("numbering.prefixes must be a mapping of document type to prefix")
    unknown = sorted(set(raw_prefixes) - set(DOCUMENT_TYPES))
    if unknown:
        raise ValueError(f"numbering.prefixes has unknown document types: {unknown}")
    prefixes = []
    for document_type in DOCUMENT_TYPES:
        prefix = raw_prefixes.get(document_type)
        if not isinstance(prefix, str) or not prefix:
            raise ValueError(f"numbering.prefixes.{document_type} must be a non-empty string")
        prefixes.append((document_type, prefix))

    return NumberingConfig(
        metadata_path=metadata_path,
        sequence_width=width,
        prefixes=tuple(prefixes),
    )


def parse_logging(data: Mapping[str, Any]) -> LoggingConfig:
    """Parse the ``logging`` section."""
    level = str(data.get("level", LoggingConfig.level)).upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"logging.level must be one of {LOG_LEVELS}, got {level!r}")
    return LoggingConfig(level=level)


def parse_config(data: Mapping[str, Any], source: str = "<defaults>") -> InvoiceConfig:
    """
    Parse a complete (already merged) configuration mapping.

    Postconditions:
        - ``checksum`` is the SHA-256 of the parsed configuration.
    """
    numbering = parse_numbering(_section(data, "numbering"))
    log_config = parse_logging(_section(data, "logging"))
    config = InvoiceConfig(numbering=numbering, logging=log_config, source=source)
    return InvoiceConfig(
        numbering=numbering,
        logging=log_config,
        source=source,
        checksum=compute_checksum(config.to_dict()),
    )


def log_level(config: InvoiceConfig) -> int:
    """Numeric logging level for ``configure_logging``."""
    return logging.getLevelName(config.logging.level)


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
