"""
invoice_config -- single public entrypoint for runtime configuration.

Responsibility:
    ``get_active_config()`` is the only way components obtain
    configuration.  It loads the packaged ``defaults.yaml``, overlays an
    optional user file, validates the result and returns a frozen
    ``InvoiceConfig``.

Architecture position:
    Configuration -- sits above ``invoice_kernel`` and below
    ``invoice_services``.  Engines never import this package.

Failure modes:
    - ``ConfigLoadError`` -- the user file is missing, is not valid YAML,
      or fails validation.

Audit relevance:
    Every successful call emits an ``INVOICE_CONFIG_TRACE`` log entry with
    the source file and the SHA-256 checksum of the merged configuration.
"""

from __future__ import annotations

from pathlib import Path

import yaml

from invoice_config.loader import load_yaml_file, log_level, merge_dicts, parse_config
from invoice_config.schema import InvoiceConfig, LoggingConfig, NumberingConfig
from invoice_kernel.exceptions import ConfigLoadError
from invoice_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(path: str | Path | None = None) -> InvoiceConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: Optional user YAML file.  Keys it sets override the packaged
            defaults; nested sections are merged key by key.

    Returns:
        Validated, frozen InvoiceConfig.

    Raises:
        ConfigLoadError: If a file cannot be read or parsed, or the merged
            configuration is invalid.
    """
    data = _load(DEFAULTS_PATH)
    source = "<defaults>"
    if path is not None:
        data = merge_dicts(data, _load(Path(path)))
        source = str(path)

    try:
        config = parse_config(data, source=source)
    except ValueError as exc:
        raise ConfigLoadError(source, str(exc)) from exc

    _logger.info(
        "INVOICE_CONFIG_TRACE",
        extra={
            "trace_type": "INVOICE_CONFIG_TRACE",
            "source": config.source,
            "checksum": config.checksum,
            "metadata_path": config.numbering.metadata_path,
            "sequence_width": config.numbering.sequence_width,
        },
    )
    return config


def _load(path: Path) -> dict:
    try:
        return load_yaml_file(path)
    except (OSError, yaml.YAMLError, ValueError) as exc:
        raise ConfigLoadError(str(path), str(exc)) from exc


__all__ = [
    "InvoiceConfig",
    "LoggingConfig",
    "NumberingConfig",
    "get_active_config",
    "log_level",
]
