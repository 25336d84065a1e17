"""
MetadataStore -- persistence port for the document numbering record.

Responsibility:
    Reads and writes the whole numbering record (one JSON object keyed by
    document type) as a unit.  The store knows nothing about counters or
    rollover; it moves dicts in and out.

Architecture position:
    Services -- imperative shell infrastructure.  Injected into
    DocumentNumberingService so that tests run without a filesystem.

Failure modes:
    - MetadataReadError: the record exists but is not valid JSON or not a
      JSON object.  The numbering service recovers by using defaults.
    - MetadataWriteError: the record could not be written.  Fatal for the
      caller.

Concurrency:
    No locking.  Two processes writing concurrently lose one update
    (last writer wins on the whole record).
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from invoice_kernel.exceptions import MetadataReadError, MetadataWriteError
from invoice_kernel.logging_config import get_logger

logger = get_logger("services.metadata_store")

DEFAULT_METADATA_PATH = ".metadata.json"


class MetadataStore(ABC):
    """Read/write capability for the numbering record."""

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable location for logs and errors."""
        ...

    @abstractmethod
    def exists(self) -> bool:
        ...

    @abstractmethod
    def read(self) -> dict[str, Any] | None:
        """
        Return the stored record, or None if nothing is stored.

        Raises:
            MetadataReadError: If the stored record cannot be parsed.
        """
        ...

    @abstractmethod
    def write(self, record: dict[str, Any]) -> None:
        """
        Replace the stored record.

        Raises:
            MetadataWriteError: If the record cannot be written.
        """
        ...


class JsonFileMetadataStore(MetadataStore):
    """
    Record kept in a pretty-printed JSON file (``.metadata.json`` by default).
    """

    def __init__(self, path: str | Path = DEFAULT_METADATA_PATH):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def location(self) -> str:
        return str(self._path)

    def exists(self) -> bool:
        return self._path.is_file()

    def read(self) -> dict[str, Any] | None:
        if not self.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise MetadataReadError(self.location, str(exc)) from exc
        if not isinstance(data, dict):
            raise MetadataReadError(
                self.location, f"expected a JSON object, got {type(data).__name__}"
            )
        return data

    def write(self, record: dict[str, Any]) -> None:
        """
        Replace the record atomically.

        The JSON goes to a temporary file in the same directory, which is
        then renamed over the record.  A failed write leaves the previous
        record untouched and no temporary file behind.
        """
        try:
            payload = json.dumps(record, indent=2, ensure_ascii=False)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_name, self._path)
            except Exception:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise MetadataWriteError(self.location, str(exc)) from exc
        logger.debug("metadata_written", extra={"location": self.location})


class InMemoryMetadataStore(MetadataStore):
    """
    Record kept in memory.

    Reads and writes deep-copy so callers never share state with the store.
    ``fail_writes`` simulates an unwritable store.
    """

    def __init__(
        self,
        record: dict[str, Any] | None = None,
        *,
        fail_writes: bool = False,
        corrupt: bool = False,
    ):
        self._record = copy.deepcopy(record)
        self.fail_writes = fail_writes
        self.corrupt = corrupt
        self.write_count = 0

    @property
    def location(self) -> str:
        return "memory"

    @property
    def record(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._record)

    def exists(self) -> bool:
        return self._record is not None or self.corrupt

    def read(self) -> dict[str, Any] | None:
        if self.corrupt:
            raise MetadataReadError(self.location, "simulated corrupt record")
        return copy.deepcopy(self._record)

    def write(self, record: dict[str, Any]) -> None:
        if self.fail_writes:
            raise MetadataWriteError(self.location, "simulated write failure")
        self._record = copy.deepcopy(record)
        self.corrupt = False
        self.write_count += 1
