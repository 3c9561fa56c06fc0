"""Watchlist store contract and the flat-file JSON backend."""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import List, Optional, Protocol

from pydantic import TypeAdapter, ValidationError

from .config.logging import get_logger
from .core.models import TrackedSymbol
from .exceptions import ConflictError, StoreError

logger = get_logger(__name__)

_records_adapter = TypeAdapter(List[TrackedSymbol])


class WatchlistStore(Protocol):
    """Persistence contract for tracked symbols, keyed by uppercase symbol."""

    def list_all(self) -> List[TrackedSymbol]:
        ...

    def find_by_symbol(self, symbol: str) -> Optional[TrackedSymbol]:
        ...

    def insert(self, record: TrackedSymbol) -> TrackedSymbol:
        ...

    def update(self, record: TrackedSymbol) -> TrackedSymbol:
        ...

    def delete_by_symbol(self, symbol: str) -> Optional[TrackedSymbol]:
        ...


class JsonFileWatchlistStore:
    """
    Store the watchlist as a JSON array in a single file.

    Every operation reads the whole file and writes it back atomically
    (temporary file + rename). A process-wide lock serialises file access.
    A missing file is created empty on first read.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self._lock = threading.RLock()
        self.logger = logger.bind(component="json_store", path=str(self.path))

    def _read(self) -> List[TrackedSymbol]:
        if not self.path.exists():
            self._write([])
            return []

        try:
            raw = self.path.read_text(encoding="utf-8")
            return _records_adapter.validate_json(raw or "[]")
        except (OSError, ValidationError, ValueError) as e:
            self.logger.error("Failed to read watchlist file", error=str(e))
            raise StoreError("read", str(e)) from e

    def _write(self, records: List[TrackedSymbol]) -> None:
        payload = json.dumps(
            [record.model_dump(mode="json") for record in records], indent=2
        )
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=".stocks-", suffix=".json"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_path, self.path)
        except OSError as e:
            self.logger.error("Failed to write watchlist file", error=str(e))
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StoreError("write", str(e)) from e

    def list_all(self) -> List[TrackedSymbol]:
        with self._lock:
            return self._read()

    def find_by_symbol(self, symbol: str) -> Optional[TrackedSymbol]:
        symbol = symbol.upper()
        with self._lock:
            return next((r for r in self._read() if r.symbol == symbol), None)

    def insert(self, record: TrackedSymbol) -> TrackedSymbol:
        with self._lock:
            records = self._read()
            if any(r.symbol == record.symbol for r in records):
                raise ConflictError(record.symbol)
            records.append(record)
            self._write(records)
        return record

    def update(self, record: TrackedSymbol) -> TrackedSymbol:
        with self._lock:
            records = self._read()
            for index, existing in enumerate(records):
                if existing.symbol == record.symbol:
                    records[index] = record
                    break
            else:
                raise StoreError("update", f"symbol '{record.symbol}' is not stored")
            self._write(records)
        return record

    def delete_by_symbol(self, symbol: str) -> Optional[TrackedSymbol]:
        symbol = symbol.upper()
        with self._lock:
            records = self._read()
            for index, existing in enumerate(records):
                if existing.symbol == symbol:
                    deleted = records.pop(index)
                    self._write(records)
                    return deleted
        return None
