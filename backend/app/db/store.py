import asyncio
import json
import os
import tempfile
from pathlib import Path

import structlog
from fastapi import HTTPException, status
from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from backend.app.core.config import Settings
from backend.app.core.errors import StorageError
from backend.app.models.reservation import Reservation

logger = structlog.get_logger(__name__)

_records = TypeAdapter(list[Reservation])


class ReservationStore:
    """Append-only reservation list kept as a JSON array in a single file.

    Every append rewrites the whole file through a temp file and ``os.replace``,
    so readers see either the old or the new array. Appends are serialized by
    an asyncio lock owned by the store.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._ensure_file)

    async def list_all(self) -> list[Reservation]:
        return await asyncio.to_thread(self._read)

    async def append(self, record: Reservation) -> None:
        async with self._lock:
            await asyncio.to_thread(self._append, record)

    def _append(self, record: Reservation) -> None:
        self._ensure_file()
        records = self._read()
        records.append(record)
        self._write(records)

    def _ensure_file(self) -> None:
        if self.path.exists():
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(exc) from exc
        self._write([])
        logger.info("Initialised reservation store", path=str(self.path))

    def _read(self) -> list[Reservation]:
        # Only initialize() and append() create the file, both under the lock
        if not self.path.exists():
            return []
        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            raise StorageError(exc) from exc

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise StorageError(f"{self.path} is not valid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise StorageError(f"{self.path} does not hold a JSON array")

        try:
            return _records.validate_python(data)
        except SchemaError as exc:
            raise StorageError(f"{self.path} holds invalid records: {exc}") from exc

    def _write(self, records: list[Reservation]) -> None:
        payload = json.dumps([record.to_json() for record in records], indent=2, ensure_ascii=False)
        tmp_path: str | None = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self.path)
        except OSError as exc:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(exc) from exc


store: ReservationStore | None = None


async def init_store(app_settings: Settings) -> ReservationStore:
    """Create the shared store and make sure its file exists."""
    global store
    store = ReservationStore(app_settings.reservations_path)
    await store.initialize()
    return store


def get_store() -> ReservationStore:
    if store is None:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail="Reservation store unavailable")
    return store
