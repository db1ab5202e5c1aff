# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Append-only record store.

Backends:
- ``JsonFileRecordStore``: one JSON array per collection, rewritten through a
  temp file and ``os.replace`` so a crash never leaves a partial file.
- ``SqlRecordStore``: one table per collection, single-row inserts.
- ``MirroredRecordStore``: primary store plus a best-effort mirror.

No backend exposes update or delete.
"""

import asyncio
import json
import os
import re
import secrets
import stat
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from concierge_intake.database import Database
from concierge_intake.errors import StorageError
from concierge_intake.logging_config import get_logger
from concierge_intake.models import MODELS_BY_COLLECTION

logger = get_logger(__name__)

_COLLECTION_NAME = re.compile(r"^[a-z][a-z0-9_]{0,63}$")
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def generate_record_id() -> str:
    """128-bit random hex id."""
    return secrets.token_hex(16)


def to_column_name(field_name: str) -> str:
    """``typeOfRequest`` -> ``type_of_request``."""
    return _CAMEL_BOUNDARY.sub("_", field_name).lower()


def to_field_name(column_name: str) -> str:
    """``type_of_request`` -> ``typeOfRequest``."""
    head, *rest = column_name.split("_")
    return head + "".join(part.capitalize() for part in rest)


@dataclass(frozen=True)
class StoredRecord:
    """A persisted intake record."""

    id: str
    collection: str
    created_at: datetime
    fields: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "createdAt": self.created_at.isoformat(),
            **self.fields,
        }


class RecordStore(ABC):
    """Base class for record store backends."""

    async def startup(self) -> None:
        """Prepare the backend (create directories or tables)."""

    async def close(self) -> None:
        """Release backend resources."""

    async def append(self, collection: str, fields: Mapping[str, Any]) -> StoredRecord:
        """Assign an id and timestamp to ``fields`` and persist them.

        Raises:
            StorageError: If the record could not be persisted
        """
        self._check_collection(collection)
        record = StoredRecord(
            id=generate_record_id(),
            collection=collection,
            created_at=datetime.now(timezone.utc),
            fields=dict(fields),
        )
        await self.write(record)
        logger.info("Record stored", collection=collection, record_id=record.id)
        return record

    @abstractmethod
    async def write(self, record: StoredRecord) -> None:
        """Persist an already-identified record."""

    @abstractmethod
    async def list_records(self, collection: str) -> list[dict[str, Any]]:
        """Return every record in ``collection`` in insertion order."""

    async def count(self, collection: str) -> int:
        return len(await self.list_records(collection))

    @staticmethod
    def _check_collection(collection: str) -> None:
        if not _COLLECTION_NAME.match(collection):
            raise StorageError(collection, "invalid collection name")


class JsonFileRecordStore(RecordStore):
    """File-backed store with atomic replace-on-write.

    Appends to the same collection are serialized by a per-collection lock;
    the rename is the only observable state change.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir)
        self._locks: dict[str, asyncio.Lock] = {}

    def path_for(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def _lock_for(self, collection: str) -> asyncio.Lock:
        lock = self._locks.get(collection)
        if lock is None:
            lock = self._locks[collection] = asyncio.Lock()
        return lock

    async def startup(self) -> None:
        await asyncio.to_thread(self.data_dir.mkdir, parents=True, exist_ok=True)

    async def write(self, record: StoredRecord) -> None:
        async with self._lock_for(record.collection):
            await asyncio.to_thread(self._append_sync, record)

    async def list_records(self, collection: str) -> list[dict[str, Any]]:
        self._check_collection(collection)
        async with self._lock_for(collection):
            return await asyncio.to_thread(self._read_sync, collection)

    def _read_sync(self, collection: str) -> list[dict[str, Any]]:
        path = self.path_for(collection)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise StorageError(collection, f"read failed: {exc}") from exc

        try:
            rows = json.loads(text) if text.strip() else []
        except json.JSONDecodeError as exc:
            raise StorageError(collection, f"corrupt collection file: {exc}") from exc
        if not isinstance(rows, list):
            raise StorageError(collection, "collection file is not a JSON array")
        return rows

    def _append_sync(self, record: StoredRecord) -> None:
        rows = self._read_sync(record.collection)
        rows.append(record.to_dict())
        self._replace_sync(record.collection, rows)

    @staticmethod
    def _target_mode(path: Path) -> int:
        """Permission bits the collection file should keep after a rewrite."""
        try:
            return stat.S_IMODE(os.stat(path).st_mode)
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask

    def _replace_sync(self, collection: str, rows: list[dict[str, Any]]) -> None:
        path = self.path_for(collection)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{collection}.", suffix=".tmp", dir=self.data_dir
            )
        except OSError as exc:
            raise StorageError(collection, f"temp file failed: {exc}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(rows, handle, indent=2, ensure_ascii=False)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_name, self._target_mode(path))
            os.replace(tmp_name, path)
        except OSError as exc:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise StorageError(collection, f"write failed: {exc}") from exc


class SqlRecordStore(RecordStore):
    """Relational store: one table per collection."""

    def __init__(self, database: Database):
        self.database = database
        self._schema_ready = False
        self._schema_lock = asyncio.Lock()

    async def startup(self) -> None:
        await self._ensure_schema()

    async def close(self) -> None:
        await self.database.dispose()

    async def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        async with self._schema_lock:
            if not self._schema_ready:
                await self.database.create_all()
                self._schema_ready = True

    @staticmethod
    def _model_for(collection: str):
        model = MODELS_BY_COLLECTION.get(collection)
        if model is None:
            raise StorageError(collection, "no table for collection")
        return model

    async def write(self, record: StoredRecord) -> None:
        model = self._model_for(record.collection)
        row = model(
            id=record.id,
            created_at=record.created_at,
            **{to_column_name(name): value for name, value in record.fields.items()},
        )
        try:
            await self._ensure_schema()
            async with self.database.session() as session:
                session.add(row)
        except (SQLAlchemyError, OSError) as exc:
            raise StorageError(record.collection, f"insert failed: {exc}") from exc

    async def list_records(self, collection: str) -> list[dict[str, Any]]:
        model = self._model_for(collection)
        try:
            await self._ensure_schema()
            async with self.database.session() as session:
                result = await session.execute(select(model).order_by(model.created_at.asc()))
                rows = list(result.scalars().all())
        except (SQLAlchemyError, OSError) as exc:
            raise StorageError(collection, f"query failed: {exc}") from exc
        return [self._row_to_dict(model, row) for row in rows]

    async def count(self, collection: str) -> int:
        model = self._model_for(collection)
        try:
            await self._ensure_schema()
            async with self.database.session() as session:
                result = await session.execute(select(func.count()).select_from(model))
                return int(result.scalar_one())
        except (SQLAlchemyError, OSError) as exc:
            raise StorageError(collection, f"query failed: {exc}") from exc

    @staticmethod
    def _row_to_dict(model, row) -> dict[str, Any]:
        created_at = row.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        data: dict[str, Any] = {"id": row.id, "createdAt": created_at.isoformat()}
        for column in model.__table__.columns:
            if column.key in ("id", "created_at"):
                continue
            data[to_field_name(column.key)] = getattr(row, column.key)
        return data


class MirroredRecordStore(RecordStore):
    """Writes to a primary store, then copies the record to a mirror.

    The primary write decides the outcome; a failed mirror write is logged and
    the record stays durable in the primary.
    """

    def __init__(self, primary: RecordStore, mirror: RecordStore):
        self.primary = primary
        self.mirror = mirror

    async def startup(self) -> None:
        await self.primary.startup()
        await self.mirror.startup()

    async def close(self) -> None:
        await self.primary.close()
        await self.mirror.close()

    async def write(self, record: StoredRecord) -> None:
        await self.primary.write(record)
        try:
            await self.mirror.write(record)
        except StorageError as exc:
            logger.warning(
                "Mirror write failed",
                collection=record.collection,
                record_id=record.id,
                reason=exc.details.get("reason"),
            )

    async def list_records(self, collection: str) -> list[dict[str, Any]]:
        return await self.primary.list_records(collection)

    async def count(self, collection: str) -> int:
        return await self.primary.count(collection)


def build_record_store(backend: str, data_dir: Path | str, database_url: str) -> RecordStore:
    """Create the store selected by the ``storage_backend`` setting."""
    if backend == "json":
        return JsonFileRecordStore(data_dir)
    if backend == "sql":
        return SqlRecordStore(Database(database_url))
    if backend == "json+sql":
        return MirroredRecordStore(
            JsonFileRecordStore(data_dir),
            SqlRecordStore(Database(database_url)),
        )
    raise ValueError(f"Unknown storage backend: {backend!r}")
