"""Append-only audit trail for entity mutations.

Every create/update/delete performed by an authenticated actor is described by
an `AuditRecord` and appended to a separate audit store (a Redis stream by
default). The write happens after the entity mutation has committed and is
best-effort: failures and timeouts are logged here and never reach the caller,
so a broken audit store cannot roll back or fail the request that triggered it.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

from redis import asyncio as redis_async

from app.core.config import settings
from app.core.logging import get_logger
from app.core.time import utcnow
from app.schemas.audit import AuditAction, AuditMeta, AuditRecord
from app.services.snapshots import strip_sensitive

if TYPE_CHECKING:
    from app.schemas.audit import Snapshot

logger = get_logger(__name__)


class AuditStore(Protocol):
    """Write path of a schema-flexible, append-only audit store."""

    async def append(self, document: dict[str, Any]) -> str:
        """Persist one audit document and return its store-generated id."""
        ...

    async def close(self) -> None:
        """Release any connections held by the store."""
        ...


class RedisStreamAuditStore:
    """Audit store backed by a Redis stream; the stream key is the namespace."""

    def __init__(
        self,
        client: redis_async.Redis,
        *,
        stream_key: str,
    ) -> None:
        self._client = client
        self._stream_key = stream_key

    @classmethod
    def from_url(
        cls,
        redis_url: str,
        *,
        stream_key: str,
        timeout_seconds: float,
    ) -> RedisStreamAuditStore:
        client = redis_async.Redis.from_url(
            redis_url,
            socket_timeout=timeout_seconds,
            socket_connect_timeout=timeout_seconds,
        )
        return cls(client, stream_key=stream_key)

    @property
    def stream_key(self) -> str:
        return self._stream_key

    async def append(self, document: dict[str, Any]) -> str:
        # Stream entries are flat string maps; snapshots travel as one JSON field.
        fields = {
            "user_id": str(document["user_id"]),
            "action": str(document["action"]),
            "entity": str(document["entity"]),
            "entity_id": str(document["entity_id"]),
            "timestamp": str(document["timestamp"]),
            "meta": json.dumps(document.get("meta") or {}, sort_keys=True),
        }
        entry_id = await self._client.xadd(self._stream_key, fields)
        if isinstance(entry_id, bytes):
            return entry_id.decode("utf-8")
        return str(entry_id)

    async def close(self) -> None:
        await self._client.aclose()


class AuditRecorder:
    """Build audit records and append them to an `AuditStore`, best-effort."""

    def __init__(self, store: AuditStore, *, timeout_seconds: float) -> None:
        self._store = store
        self._timeout_seconds = timeout_seconds
        self._last_timestamp: datetime | None = None

    @property
    def store(self) -> AuditStore:
        return self._store

    async def record_create(
        self,
        actor_id: str,
        entity_type: str,
        entity_id: str,
        after_state: Snapshot,
    ) -> AuditRecord | None:
        """Record that `entity_type/entity_id` was created with `after_state`."""
        return await self._record(
            AuditAction.CREATE,
            actor_id=actor_id,
            entity_type=entity_type,
            entity_id=entity_id,
            before_state=None,
            after_state=after_state,
        )

    async def record_update(
        self,
        actor_id: str,
        entity_type: str,
        entity_id: str,
        before_state: Snapshot,
        after_state: Snapshot,
    ) -> AuditRecord | None:
        """Record a change of `entity_type/entity_id` from `before_state` to `after_state`."""
        return await self._record(
            AuditAction.UPDATE,
            actor_id=actor_id,
            entity_type=entity_type,
            entity_id=entity_id,
            before_state=before_state,
            after_state=after_state,
        )

    async def record_delete(
        self,
        actor_id: str,
        entity_type: str,
        entity_id: str,
        before_state: Snapshot,
    ) -> AuditRecord | None:
        """Record that `entity_type/entity_id` was deleted; `before_state` is its last state."""
        return await self._record(
            AuditAction.DELETE,
            actor_id=actor_id,
            entity_type=entity_type,
            entity_id=entity_id,
            before_state=before_state,
            after_state=None,
        )

    def _next_timestamp(self) -> datetime:
        now = utcnow()
        if self._last_timestamp is not None and now < self._last_timestamp:
            now = self._last_timestamp
        self._last_timestamp = now
        return now

    async def _record(
        self,
        action: AuditAction,
        *,
        actor_id: str,
        entity_type: str,
        entity_id: str,
        before_state: Snapshot | None,
        after_state: Snapshot | None,
    ) -> AuditRecord | None:
        log_extra = {
            "audit_action": action.value,
            "entity": entity_type,
            "entity_id": entity_id,
            "actor_id": actor_id,
        }
        try:
            record = AuditRecord(
                user_id=actor_id,
                action=action,
                entity=entity_type,
                entity_id=entity_id,
                timestamp=self._next_timestamp(),
                meta=AuditMeta(
                    before=strip_sensitive(before_state) if before_state is not None else None,
                    after=strip_sensitive(after_state) if after_state is not None else None,
                ),
            )
            record_id = await asyncio.wait_for(
                self._store.append(record.to_document()),
                timeout=self._timeout_seconds,
            )
        except TimeoutError:
            logger.warning(
                "audit.record.failed",
                extra={**log_extra, "reason": "timeout", "timeout_seconds": self._timeout_seconds},
            )
            return None
        except Exception as exc:
            logger.warning(
                "audit.record.failed",
                extra={**log_extra, "reason": exc.__class__.__name__, "error": str(exc)[:300]},
                exc_info=True,
            )
            return None

        logger.info("audit.record.appended", extra={**log_extra, "record_id": record_id})
        return record.model_copy(update={"id": record_id})

    async def close(self) -> None:
        await self._store.close()


_recorder: AuditRecorder | None = None


def build_audit_recorder() -> AuditRecorder:
    """Create a recorder writing to the configured Redis stream."""
    store = RedisStreamAuditStore.from_url(
        settings.audit_redis_url,
        stream_key=settings.audit_stream_key,
        timeout_seconds=settings.audit_write_timeout_seconds,
    )
    return AuditRecorder(store, timeout_seconds=settings.audit_write_timeout_seconds)


async def get_audit_recorder() -> AuditRecorder:
    """Return the process-wide recorder, creating it on first use.

    Resolved on the event loop, so the lazy creation never runs concurrently.
    """
    global _recorder
    if _recorder is None:
        _recorder = build_audit_recorder()
        logger.info(
            "audit.recorder.initialized stream_key=%s timeout_seconds=%s",
            settings.audit_stream_key,
            settings.audit_write_timeout_seconds,
        )
    return _recorder


async def close_audit_recorder() -> None:
    """Close the process-wide recorder's store connections, if it was created."""
    global _recorder
    if _recorder is None:
        return
    recorder, _recorder = _recorder, None
    try:
        await recorder.close()
    except Exception:
        logger.warning("audit.recorder.close_failed", exc_info=True)
