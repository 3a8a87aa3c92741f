"""Audit record schemas and the wire format persisted to the audit store."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import to_jsonable_python

RUNTIME_ANNOTATION_TYPES = (datetime,)

Snapshot = dict[str, Any]


class AuditAction(str, Enum):
    """Mutation verbs recorded in the audit trail."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class AuditMeta(BaseModel):
    """Before/after state captured around a mutation."""

    model_config = ConfigDict(frozen=True)

    before: Snapshot | None = Field(
        default=None,
        description="Redacted entity state prior to the action; absent for CREATE.",
    )
    after: Snapshot | None = Field(
        default=None,
        description="Redacted entity state after the action; absent for DELETE.",
    )


class AuditRecord(BaseModel):
    """Immutable record of one entity mutation."""

    model_config = ConfigDict(frozen=True)

    id: str | None = Field(
        default=None,
        description="Store-generated identifier; unset until the record is appended.",
        examples=["1718000000000-0"],
    )
    user_id: str = Field(description="Authenticated actor that triggered the mutation.")
    action: AuditAction
    entity: str = Field(
        description="Logical collection affected.",
        examples=["users", "tasks", "positions", "user_positions"],
    )
    entity_id: str
    timestamp: datetime = Field(description="Assigned by the recorder at write time.")
    meta: AuditMeta = Field(default_factory=AuditMeta)

    def meta_document(self) -> dict[str, Any]:
        """Return `meta` with only the snapshots that are present."""
        meta: dict[str, Any] = {}
        if self.meta.before is not None:
            meta["before"] = to_jsonable_python(self.meta.before)
        if self.meta.after is not None:
            meta["after"] = to_jsonable_python(self.meta.after)
        return meta

    def to_document(self) -> dict[str, Any]:
        """Return the persisted wire shape, omitting absent `before`/`after` keys."""
        document: dict[str, Any] = {
            "user_id": self.user_id,
            "action": self.action.value,
            "entity": self.entity,
            "entity_id": self.entity_id,
            "timestamp": self.timestamp.isoformat(),
            "meta": self.meta_document(),
        }
        if self.id is not None:
            document["id"] = self.id
        return document
