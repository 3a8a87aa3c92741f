"""Redacted entity snapshots used as audit before/after state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pydantic import BaseModel

SENSITIVE_FIELDS = frozenset({"password", "password_hash"})


def strip_sensitive(value: Any) -> Any:
    """Return a copy of `value` with credential keys removed at any depth."""
    if isinstance(value, dict):
        return {
            key: strip_sensitive(item)
            for key, item in value.items()
            if not (isinstance(key, str) and key.lower() in SENSITIVE_FIELDS)
        }
    if isinstance(value, (list, tuple)):
        return [strip_sensitive(item) for item in value]
    return value


def snapshot(model: BaseModel) -> dict[str, Any]:
    """Capture a JSON-representable, credential-free copy of an entity's state."""
    return strip_sensitive(model.model_dump(mode="json"))
