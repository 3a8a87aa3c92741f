"""Response envelopes shared by entity routers."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")


class DataResponse(BaseModel, Generic[DataT]):
    """Envelope wrapping a single entity or a list of entities."""

    data: DataT


class MessageResponse(BaseModel):
    """Envelope for operations that return only a status message."""

    message: str = Field(examples=["Task deleted successfully"])
