from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.base import CamelModel

T = TypeVar("T")


class StoreResult(BaseModel, Generic[T]):
    """Outcome of a snapshot store call: failures are reported, not raised."""

    success: bool
    data: T | None = None
    message: str = ""


class SnapshotCreate(CamelModel):
    note: str = Field("", max_length=500)


class SnapshotMeta(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime | None = None
    note: str = ""
