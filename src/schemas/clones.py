"""Clone catalog schemas."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from uuid import UUID

from pydantic import ConfigDict, Field

from .seeds import CamelModel


class CloneSex(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class CloneBase(CamelModel):
    breeder: str = Field(..., min_length=1, max_length=255)
    strain: str = Field(..., min_length=1, max_length=255)
    cut_name: str = Field(default="", max_length=255, description="Named cut / keeper")
    generation: str = Field(default="", max_length=50)
    sex: CloneSex = CloneSex.FEMALE
    breeder_cut: bool = Field(default=False, description="Cut sourced from breeder")
    available: bool = False


class CloneCreate(CloneBase):
    date_acquired: str = Field(default_factory=_now_iso)

    model_config = ConfigDict(extra="forbid")


class CloneUpdate(CamelModel):
    breeder: str | None = Field(default=None, min_length=1, max_length=255)
    strain: str | None = Field(default=None, min_length=1, max_length=255)
    cut_name: str | None = Field(default=None, max_length=255)
    generation: str | None = Field(default=None, max_length=50)
    sex: CloneSex | None = None
    breeder_cut: bool | None = None
    available: bool | None = None
    date_acquired: str | None = None

    model_config = ConfigDict(extra="forbid")


class CatalogClone(CloneBase):
    id: UUID
    date_acquired: str
    user_id: str | None = None

    model_config = ConfigDict(from_attributes=True)
