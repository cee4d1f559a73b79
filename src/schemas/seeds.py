"""Seed schemas: assistant extraction shapes and catalog records.

The extraction models (`SeedDraft`, `ExtractionResult`) double as the output
schema handed to the model, so their field types carry `BeforeValidator`
coercions. Whatever the model returns, validation produces a total record:
flags that are not real booleans become ``False``, counts fall back to their
defaults and missing lists become empty. See `services.ai.normalizer`.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Annotated, Any
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


MAX_MESSAGE_CHARS = 4000
MAX_PREVIOUS_CONTEXT_CHARS = 20000
MAX_NAME_CHARS = 255
MAX_LINEAGE_CHARS = 2000
MAX_GENERATION_CHARS = 50


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases while accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --------------------------------------------------------------------------- #
# Coercions for untrusted model output
# --------------------------------------------------------------------------- #
def _is_number(value: Any) -> bool:
    # bool is an int subclass; a flag in a count position is not a count
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value)


def _strict_flag(value: Any) -> bool:
    return value if isinstance(value, bool) else False


def _seed_count(value: Any) -> int:
    if not _is_number(value):
        return 0
    return max(0, int(value))


def _pack_quantity(value: Any) -> int:
    if not _is_number(value) or not value:
        return 1
    return max(1, int(value))


def _confidence(value: Any) -> float:
    if not _is_number(value):
        return 0.0
    return min(1.0, max(0.0, float(value)))


def _text(value: Any) -> str:
    # Names longer than a catalog column are cut rather than rejected
    return value.strip()[:MAX_NAME_CHARS] if isinstance(value, str) else ""


def _optional_text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list | tuple):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _seed_mapping(value: Any) -> Any:
    if isinstance(value, SeedDraft):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True)
    if isinstance(value, Mapping):
        return dict(value)
    return {}


StrictFlag = Annotated[bool, BeforeValidator(_strict_flag)]
SeedCount = Annotated[int, BeforeValidator(_seed_count), Field(ge=0)]
PackQuantity = Annotated[int, BeforeValidator(_pack_quantity), Field(ge=1)]
Confidence = Annotated[float, BeforeValidator(_confidence), Field(ge=0.0, le=1.0)]
DraftText = Annotated[str, BeforeValidator(_text)]
OptionalDraftText = Annotated[str | None, BeforeValidator(_optional_text)]
StringList = Annotated[list[str], BeforeValidator(_string_list)]


# --------------------------------------------------------------------------- #
# Assistant extraction shapes
# --------------------------------------------------------------------------- #
class SeedDraft(CamelModel):
    """Provisional seed record extracted by the assistant."""

    breeder: DraftText = Field(default="", description="Seed breeder / seed bank")
    strain: DraftText = Field(default="", description="Strain name")
    lineage: OptionalDraftText = Field(
        default=None, description="Parent lineage, e.g. 'Blueberry x Haze'"
    )
    generation: OptionalDraftText = Field(
        default=None, description="Filial generation, e.g. F1, S1, BX2"
    )
    num_seeds: SeedCount = Field(default=0, description="Seeds per pack")
    feminized: StrictFlag = Field(default=False, description="Feminized seeds")
    open: StrictFlag = Field(default=False, description="Pack has been opened")
    available: StrictFlag = Field(
        default=False, description="Available for trade or sharing"
    )
    is_multiple: StrictFlag = Field(
        default=False, description="More than one identical pack"
    )
    quantity: PackQuantity = Field(default=1, description="Number of packs")

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={"required": ["breeder", "strain"]},
    )


class ExtractionResult(CamelModel):
    """One assistant answer: the extracted seed plus follow-up guidance."""

    seed: Annotated[SeedDraft, BeforeValidator(_seed_mapping)] = Field(
        default_factory=SeedDraft
    )
    confidence: Confidence = Field(
        default=0.0, description="Model confidence in the extraction (0-1)"
    )
    missing_info: StringList = Field(
        default_factory=list, description="Field names still unknown"
    )
    suggested_questions: StringList = Field(
        default_factory=list, description="Questions to ask the user next"
    )

    model_config = ConfigDict(extra="ignore")


class ExtractionRequest(CamelModel):
    """Body of the `analyzeSeed` callable."""

    message: str = Field(..., max_length=MAX_MESSAGE_CHARS, description="User utterance")
    previous_context: str | None = Field(
        default=None,
        max_length=MAX_PREVIOUS_CONTEXT_CHARS,
        description="Opaque serialized prior turns, passed through verbatim",
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("message")
    @classmethod
    def _message_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("message must not be empty")
        return v

    def to_prompt_payload(self) -> str:
        """JSON body sent to the model; an absent context is omitted, not null."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


# --------------------------------------------------------------------------- #
# Catalog records
# --------------------------------------------------------------------------- #
def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class SeedBase(CamelModel):
    """Fields shared by the manual seed form and catalog responses."""

    breeder: str = Field(..., min_length=1, max_length=MAX_NAME_CHARS)
    strain: str = Field(..., min_length=1, max_length=MAX_NAME_CHARS)
    lineage: str = Field(default="", max_length=MAX_LINEAGE_CHARS)
    generation: str = Field(default="", max_length=MAX_GENERATION_CHARS)
    num_seeds: int = Field(default=0, ge=0)
    feminized: bool = False
    open: bool = False
    available: bool = False
    is_multiple: bool = False
    quantity: int = Field(default=1, ge=1)


class SeedCreate(SeedBase):
    """Manual add-seed form."""

    date_acquired: str = Field(default_factory=_now_iso)

    model_config = ConfigDict(extra="forbid")


class SeedUpdate(CamelModel):
    """Partial update; only provided fields are written."""

    breeder: str | None = Field(default=None, min_length=1, max_length=MAX_NAME_CHARS)
    strain: str | None = Field(default=None, min_length=1, max_length=MAX_NAME_CHARS)
    lineage: str | None = Field(default=None, max_length=MAX_LINEAGE_CHARS)
    generation: str | None = Field(default=None, max_length=MAX_GENERATION_CHARS)
    num_seeds: int | None = Field(default=None, ge=0)
    feminized: bool | None = None
    open: bool | None = None
    available: bool | None = None
    is_multiple: bool | None = None
    quantity: int | None = Field(default=None, ge=1)
    date_acquired: str | None = None

    model_config = ConfigDict(extra="forbid")


class CatalogSeed(SeedBase):
    """A committed catalog entry."""

    id: UUID
    date_acquired: str
    user_id: str | None = None
    # A committed draft may carry an empty breeder or strain
    breeder: str = Field(default="", max_length=MAX_NAME_CHARS)
    strain: str = Field(default="", max_length=MAX_NAME_CHARS)

    model_config = ConfigDict(from_attributes=True)
