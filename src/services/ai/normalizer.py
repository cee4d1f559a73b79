"""Shape coercion for untrusted model output.

`normalize` is total: any input produces a complete `ExtractionResult`. The
rules live on the schema fields in `schemas.seeds` so that agent output, stream
partials and request bodies share a single coercion path.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from schemas.seeds import ExtractionResult, SeedDraft


def _as_mapping(raw: Any) -> dict[str, Any]:
    if isinstance(raw, BaseModel):
        return raw.model_dump(by_alias=True)
    if isinstance(raw, Mapping):
        return dict(raw)
    return {}


def normalize(raw: Any) -> ExtractionResult:
    """Coerce a raw model response into an `ExtractionResult`.

    Booleans must be real booleans, counts fall back to ``0`` (seeds) or ``1``
    (packs) and lists default to empty. Never raises for malformed input.
    """
    if isinstance(raw, ExtractionResult):
        return raw
    return ExtractionResult.model_validate(_as_mapping(raw))


def merge_drafts(current: SeedDraft, update: SeedDraft) -> SeedDraft:
    """Fold a newer extraction into the running draft.

    Text fields are replaced only by non-empty values; flags and counts from
    the newer extraction always win.
    """
    merged = current.model_dump()
    for name, value in update.model_dump().items():
        if isinstance(value, str) or value is None:
            if value:
                merged[name] = value
        else:
            merged[name] = value
    return SeedDraft.model_validate(merged)
