"""Commit gate: the only path from an assistant extraction to the catalog."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from core.error_handler import StructuredLogger
from schemas.seeds import (
    MAX_GENERATION_CHARS,
    MAX_LINEAGE_CHARS,
    CatalogSeed,
    ExtractionResult,
    SeedDraft,
)
from services.catalog import SeedRepository


logger = StructuredLogger(__name__)


class CommitGate:
    """Turns an explicit user confirmation into a persisted `CatalogSeed`."""

    def __init__(self, repository: SeedRepository) -> None:
        self._repository = repository

    async def commit(
        self, result: ExtractionResult | SeedDraft, owner_id: str
    ) -> CatalogSeed:
        """Persist the extracted seed as a new catalog entry.

        Every call creates a new record with a fresh id, even for the same
        extraction. Missing lineage and generation are stored as empty strings
        and overlong ones are cut to the catalog column widths.

        Raises:
            CatalogWriteError: The store rejected the write. The caller's draft
                is untouched, so the commit can simply be retried.
        """
        draft = result.seed if isinstance(result, ExtractionResult) else result
        seed = CatalogSeed(
            id=uuid4(),
            date_acquired=datetime.now(UTC).isoformat(),
            user_id=owner_id,
            breeder=draft.breeder,
            strain=draft.strain,
            lineage=(draft.lineage or "")[:MAX_LINEAGE_CHARS],
            generation=(draft.generation or "")[:MAX_GENERATION_CHARS],
            num_seeds=draft.num_seeds,
            feminized=draft.feminized,
            open=draft.open,
            available=draft.available,
            is_multiple=draft.is_multiple,
            quantity=draft.quantity,
        )
        stored = await self._repository.append(seed)
        logger.info("Seed committed from assistant", seed_id=str(stored.id))
        return stored
