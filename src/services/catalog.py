"""Owner-scoped catalog repositories for seeds and clones.

The assistant and the catalog routers depend on the `SeedRepository` /
`CloneRepository` protocols; the SQLAlchemy implementations below bind one
session to one authenticated owner so no query can reach another user's rows.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import CatalogWriteError, CloneNotFoundError, SeedNotFoundError
from models.clones import Clone
from models.seeds import Seed
from schemas.clones import CatalogClone, CloneCreate, CloneUpdate
from schemas.seeds import CatalogSeed, SeedUpdate


logger = logging.getLogger(__name__)


class SeedRepository(Protocol):
    """Persistence for committed seeds of a single owner."""

    async def load(self) -> list[CatalogSeed]:
        """Return the owner's seeds, newest first."""
        ...

    async def append(self, seed: CatalogSeed) -> CatalogSeed:
        """Store a new seed record as given (id and date included)."""
        ...

    async def update(self, seed_id: UUID, changes: SeedUpdate) -> CatalogSeed:
        """Apply a partial update; raises `SeedNotFoundError`."""
        ...

    async def remove(self, seed_id: UUID) -> None:
        """Delete a seed; raises `SeedNotFoundError`."""
        ...


class CloneRepository(Protocol):
    """Persistence for clones of a single owner."""

    async def load(self) -> list[CatalogClone]: ...

    async def append(self, clone: CloneCreate) -> CatalogClone: ...

    async def update(self, clone_id: UUID, changes: CloneUpdate) -> CatalogClone: ...

    async def remove(self, clone_id: UUID) -> None: ...


async def _flush(db: AsyncSession, action: str) -> None:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error(f"Catalog {action} failed: {type(exc).__name__}")
        raise CatalogWriteError(f"Could not {action} catalog entry") from exc


class SqlSeedRepository:
    """`SeedRepository` over the `seeds` table."""

    def __init__(self, db: AsyncSession, owner_id: str) -> None:
        self._db = db
        self._owner_id = owner_id

    async def _get(self, seed_id: UUID) -> Seed:
        result = await self._db.execute(
            select(Seed).where(Seed.id == seed_id, Seed.user_id == self._owner_id)
        )
        seed = result.scalar_one_or_none()
        if seed is None:
            raise SeedNotFoundError(f"Seed {seed_id} not found")
        return seed

    async def load(self) -> list[CatalogSeed]:
        result = await self._db.execute(
            select(Seed)
            .where(Seed.user_id == self._owner_id)
            .order_by(Seed.created_at.desc())
        )
        return [CatalogSeed.model_validate(row) for row in result.scalars().all()]

    async def append(self, seed: CatalogSeed) -> CatalogSeed:
        data: dict[str, Any] = seed.model_dump(exclude={"user_id"})
        row = Seed(user_id=self._owner_id, **data)
        self._db.add(row)
        await _flush(self._db, "create")
        await self._db.refresh(row)
        logger.info(f"Seed {row.id} added to catalog")
        return CatalogSeed.model_validate(row)

    async def update(self, seed_id: UUID, changes: SeedUpdate) -> CatalogSeed:
        row = await self._get(seed_id)
        for field, value in changes.model_dump(exclude_unset=True).items():
            setattr(row, field, value)
        await _flush(self._db, "update")
        await self._db.refresh(row)
        return CatalogSeed.model_validate(row)

    async def remove(self, seed_id: UUID) -> None:
        row = await self._get(seed_id)
        await self._db.delete(row)
        await _flush(self._db, "delete")


class SqlCloneRepository:
    """`CloneRepository` over the `clones` table."""

    def __init__(self, db: AsyncSession, owner_id: str) -> None:
        self._db = db
        self._owner_id = owner_id

    async def _get(self, clone_id: UUID) -> Clone:
        result = await self._db.execute(
            select(Clone).where(Clone.id == clone_id, Clone.user_id == self._owner_id)
        )
        clone = result.scalar_one_or_none()
        if clone is None:
            raise CloneNotFoundError(f"Clone {clone_id} not found")
        return clone

    async def load(self) -> list[CatalogClone]:
        result = await self._db.execute(
            select(Clone)
            .where(Clone.user_id == self._owner_id)
            .order_by(Clone.created_at.desc())
        )
        return [CatalogClone.model_validate(row) for row in result.scalars().all()]

    async def append(self, clone: CloneCreate) -> CatalogClone:
        data = clone.model_dump(mode="json")
        row = Clone(user_id=self._owner_id, **data)
        self._db.add(row)
        await _flush(self._db, "create")
        await self._db.refresh(row)
        return CatalogClone.model_validate(row)

    async def update(self, clone_id: UUID, changes: CloneUpdate) -> CatalogClone:
        row = await self._get(clone_id)
        for field, value in changes.model_dump(exclude_unset=True, mode="json").items():
            setattr(row, field, value)
        await _flush(self._db, "update")
        await self._db.refresh(row)
        return CatalogClone.model_validate(row)

    async def remove(self, clone_id: UUID) -> None:
        row = await self._get(clone_id)
        await self._db.delete(row)
        await _flush(self._db, "delete")
