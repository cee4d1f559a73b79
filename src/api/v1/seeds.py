"""Seed catalog endpoints (manual entry and management)."""

from uuid import UUID, uuid4

from fastapi import APIRouter, Response, status

from dependencies.assistant import SeedRepositoryDep
from schemas.api import ApiResponse
from schemas.seeds import CatalogSeed, SeedCreate, SeedUpdate


router = APIRouter(prefix="/seeds", tags=["seeds"])


@router.get(
    "",
    summary="List seeds",
    response_model=ApiResponse[list[CatalogSeed]],
    description="List every seed in the authenticated user's catalog, newest first.",
)
async def list_seeds(repository: SeedRepositoryDep) -> ApiResponse[list[CatalogSeed]]:
    seeds = await repository.load()
    return ApiResponse(data=seeds, message="Seeds retrieved successfully")


@router.post(
    "",
    summary="Add a seed",
    response_model=ApiResponse[CatalogSeed],
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Seed added"},
        422: {"description": "Invalid seed data"},
        503: {"description": "Catalog store unavailable"},
    },
)
async def create_seed(
    payload: SeedCreate, repository: SeedRepositoryDep
) -> ApiResponse[CatalogSeed]:
    """Add a seed from the manual form. Breeder and strain are required here."""
    seed = CatalogSeed(id=uuid4(), **payload.model_dump())
    stored = await repository.append(seed)
    return ApiResponse(data=stored, message="Seed added to your catalog!")


@router.patch(
    "/{seed_id}",
    summary="Update a seed",
    response_model=ApiResponse[CatalogSeed],
)
async def update_seed(
    seed_id: UUID, payload: SeedUpdate, repository: SeedRepositoryDep
) -> ApiResponse[CatalogSeed]:
    seed = await repository.update(seed_id, payload)
    return ApiResponse(data=seed, message="Seed updated successfully")


@router.delete(
    "/{seed_id}", summary="Delete a seed", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_seed(seed_id: UUID, repository: SeedRepositoryDep) -> Response:
    await repository.remove(seed_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
