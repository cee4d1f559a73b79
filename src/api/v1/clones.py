"""Clone catalog endpoints."""

from uuid import UUID

from fastapi import APIRouter, Response, status

from dependencies.assistant import CloneRepositoryDep
from schemas.api import ApiResponse
from schemas.clones import CatalogClone, CloneCreate, CloneUpdate


router = APIRouter(prefix="/clones", tags=["clones"])


@router.get("", summary="List clones", response_model=ApiResponse[list[CatalogClone]])
async def list_clones(
    repository: CloneRepositoryDep,
) -> ApiResponse[list[CatalogClone]]:
    clones = await repository.load()
    return ApiResponse(data=clones, message="Clones retrieved successfully")


@router.post(
    "",
    summary="Add a clone",
    response_model=ApiResponse[CatalogClone],
    status_code=status.HTTP_201_CREATED,
)
async def create_clone(
    payload: CloneCreate, repository: CloneRepositoryDep
) -> ApiResponse[CatalogClone]:
    clone = await repository.append(payload)
    return ApiResponse(data=clone, message="Clone added to your catalog!")


@router.patch(
    "/{clone_id}", summary="Update a clone", response_model=ApiResponse[CatalogClone]
)
async def update_clone(
    clone_id: UUID, payload: CloneUpdate, repository: CloneRepositoryDep
) -> ApiResponse[CatalogClone]:
    clone = await repository.update(clone_id, payload)
    return ApiResponse(data=clone, message="Clone updated successfully")


@router.delete(
    "/{clone_id}", summary="Delete a clone", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_clone(clone_id: UUID, repository: CloneRepositoryDep) -> Response:
    await repository.remove(clone_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
