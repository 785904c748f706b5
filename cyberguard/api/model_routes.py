from fastapi import APIRouter

from cyberguard.provider.catalog import list_catalog
from cyberguard.schemas import CatalogModel, HealthResponse

router = APIRouter(tags=["system"])


@router.get("/models", response_model=list[CatalogModel])
async def list_models() -> list[CatalogModel]:
    return list_catalog()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


__all__ = ["router"]
