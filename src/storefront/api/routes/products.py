"""Public catalog routes."""

from fastapi import APIRouter, Depends

from storefront.api.dependencies import get_catalog_service
from storefront.api.models import ProductOut
from storefront.domain.catalog import CatalogService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=list[ProductOut])
async def list_products(service: CatalogService = Depends(get_catalog_service)) -> list[ProductOut]:
    return [ProductOut.model_validate(p) for p in service.list_products()]


@router.get("/featured", response_model=list[ProductOut])
async def list_featured(service: CatalogService = Depends(get_catalog_service)) -> list[ProductOut]:
    return [ProductOut.model_validate(p) for p in service.list_featured()]


@router.get("/category/{category}", response_model=list[ProductOut])
async def list_by_category(
    category: str, service: CatalogService = Depends(get_catalog_service)
) -> list[ProductOut]:
    return [ProductOut.model_validate(p) for p in service.list_by_category(category)]
