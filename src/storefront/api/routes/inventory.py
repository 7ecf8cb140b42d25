"""
Inventory routes - stock adjustment, ledger and low-stock report.

All endpoints require a logged-in session.
"""

from fastapi import APIRouter, Depends, Query, status

from storefront.api.dependencies import get_current_user, get_inventory_service
from storefront.api.models import (
    ErrorResponse,
    InventoryLogCreate,
    InventoryLogOut,
    LogEnvelope,
    LogsEnvelope,
    ProductEnvelope,
    ProductOut,
    ProductsEnvelope,
    StockUpdateRequest,
)
from storefront.domain.inventory import InventoryService

router = APIRouter(
    prefix="/inventory",
    tags=["inventory"],
    dependencies=[Depends(get_current_user)],
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
)


@router.get("/logs", response_model=LogsEnvelope)
async def list_logs(
    product_id: int | None = Query(None, alias="productId"),
    service: InventoryService = Depends(get_inventory_service),
) -> LogsEnvelope:
    """Ledger entries, most recent first, optionally for one product."""
    logs = service.get_logs(product_id)
    return LogsEnvelope(logs=[InventoryLogOut.model_validate(log) for log in logs])


@router.post("/logs", response_model=LogEnvelope, status_code=status.HTTP_201_CREATED)
async def create_log(
    request_data: InventoryLogCreate,
    service: InventoryService = Depends(get_inventory_service),
) -> LogEnvelope:
    entry = service.record_log(
        request_data.product_id, request_data.quantity, request_data.type, request_data.note
    )
    return LogEnvelope(log=InventoryLogOut.model_validate(entry))


@router.put(
    "/stock/{product_id}",
    response_model=ProductEnvelope,
    responses={
        400: {"model": ErrorResponse, "description": "Zero or invalid quantity"},
        404: {"model": ErrorResponse, "description": "Product not found"},
    },
    summary="Adjust product stock",
    description="Apply a signed quantity change. Stock never drops below zero; "
    "the ledger records the requested quantity.",
)
async def update_stock(
    product_id: int,
    request_data: StockUpdateRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> ProductEnvelope:
    product = service.adjust_stock(product_id, request_data.quantity, request_data.note)
    return ProductEnvelope(product=ProductOut.model_validate(product))


@router.get("/low-stock", response_model=ProductsEnvelope)
async def low_stock(
    threshold: int | None = Query(None, ge=0),
    service: InventoryService = Depends(get_inventory_service),
) -> ProductsEnvelope:
    products = service.get_low_stock_products(threshold)
    return ProductsEnvelope(products=[ProductOut.model_validate(p) for p in products])
