"""
Admin routes - user management and product administration.

Every endpoint requires a logged-in administrator.
"""

from fastapi import APIRouter, Depends, status

from storefront.api.dependencies import get_admin_service, get_catalog_service, require_admin
from storefront.api.models import (
    ErrorResponse,
    MessageResponse,
    ProductCreate,
    ProductOut,
    ProductUpdate,
    UserOut,
)
from storefront.domain.accounts import AdminService
from storefront.domain.catalog import CatalogService

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin access required"},
    },
)


@router.get("/users", response_model=list[UserOut])
async def list_users(service: AdminService = Depends(get_admin_service)) -> list[UserOut]:
    return [UserOut.model_validate(u) for u in service.list_users()]


@router.post(
    "/users/{user_id}/toggle-suspension",
    response_model=UserOut,
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
async def toggle_suspension(
    user_id: int, service: AdminService = Depends(get_admin_service)
) -> UserOut:
    return UserOut.model_validate(service.toggle_suspension(user_id))


@router.post(
    "/users/{user_id}/toggle-admin",
    response_model=UserOut,
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
async def toggle_admin(user_id: int, service: AdminService = Depends(get_admin_service)) -> UserOut:
    return UserOut.model_validate(service.toggle_admin(user_id))


@router.post("/products", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
async def create_product(
    request_data: ProductCreate, service: CatalogService = Depends(get_catalog_service)
) -> ProductOut:
    return ProductOut.model_validate(service.create_product(**request_data.model_dump()))


@router.put(
    "/products/{product_id}",
    response_model=ProductOut,
    responses={404: {"model": ErrorResponse, "description": "Product not found"}},
)
async def update_product(
    product_id: int,
    request_data: ProductUpdate,
    service: CatalogService = Depends(get_catalog_service),
) -> ProductOut:
    changes = request_data.model_dump(exclude_unset=True, exclude_none=True)
    return ProductOut.model_validate(service.update_product(product_id, **changes))


@router.delete(
    "/products/{product_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse, "description": "Product not found"}},
)
async def delete_product(
    product_id: int, service: CatalogService = Depends(get_catalog_service)
) -> MessageResponse:
    service.delete_product(product_id)
    return MessageResponse(message="Product deleted")
