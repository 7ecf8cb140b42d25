"""Self-service account routes: profile, preferences, addresses."""

from fastapi import APIRouter, Depends, status

from storefront.api.dependencies import get_account_service, get_current_user
from storefront.api.models import (
    AddressCreate,
    AddressOut,
    AddressUpdate,
    ErrorResponse,
    MessageResponse,
    PreferencesOut,
    PreferencesUpdate,
    ProfileUpdate,
    UserOut,
)
from storefront.domain.accounts import AccountService
from storefront.domain.models import User

router = APIRouter(
    prefix="/users",
    tags=["users"],
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
)


@router.get("/profile", response_model=UserOut)
async def get_profile(user: User = Depends(get_current_user)) -> UserOut:
    return UserOut.model_validate(user)


@router.put("/profile", response_model=UserOut)
async def update_profile(
    request_data: ProfileUpdate,
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
) -> UserOut:
    changes = request_data.model_dump(exclude_unset=True, exclude_none=True)
    return UserOut.model_validate(service.update_profile(user.id, **changes))


@router.get("/preferences", response_model=PreferencesOut)
async def get_preferences(
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
) -> PreferencesOut:
    return PreferencesOut.model_validate(service.get_preferences(user.id))


@router.put("/preferences", response_model=PreferencesOut)
async def update_preferences(
    request_data: PreferencesUpdate,
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
) -> PreferencesOut:
    changes = request_data.model_dump(exclude_unset=True, exclude_none=True)
    return PreferencesOut.model_validate(service.update_preferences(user.id, **changes))


@router.get("/addresses", response_model=list[AddressOut])
async def list_addresses(
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
) -> list[AddressOut]:
    return [AddressOut.model_validate(a) for a in service.list_addresses(user.id)]


@router.post("/addresses", response_model=AddressOut, status_code=status.HTTP_201_CREATED)
async def add_address(
    request_data: AddressCreate,
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
) -> AddressOut:
    return AddressOut.model_validate(service.add_address(user.id, **request_data.model_dump()))


@router.put(
    "/addresses/{address_id}",
    response_model=AddressOut,
    responses={404: {"model": ErrorResponse, "description": "Address not found"}},
)
async def update_address(
    address_id: int,
    request_data: AddressUpdate,
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
) -> AddressOut:
    changes = request_data.model_dump(exclude_unset=True, exclude_none=True)
    return AddressOut.model_validate(service.update_address(user.id, address_id, **changes))


@router.delete(
    "/addresses/{address_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse, "description": "Address not found"}},
)
async def delete_address(
    address_id: int,
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    service.delete_address(user.id, address_id)
    return MessageResponse(message="Address deleted")
