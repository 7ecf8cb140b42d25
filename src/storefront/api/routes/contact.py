"""Contact-form route."""

from fastapi import APIRouter, Depends

from storefront.api.dependencies import get_contact_service
from storefront.api.models import ContactOut, ContactRequest
from storefront.domain.catalog import ContactService

router = APIRouter(tags=["contact"])


@router.post("/contact", response_model=ContactOut)
async def submit_contact(
    request_data: ContactRequest, service: ContactService = Depends(get_contact_service)
) -> ContactOut:
    message = service.submit(request_data.name, request_data.email, request_data.message)
    return ContactOut.model_validate(message)
