"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
JSON field names are camelCase; Python attributes stay snake_case.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel

from storefront.domain.models import LogType

MOBILE_PATTERN = r"^\+?\d{10,15}$"


class ApiModel(BaseModel):
    """Base model: camelCase aliases, populated from dataclass attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Registration and authentication


class RegisterInitRequest(ApiModel):
    """Request model for registration step 1."""

    email: EmailStr


class RegisterVerifyRequest(ApiModel):
    """Request model for registration step 2."""

    email: EmailStr
    token: str = Field(..., min_length=6, description="Verification code from email")


class RegisterCompleteRequest(ApiModel):
    """Request model for registration step 3."""

    email: EmailStr
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterCompleteRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class LoginRequest(ApiModel):
    email: EmailStr
    password: str


class ForgotPasswordRequest(ApiModel):
    email: EmailStr


class ResetPasswordRequest(ApiModel):
    email: EmailStr
    token: str = Field(..., min_length=6)
    new_password: str = Field(..., min_length=6)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self) -> "ResetPasswordRequest":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class MessageResponse(ApiModel):
    message: str


class EmailMessageResponse(ApiModel):
    """Response model for registration init and verify."""

    message: str
    email: str


class AuthUser(ApiModel):
    email: str
    is_admin: bool


class SessionUser(AuthUser):
    id: int


class AuthResponse(ApiModel):
    """Response model for login and registration completion."""

    user: AuthUser


class SessionCheckResponse(ApiModel):
    user: SessionUser | None = None


class ErrorResponse(ApiModel):
    """Standard error response model."""

    message: str


# Users


class UserOut(ApiModel):
    """User as exposed over the API; never includes credentials."""

    id: int
    email: str
    display_name: str | None = None
    mobile_number: str = ""
    is_verified: bool
    is_admin: bool
    is_suspended: bool
    created_at: datetime | None = None


class ProfileUpdate(ApiModel):
    display_name: str | None = Field(None, max_length=100)
    mobile_number: str | None = Field(None, pattern=MOBILE_PATTERN)


class PreferencesOut(ApiModel):
    user_id: int
    email_notifications: bool
    order_updates: bool
    promotions: bool
    account_alerts: bool
    dark_mode: bool
    language: str
    currency: str


class PreferencesUpdate(ApiModel):
    email_notifications: bool | None = None
    order_updates: bool | None = None
    promotions: bool | None = None
    account_alerts: bool | None = None
    dark_mode: bool | None = None
    language: str | None = None
    currency: str | None = None


class AddressOut(ApiModel):
    id: int
    user_id: int
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    postal_code: str
    country: str
    is_primary: bool
    label: str
    phone: str | None = None
    created_at: datetime | None = None


class AddressCreate(ApiModel):
    address_line1: str = Field(..., min_length=1)
    address_line2: str | None = None
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)
    country: str = "India"
    is_primary: bool = False
    label: str = "Home"
    phone: str | None = None


class AddressUpdate(ApiModel):
    address_line1: str | None = Field(None, min_length=1)
    address_line2: str | None = None
    city: str | None = Field(None, min_length=1)
    state: str | None = Field(None, min_length=1)
    postal_code: str | None = Field(None, min_length=1)
    country: str | None = None
    is_primary: bool | None = None
    label: str | None = None
    phone: str | None = None


# Catalog and inventory


class ProductOut(ApiModel):
    id: int
    name: str
    description: str | None = None
    purchase_price: int
    price: int
    image_url: str
    category: str
    featured: bool
    stock: int
    min_stock: int | None = None
    tax: int
    unit: str | None = None
    barcode: str | None = None
    created_at: datetime | None = None


class ProductCreate(ApiModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    purchase_price: int = Field(0, ge=0)
    price: int = Field(..., ge=0)
    image_url: str = ""
    category: str = Field(..., min_length=1)
    featured: bool = False
    stock: int = Field(0, ge=0)
    min_stock: int = Field(5, ge=0)
    tax: int = Field(0, ge=0)
    unit: str | None = None
    barcode: str | None = None


class ProductUpdate(ApiModel):
    name: str | None = Field(None, min_length=1)
    description: str | None = None
    purchase_price: int | None = Field(None, ge=0)
    price: int | None = Field(None, ge=0)
    image_url: str | None = None
    category: str | None = Field(None, min_length=1)
    featured: bool | None = None
    min_stock: int | None = Field(None, ge=0)
    tax: int | None = Field(None, ge=0)
    unit: str | None = None
    barcode: str | None = None


class StockUpdateRequest(ApiModel):
    quantity: int = Field(..., description="Signed, nonzero stock change")
    note: str | None = None


class InventoryLogOut(ApiModel):
    id: int
    product_id: int
    quantity: int
    type: LogType
    note: str | None = None
    timestamp: datetime | None = None


class InventoryLogCreate(ApiModel):
    product_id: int
    quantity: int
    type: LogType
    note: str | None = None


class ProductEnvelope(ApiModel):
    product: ProductOut


class ProductsEnvelope(ApiModel):
    products: list[ProductOut]


class LogEnvelope(ApiModel):
    log: InventoryLogOut


class LogsEnvelope(ApiModel):
    logs: list[InventoryLogOut]


# Contact


class ContactRequest(ApiModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    message: str = Field(..., min_length=1)


class ContactOut(ApiModel):
    id: int
    name: str
    email: str
    message: str
