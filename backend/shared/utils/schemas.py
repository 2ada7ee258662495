"""
Shared Pydantic schemas used across the application.

Money and VAT rates are Decimal and serialize as strings ("206.50").
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, EmailStr

from shared.config.constants import Limits


# =============================================================================
# Common Types
# =============================================================================

Role = Literal["ADMIN", "CHEF", "WAITER", "CASHIER"]


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str


# =============================================================================
# Authentication Schemas
# =============================================================================


class LoginRequest(BaseModel):
    """Login request body."""

    email: EmailStr
    password: str


class UserInfo(BaseModel):
    """Basic user information included in auth responses."""

    id: int
    name: str
    email: str
    tenant_id: int
    role: Role
    restaurant_ids: list[int]


class LoginResponse(BaseModel):
    """Login response with JWT token."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int  # seconds
    user: UserInfo


class RegisterUserRequest(BaseModel):
    """Admin-only staff registration."""

    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    role: Role


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8, max_length=128)


# =============================================================================
# Table Session Schemas
# =============================================================================


class OpenSessionRequest(BaseModel):
    """Body sent by the QR landing page."""

    tenant_id: int = Field(gt=0)
    restaurant_id: int = Field(gt=0)
    table_id: int = Field(gt=0)


class TableBrief(BaseModel):
    id: int
    name: str
    code: str

    class Config:
        from_attributes = True


class RestaurantBrief(BaseModel):
    id: int
    name: str
    currency: str

    class Config:
        from_attributes = True


class OpenSessionResponse(BaseModel):
    """Response when a table session is opened."""

    session_id: int
    token: str
    expires_at: datetime
    table: TableBrief
    restaurant: RestaurantBrief


class CloseSessionRequest(BaseModel):
    session_id: int = Field(gt=0)


class CloseSessionResponse(BaseModel):
    session_id: int
    active: bool
    closed_at: datetime | None = None


class TableLinkResponse(BaseModel):
    """Target URL encoded in a table's QR code."""

    table_id: int
    code: str
    url: str


# =============================================================================
# Menu Schemas
# =============================================================================


class MenuItemOutput(BaseModel):
    id: int
    category_id: int
    name: str
    description: str | None = None
    price: Decimal
    vat_rate: Decimal
    station: str

    class Config:
        from_attributes = True


class MenuCategoryOutput(BaseModel):
    id: int
    name: str
    sort: int

    class Config:
        from_attributes = True


class MenuCategoryWithItems(MenuCategoryOutput):
    items: list[MenuItemOutput] = Field(default_factory=list)


class MenuOutput(BaseModel):
    """Complete active menu of a restaurant."""

    restaurant: RestaurantBrief
    categories: list[MenuCategoryWithItems]


# =============================================================================
# Order Schemas
# =============================================================================


class CartLine(BaseModel):
    """A single line of a cart."""

    menu_item_id: int
    qty: int = Field(ge=Limits.MIN_QUANTITY, le=Limits.MAX_QUANTITY)
    notes: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)


class CreateOrderRequest(BaseModel):
    items: list[CartLine]


class OrderItemOutput(BaseModel):
    id: int
    menu_item_id: int
    name: str
    station: str
    qty: int
    unit_price: Decimal
    vat_rate: Decimal
    notes: str | None = None
    status: str
    version: int

    class Config:
        from_attributes = True


class OrderOutput(BaseModel):
    id: int
    restaurant_id: int
    table_id: int
    table_session_id: int
    status: str
    subtotal: Decimal
    vat_total: Decimal
    grand_total: Decimal
    version: int
    created_at: datetime
    closed_at: datetime | None = None
    items: list[OrderItemOutput] = Field(default_factory=list)

    class Config:
        from_attributes = True


class UpdateStatusRequest(BaseModel):
    """
    Status change for orders, order items and waiter calls.

    `status` is validated by the domain service so unknown values surface
    as an invalid-state error rather than a schema error.
    """

    status: str
    expected_version: int | None = Field(default=None, ge=1)


# =============================================================================
# Waiter Call Schemas
# =============================================================================


class CreateWaiterCallRequest(BaseModel):
    type: str
    note: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)


class WaiterCallOutput(BaseModel):
    id: int
    restaurant_id: int
    table_id: int
    type: str
    note: str | None = None
    status: str
    assigned_waiter_id: int | None = None
    version: int
    created_at: datetime
    acknowledged_at: datetime | None = None
    completed_at: datetime | None = None

    class Config:
        from_attributes = True


# =============================================================================
# Admin Schemas
# =============================================================================


class RestaurantCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    address: str | None = Field(default=None, max_length=500)
    currency: str = Field(default="TRY", min_length=3, max_length=3)


class RestaurantOutput(BaseModel):
    id: int
    tenant_id: int
    name: str
    address: str | None = None
    currency: str

    class Config:
        from_attributes = True


class TableCreate(BaseModel):
    code: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=100)


class TableOutput(BaseModel):
    id: int
    restaurant_id: int
    code: str
    name: str
    is_active: bool

    class Config:
        from_attributes = True


class ActiveFlagUpdate(BaseModel):
    """Toggle for tables and users."""

    is_active: bool


class UserOutput(BaseModel):
    id: int
    tenant_id: int
    name: str
    email: str
    role: Role
    is_active: bool

    class Config:
        from_attributes = True
