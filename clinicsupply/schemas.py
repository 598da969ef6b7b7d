from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict


class Role(str, Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    STAFF = "STAFF"


class OrderStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class SettingsType(str, Enum):
    GLOBAL = "global"
    CLINIC = "clinic"


class CamelModel(BaseModel):
    """Python attributes in snake_case, wire/store fields in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def reject_null(cls, v):
    """Update payloads may leave a required field out, but not set it to null."""
    if v is None:
        raise ValueError("may not be null")
    return v


# -------------------- Entities --------------------

class User(CamelModel):
    id: str
    email: str
    name: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Role
    clinic_id: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Clinic(CamelModel):
    id: str
    name: str
    address: str = ""
    phone: str = ""
    email: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Product(CamelModel):
    id: str
    name: str
    description: str = ""
    category: str
    sku: str
    price: float = 0.0
    unit: str = "each"
    min_stock: int = 0
    quantity: int = 0
    manufacturer: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderItem(CamelModel):
    product_id: str
    name: str = ""
    quantity: int
    price: float


class Order(CamelModel):
    id: str
    clinic_id: str
    user_id: str
    status: OrderStatus = OrderStatus.PENDING
    items: List[OrderItem] = []
    total: float = 0.0
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TemplateItem(CamelModel):
    product_id: str
    name: str = ""
    default_quantity: int
    price: float = 0.0


class OrderTemplate(CamelModel):
    id: str
    clinic_id: str
    name: str
    description: str = ""
    items: List[TemplateItem] = []
    last_used: Optional[datetime] = None
    frequency: Optional[int] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Settings(CamelModel):
    id: str
    type: SettingsType
    owner_id: Optional[str] = None
    config: Dict[str, Any] = {}
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# -------------------- Create / update payloads --------------------

class UserCreate(CamelModel):
    id: Optional[UUID] = None
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    role: Role = Role.STAFF
    clinic_id: Optional[UUID] = None
    is_active: bool = True
    password: Optional[str] = Field(default=None, min_length=6)


class UserUpdate(CamelModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    role: Optional[Role] = None
    clinic_id: Optional[UUID] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(default=None, min_length=6)

    # firstName, lastName and clinicId may be cleared
    not_null = field_validator("email", "name", "role", "is_active", "password", mode="before")(reject_null)


class StatusToggle(CamelModel):
    is_active: bool


class ClinicCreate(CamelModel):
    id: Optional[UUID] = None
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    is_active: bool = True


class ClinicUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    is_active: Optional[bool] = None

    not_null = field_validator("name", "address", "phone", "is_active", mode="before")(reject_null)


class ProductCreate(CamelModel):
    id: Optional[UUID] = None
    name: str = Field(..., min_length=1)
    description: str = ""
    category: str = Field(..., min_length=1)
    sku: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    unit: str = Field(..., min_length=1)
    min_stock: int = Field(default=0, ge=0)
    quantity: int = Field(default=0, ge=0)
    manufacturer: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1)
    sku: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = Field(default=None, min_length=1)
    min_stock: Optional[int] = Field(default=None, ge=0)
    quantity: Optional[int] = Field(default=None, ge=0)
    manufacturer: Optional[str] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None

    not_null = field_validator(
        "name", "description", "category", "sku", "price", "unit", "min_stock", "quantity", "is_active",
        mode="before",
    )(reject_null)


class StockUpdate(CamelModel):
    quantity: int = Field(..., ge=0)


class OrderItemIn(CamelModel):
    product_id: UUID
    name: str = ""
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0)


class OrderCreate(CamelModel):
    id: Optional[UUID] = None
    clinic_id: UUID
    # defaults to the caller when omitted
    user_id: Optional[UUID] = None
    status: OrderStatus = OrderStatus.PENDING
    items: List[OrderItemIn] = Field(..., min_length=1)
    notes: Optional[str] = None


class OrderUpdate(CamelModel):
    clinic_id: Optional[UUID] = None
    status: Optional[OrderStatus] = None
    items: Optional[List[OrderItemIn]] = Field(default=None, min_length=1)
    notes: Optional[str] = None

    not_null = field_validator("clinic_id", "status", "items", mode="before")(reject_null)


class OrderStatusUpdate(CamelModel):
    status: OrderStatus


class TemplateItemIn(CamelModel):
    product_id: UUID
    name: str = ""
    default_quantity: int = Field(..., ge=1)
    price: float = Field(default=0.0, ge=0)


class TemplateCreate(CamelModel):
    id: Optional[UUID] = None
    clinic_id: UUID
    name: str = Field(..., min_length=1)
    description: str = ""
    items: List[TemplateItemIn] = Field(..., min_length=1)
    last_used: Optional[datetime] = None
    frequency: Optional[int] = Field(default=None, ge=0)


class TemplateUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    items: Optional[List[TemplateItemIn]] = Field(default=None, min_length=1)
    last_used: Optional[datetime] = None
    frequency: Optional[int] = Field(default=None, ge=0)

    not_null = field_validator("name", "description", "items", mode="before")(reject_null)


class SettingsCreate(CamelModel):
    id: Optional[UUID] = None
    type: SettingsType
    owner_id: Optional[UUID] = None
    config: Dict[str, Any] = {}


class SettingsUpdate(CamelModel):
    type: Optional[SettingsType] = None
    owner_id: Optional[UUID] = None
    config: Optional[Dict[str, Any]] = None

    not_null = field_validator("type", "config", mode="before")(reject_null)


# -------------------- Views --------------------

class Identity(CamelModel):
    id: str
    email: str
    role: Role
    clinic_id: Optional[str] = None


class InventoryItem(Product):
    reorder_point: int
    status: str


class MostOrderedItem(CamelModel):
    item_id: str
    item_name: str
    quantity: int


class ClinicInventoryStats(CamelModel):
    clinic_id: str
    clinic_name: str
    total_items: int
    low_stock_items: int
    total_order_value: float
    most_ordered_items: List[MostOrderedItem] = []


class CartItem(CamelModel):
    id: str
    name: str
    quantity: int = Field(..., ge=0)
    price: float = Field(default=0.0, ge=0)
    max_quantity: int = Field(default=100, ge=0)
    description: Optional[str] = None
    sku: Optional[str] = None


class TemplateApply(CamelModel):
    # productId -> chosen quantity; items left out use their default quantity
    quantities: Dict[str, int] = {}
    cart: List[CartItem] = []


class Checkout(CamelModel):
    clinic_id: UUID
    items: List[CartItem] = Field(..., min_length=1)
    notes: Optional[str] = None

    @field_validator("items")
    def has_quantity(cls, v: List[CartItem]):
        if not any(item.quantity > 0 for item in v):
            raise ValueError("cart has no items with a positive quantity")
        return v


class RecentOrder(CamelModel):
    id: str
    clinic_id: str
    status: str
    label: str
    status_style: str
    total: float
    created_at: Optional[datetime] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


T = TypeVar("T")


class Page(CamelModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int
