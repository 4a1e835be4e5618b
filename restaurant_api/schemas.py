"""
Pydantic Schemas for Request/Response Validation

Wire names are camelCase (``userId``, ``totalPrice``, ``portionSize``) to
match the web client; Python attributes stay snake_case. Responses are built
straight from ORM objects (``from_attributes``).
"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from restaurant_api.models import OrderStatus, ProductCategory, UserRole

EMAIL_PATTERN = re.compile(r"^[\w\.\+-]+@[\w\.-]+\.\w+$")


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _validate_email(v: str) -> str:
    v = v.strip()
    if not EMAIL_PATTERN.match(v):
        raise ValueError("Invalid email format")
    return v


# =============================================================================
# AUTH
# =============================================================================

class RegisterRequest(CamelModel):
    email: str = Field(..., min_length=3, max_length=255, examples=["jane@example.com"])
    password: str = Field(..., min_length=1, max_length=72)
    name: str = Field(..., min_length=1, max_length=100, examples=["Jane Doe"])

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _validate_email(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name must not be blank")
        return v.strip()


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    """Public view of an identity (no password hash)."""
    id: int
    email: str
    name: str
    role: UserRole


class AuthResponse(CamelModel):
    token: str
    user: UserResponse


# =============================================================================
# CATALOG
# =============================================================================

class ImageAttribution(CamelModel):
    photographer: str = ""
    source: str = ""
    url: str = ""


class ReviewSchema(CamelModel):
    id: Optional[int] = None
    user_name: str
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None
    date: Optional[str] = None


class ProductBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    price: float = Field(..., ge=0)
    description: Optional[str] = None
    category: ProductCategory
    image: Optional[str] = None
    image_attribution: Optional[ImageAttribution] = None
    detailed_description: Optional[str] = None


class ProductCreate(ProductBase):
    stock_quantity: int = Field(default=0, ge=0)
    low_stock_threshold: Optional[int] = Field(default=None, ge=0)
    reviews: List[ReviewSchema] = Field(default_factory=list)


class ProductSeed(ProductCreate):
    """Catalog entry from a seed file; a fixed id makes re-seeding an upsert."""
    id: Optional[int] = Field(default=None, ge=1)


class ProductUpdate(ProductBase):
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    low_stock_threshold: Optional[int] = Field(default=None, ge=0)


class ProductResponse(ProductBase):
    id: int
    stock_quantity: int
    low_stock_threshold: int
    reviews: List[ReviewSchema] = Field(default_factory=list)


class SupplyRequest(CamelModel):
    quantity: int = Field(..., gt=0, le=100000)


# =============================================================================
# FEEDBACK
# =============================================================================

class FeedbackCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1)
    product_id: int
    product_name: str = Field(..., min_length=1, max_length=200)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _validate_email(v)


class FeedbackResponse(CamelModel):
    id: int
    name: str
    email: str
    rating: int
    comment: str
    product_id: Optional[int]
    product_name: Optional[str]
    date: datetime


# =============================================================================
# ORDERS
# =============================================================================

class CustomizationOption(CamelModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    price: float = Field(default=0.0, ge=0)


class OrderItemCreate(CamelModel):
    """Single item in an order."""
    product_id: int
    quantity: int = Field(..., ge=1, le=99, examples=[2])
    portion_size: str = Field(default="Medium", min_length=1, max_length=50)
    customizations: List[CustomizationOption] = Field(default_factory=list)


class OrderCreate(CamelModel):
    """
    Request schema for placing an order.

    ``userId`` and ``status`` sent by older clients are ignored: the owner
    comes from the session token and new orders are always pending.
    """
    items: List[OrderItemCreate] = Field(..., min_length=1)
    total_price: float = Field(..., ge=0)


class OrderItemResponse(CamelModel):
    product_id: int
    quantity: int
    portion_size: str
    customizations: List[CustomizationOption] = Field(default_factory=list)


class OrderResponse(CamelModel):
    id: int
    user_id: int
    items: List[OrderItemResponse]
    total_price: float
    status: OrderStatus
    created_at: datetime


# =============================================================================
# DASHBOARD & REPORTS
# =============================================================================

class DailyStat(CamelModel):
    date: str
    total_orders: int
    total_revenue: float


class MonthlyStat(CamelModel):
    month: str
    total_orders: int
    total_revenue: float


class TopItem(CamelModel):
    product_id: int
    product_name: str
    category: str
    quantity_sold: int


class DashboardStats(CamelModel):
    total_orders: int
    total_revenue: float
    low_stock_items: List[ProductResponse]
    inventory: List[ProductResponse]
    daily_stats: List[DailyStat]


class SalesReport(CamelModel):
    daily_sales: List[DailyStat]
    monthly_sales: List[MonthlyStat]
    top_items: List[TopItem]


# =============================================================================
# GENERIC
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    timestamp: datetime
