"""
Database Schemas for the shop

Each record model corresponds to a MongoDB collection; the collection name is
the lowercase class name (User -> "user"). Stored documents use the snake_case
field names, the JSON API uses their camelCase aliases.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel

CENT = Decimal("0.01")


def money(value) -> Decimal:
    return Decimal(str(value))


def order_total(items) -> float:
    """Sum of price x quantity, computed in Decimal and rounded to cents."""
    total = sum((money(it.price) * it.quantity for it in items), Decimal("0"))
    return float(total.quantize(CENT))


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Users

class User(ApiModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., description="BCrypt hash of the password")
    created_at: Optional[datetime] = None


class UserCreate(ApiModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserLogin(ApiModel):
    email: EmailStr
    password: str


class UserOut(ApiModel):
    id: str
    name: str
    email: EmailStr


class AuthResponse(ApiModel):
    message: str
    token: str
    user: UserOut


class TokenClaims(ApiModel):
    user_id: str
    email: str


# Catalog

class ProductIn(ApiModel):
    name: str
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    category: Optional[str] = None
    image: Optional[str] = None
    stock: int = Field(..., ge=0)


class Product(ProductIn):
    id: str
    created_at: Optional[datetime] = None


# Orders

class OrderItemIn(ApiModel):
    product_id: str
    quantity: int = Field(..., ge=1)


class ShippingAddress(ApiModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class OrderCreate(ApiModel):
    products: List[OrderItemIn] = Field(..., min_length=1)
    shipping_address: ShippingAddress = Field(default_factory=ShippingAddress)


class OrderItem(ApiModel):
    """Stored line: price is the unit price at the time of purchase."""
    product_id: str
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0)


class LineItem(OrderItem):
    name: str


class Order(ApiModel):
    id: Optional[str] = None
    user_id: str
    products: List[OrderItem]
    total_amount: float = Field(..., ge=0)
    shipping_address: ShippingAddress
    status: str = "pending"
    created_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_total(self):
        if abs(order_total(self.products) - self.total_amount) > 0.005:
            raise ValueError("totalAmount does not match the order lines")
        return self


class OrderUser(ApiModel):
    name: Optional[str] = None
    email: str


class PlacedOrder(Order):
    user: OrderUser
    product_details: List[LineItem]


class OrderCreatedResponse(ApiModel):
    message: str
    order: PlacedOrder


class OrderItemView(OrderItem):
    product: Optional[Product] = None


class OrderView(Order):
    products: List[OrderItemView]


class MessageResponse(ApiModel):
    message: str
