# bookcart/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Any, List, Optional
from datetime import datetime

from bookcart.domain.order import OrderStatus, PaymentMethod, PaymentStatus


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka. Ilosc sanityzowana w serwisie."""

    product_id: Optional[int] = Field(None, description="ID produktu")
    quantity: Any = Field(1, description="Ilość produktu (niepoprawna wartość daje 1)")


class QuantityIn(BaseModel):
    """Schema dla zmiany ilosci (0 usuwa pozycję)."""

    quantity: Any = None


class DiscountIn(BaseModel):
    code: Optional[str] = None


class CartItemOut(BaseModel):
    """Pozycja koszyka w widoku frontendu."""

    id: str
    product_id: str = Field(..., serialization_alias="productId")
    quantity: int
    name: str
    price: float
    image: str
    stock: int


class CartOut(BaseModel):
    """Koszyk w widoku frontendu; `discount` to procent rabatu."""

    id: Optional[str] = None
    items: List[CartItemOut]
    discount: float
    subtotal: float
    total: float


class ShippingAddressIn(BaseModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    country: str = "India"


class CheckoutIn(BaseModel):
    shipping_address: ShippingAddressIn
    payment_method: PaymentMethod = PaymentMethod.COD
    notes: Optional[str] = Field(None, max_length=500)


class OrderItemOut(BaseModel):
    product_id: int
    quantity: int
    price: float
    total: float

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: int
    order_number: str
    user_id: int
    items: List[OrderItemOut]
    total_amount: float
    shipping_address: ShippingAddressIn
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    notes: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime


class CheckoutOut(BaseModel):
    message: str
    order_id: int
    order: OrderOut


class OrderStatusIn(BaseModel):
    status: OrderStatus
