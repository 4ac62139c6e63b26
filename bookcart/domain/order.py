# bookcart/domain/order.py
import random
import string
import time
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from bookcart.domain.cart import Cart
from bookcart.domain.errors import EmptyCartCheckout


class OrderStatus(str, Enum):
    PENDING = "Pending"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    COD = "cod"
    ONLINE = "online"
    CARD = "card"


def generate_order_number() -> str:
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=5))
    return f"ORD-{int(time.time() * 1000)}-{suffix}"


@dataclass(frozen=True)
class ShippingAddress:
    street: str
    city: str
    state: str
    zip_code: str
    country: str = "India"


@dataclass(frozen=True)
class OrderLine:
    product_id: int
    quantity: int
    price: Decimal
    total: Decimal


@dataclass
class OrderSnapshot:
    user_id: int
    items: List[OrderLine]
    total_amount: Decimal
    shipping_address: ShippingAddress
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.COD
    notes: Optional[str] = None
    order_number: str = field(default_factory=generate_order_number)


def checkout(
    cart: Cart,
    user_id: int,
    shipping_address: ShippingAddress,
    payment_method: PaymentMethod = PaymentMethod.COD,
    notes: Optional[str] = None,
) -> OrderSnapshot:
    """
    Zamienia aktualny stan koszyka w snapshot zamowienia i czysci koszyk.
    Zamowienie nie trzyma referencji do koszyka.
    """
    if cart.is_empty():
        raise EmptyCartCheckout()

    cart.calculate_totals()
    lines = [
        OrderLine(
            product_id=item.product_id,
            quantity=item.quantity,
            price=item.price,
            total=item.price * item.quantity,
        )
        for item in cart.items
    ]
    snapshot = OrderSnapshot(
        user_id=user_id,
        items=lines,
        total_amount=cart.total,
        shipping_address=shipping_address,
        payment_method=payment_method,
        notes=notes,
    )

    cart.clear()
    return snapshot
