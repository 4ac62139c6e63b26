# bookcart/services/order_service.py
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from bookcart.data.models.order import OrderModel
from bookcart.domain.errors import OrderNotFound
from bookcart.domain.identity import CartOwner, UserOwner
from bookcart.domain.order import (
    OrderStatus,
    PaymentMethod,
    ShippingAddress,
    checkout,
)
from bookcart.repos.cart_repo import CartRepo
from bookcart.repos.order_repo import OrderRepo
from bookcart.services.cart_service import CartService
from bookcart.services.lock_service import CartLockService
from bookcart.services.notification_service import NotificationService
from bookcart.utils.logging import get_logger

logger = get_logger(__name__)


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "user_id": order.user_id,
        "items": [
            {
                "product_id": i.product_id,
                "quantity": i.quantity,
                "price": float(i.price),
                "total": float(i.total),
            }
            for i in order.items
        ],
        "total_amount": float(order.total_amount),
        "shipping_address": {
            "street": order.shipping_street,
            "city": order.shipping_city,
            "state": order.shipping_state,
            "zip_code": order.shipping_zip_code,
            "country": order.shipping_country,
        },
        "status": order.status,
        "payment_status": order.payment_status,
        "payment_method": order.payment_method,
        "notes": order.notes,
        "estimated_delivery": order.estimated_delivery,
        "delivered_at": order.delivered_at,
        "created_at": order.created_at,
    }


class OrderService:
    """
    Serwis odpowiedzialny za domenę zamówień.
    Separacja od CartService, ale checkout czysci koszyk w tej samej transakcji.
    """

    def __init__(
        self,
        db: Session,
        lock_service: CartLockService,
        notification_service: Optional[NotificationService] = None,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.carts = CartService(db, lock_service)
        self.lock_service = lock_service
        self.notification_service = notification_service or NotificationService()

    def checkout(
        self,
        owner: CartOwner,
        shipping_address: ShippingAddress,
        payment_method: PaymentMethod = PaymentMethod.COD,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        1. Snapshot pozycji koszyka (total_amount == total koszyka)
        2. Zapis zamówienia i wyczyszczonego koszyka w jednej transakcji
        3. Powiadomienie (async)
        """
        if not isinstance(owner, UserOwner):
            raise PermissionError("Checkout wymaga logowania")

        with self.lock_service.hold(owner.key):
            cart = self.carts.load_or_create(owner)

            snapshot = checkout(
                cart,
                user_id=owner.user_id,
                shipping_address=shipping_address,
                payment_method=payment_method,
                notes=notes,
            )

            order = self.repo.add_order(snapshot)
            self.cart_repo.save_cart(cart)
            self.db.commit()

        logger.info(
            f"Zamówienie {order.id} ({order.order_number}) utworzone z koszyka {cart.id}, "
            f"suma {snapshot.total_amount}"
        )

        self.notification_service.send_order_notification(owner.user_id, order.id)

        return order_to_dict(order)

    def get_order(self, order_id: int, user_id: int) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)

        if not order:
            raise OrderNotFound(order_id)

        if order.user_id != user_id:
            raise PermissionError("Brak dostępu do zamówienia")

        return order_to_dict(order)

    def list_orders(self, user_id: int) -> List[Dict[str, Any]]:
        return [order_to_dict(o) for o in self.repo.list_orders_for_user(user_id)]

    def update_status(self, order_id: int, status: OrderStatus) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFound(order_id)

        # kazde przejscie statusu jest dozwolone (takze Cancelled -> Delivered)
        if status == OrderStatus.DELIVERED:
            order.delivered_at = datetime.now(timezone.utc)

        updated = self.repo.update_order_status(order, status.value)
        logger.info(f"Zamówienie {order_id} status -> {status.value}")
        return order_to_dict(updated)
