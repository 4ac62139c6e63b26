# bookcart/repos/order_repo.py
from typing import List

from sqlalchemy.orm import Session, selectinload

from bookcart.data.models.order import OrderModel
from bookcart.data.models.order_item import OrderItemModel
from bookcart.domain.order import OrderSnapshot


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, snapshot: OrderSnapshot) -> OrderModel:
        address = snapshot.shipping_address
        order = OrderModel(
            order_number=snapshot.order_number,
            user_id=snapshot.user_id,
            status=snapshot.status.value,
            payment_status=snapshot.payment_status.value,
            payment_method=snapshot.payment_method.value,
            total_amount=snapshot.total_amount,
            notes=snapshot.notes,
            shipping_street=address.street,
            shipping_city=address.city,
            shipping_state=address.state,
            shipping_zip_code=address.zip_code,
            shipping_country=address.country,
            items=[
                OrderItemModel(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    price=line.price,
                    total=line.total,
                )
                for line in snapshot.items
            ],
        )
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return (
            self.db.query(OrderModel)
            .options(selectinload(OrderModel.items))
            .filter(OrderModel.id == order_id)
            .one_or_none()
        )

    def list_orders_for_user(self, user_id: int) -> List[OrderModel]:
        return (
            self.db.query(OrderModel)
            .options(selectinload(OrderModel.items))
            .filter(OrderModel.user_id == user_id)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .all()
        )

    def update_order_status(self, order: OrderModel, status: str) -> OrderModel:
        order.status = status
        self.db.commit()
        self.db.refresh(order)
        return order
