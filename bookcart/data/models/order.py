from sqlalchemy import Column, Integer, String, DateTime, Numeric
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from bookcart.data.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    order_number = Column(String, nullable=False, unique=True)
    user_id = Column(Integer, nullable=False, index=True)

    status = Column(String, nullable=False, default="Pending")  # Pending, Shipped, Delivered, Cancelled
    payment_status = Column(String, nullable=False, default="pending")
    payment_method = Column(String, nullable=False, default="cod")
    total_amount = Column(Numeric(12, 2), nullable=False)
    notes = Column(String, nullable=True)

    shipping_street = Column(String, nullable=False)
    shipping_city = Column(String, nullable=False)
    shipping_state = Column(String, nullable=False)
    shipping_zip_code = Column(String, nullable=False)
    shipping_country = Column(String, nullable=False, default="India")

    estimated_delivery = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
    )
