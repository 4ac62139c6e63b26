# bookcart/repos/cart_repo.py
from datetime import datetime, timezone, timedelta
from typing import List

from sqlalchemy.orm import Session, selectinload

from bookcart.data.models.cart import CartModel
from bookcart.data.models.cart_item import CartItemModel
from bookcart.domain.cart import Cart, LineItem
from bookcart.domain.errors import ConcurrencyConflict
from bookcart.domain.identity import CartOwner, GuestOwner, UserOwner


def _owner_filter(owner: CartOwner):
    if isinstance(owner, UserOwner):
        return CartModel.user_id == owner.user_id
    return CartModel.session_id == owner.session_id


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_model(self, owner: CartOwner) -> CartModel | None:
        return (
            self.db.query(CartModel)
            .options(selectinload(CartModel.items))
            .filter(_owner_filter(owner))
            .one_or_none()
        )

    def get_cart(self, owner: CartOwner) -> Cart | None:
        model = self.get_cart_model(owner)
        if model is None:
            return None
        return self.to_domain(model)

    def create_cart(self, owner: CartOwner) -> Cart:
        model = CartModel(
            user_id=owner.user_id if isinstance(owner, UserOwner) else None,
            session_id=owner.session_id if isinstance(owner, GuestOwner) else None,
            discount_percent=0,
            subtotal=0,
            total=0,
            version=1,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        return self.to_domain(model)

    @staticmethod
    def to_domain(model: CartModel) -> Cart:
        if model.user_id is not None:
            owner = UserOwner(model.user_id)
        else:
            owner = GuestOwner(model.session_id)

        # sumy zawsze przeliczane przy odczycie (Cart.__post_init__)
        return Cart(
            owner=owner,
            id=model.id,
            version=model.version,
            discount_code=model.discount_code,
            discount_percent=model.discount_percent or 0,
            items=[
                LineItem(
                    id=i.id,
                    product_id=i.product_id,
                    price=i.price,
                    quantity=i.quantity,
                )
                for i in model.items
            ],
        )

    def save_cart(self, cart: Cart) -> Cart:
        """
        Zapisuje koszyk z optimistic lockingiem na polu version.
        Commit robi serwis.
        """
        cart.calculate_totals()

        rowcount = (
            self.db.query(CartModel)
            .filter(CartModel.id == cart.id, CartModel.version == cart.version)
            .update(
                {
                    "discount_code": cart.discount_code,
                    "discount_percent": cart.discount_percent,
                    "subtotal": cart.subtotal,
                    "total": cart.total,
                    "version": cart.version + 1,
                    "updated_at": datetime.now(timezone.utc),
                },
                synchronize_session="fetch",
            )
        )

        if rowcount == 0:
            self.db.rollback()
            raise ConcurrencyConflict(
                f"Konflikt wspolbieznosci - koszyk {cart.id} zostal zmodyfikowany przez inna operacje"
            )

        model = self.db.get(CartModel, cart.id)
        self._sync_items(model, cart)
        self.db.flush()

        by_product = {i.product_id: i for i in model.items}
        for item in cart.items:
            item.id = by_product[item.product_id].id
        cart.version += 1
        return cart

    def _sync_items(self, model: CartModel, cart: Cart) -> None:
        existing = {i.product_id: i for i in model.items}
        wanted = {item.product_id for item in cart.items}

        for row in list(model.items):
            if row.product_id not in wanted:
                model.items.remove(row)

        for position, item in enumerate(cart.items):
            row = existing.get(item.product_id)
            if row is None:
                model.items.append(
                    CartItemModel(
                        product_id=item.product_id,
                        position=position,
                        quantity=item.quantity,
                        price=item.price,
                    )
                )
            else:
                row.position = position
                row.quantity = item.quantity
                row.price = item.price

    def delete_cart(self, cart: Cart) -> None:
        model = self.db.get(CartModel, cart.id)
        if model is not None:
            self.db.delete(model)

    def get_stale_guest_carts(self, max_age_seconds: int) -> List[CartModel]:
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=max_age_seconds)
        return (
            self.db.query(CartModel)
            .filter(
                CartModel.session_id.isnot(None),
                CartModel.updated_at < cutoff,
            )
            .all()
        )

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
