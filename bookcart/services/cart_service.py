# bookcart/services/cart_service.py
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookcart.domain.cart import Cart, merge_into, parse_quantity, sanitize_price, sanitize_quantity
from bookcart.domain.errors import InvalidDiscountCode, ProductNotFound
from bookcart.domain.identity import CartOwner, GuestOwner, UserOwner
from bookcart.repos.cart_repo import CartRepo
from bookcart.repos.product_repo import ProductRepo
from bookcart.services.lock_service import CartLockService
from bookcart.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use case'y koszyka.
    Kazda komenda: lock na wlascicielu -> odczyt -> operacja silnika -> zapis z wersja -> widok.
    """

    def __init__(self, db: Session, lock_service: CartLockService):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.lock_service = lock_service

    #query - odczyt
    def get_cart(self, owner: CartOwner) -> Dict[str, Any]:
        cart = self.load_or_create(owner)
        return self.view(cart)

    def view(self, cart: Cart) -> Dict[str, Any]:
        products = self.products.get_products(i.product_id for i in cart.items)
        return cart.to_display_view(products)

    def load_or_create(self, owner: CartOwner) -> Cart:
        cart = self.repo.get_cart(owner)
        if cart is not None:
            return cart

        try:
            cart = self.repo.create_cart(owner)
        except IntegrityError:
            #rownolegly request zalozyl koszyk pierwszy
            self.repo.rollback()
            return self.repo.get_cart(owner)

        logger.info(f"Utworzono nowy koszyk {cart.id} dla {owner.key}")
        return cart

    def _persist(self, cart: Cart) -> Dict[str, Any]:
        self.repo.save_cart(cart)
        self.repo.commit()
        return self.view(cart)

    #commands
    def add_item(self, owner: CartOwner, product_id: Optional[int], quantity: Any = 1) -> Dict[str, Any]:
        if not product_id:
            raise ValueError("Brak ID produktu")

        product = self.products.get_product(product_id)
        if product is None:
            raise ProductNotFound(product_id)

        # lagodna polityka: zla ilosc -> 1, zla cena -> 0
        qty = sanitize_quantity(quantity)
        price = sanitize_price(product.price)

        with self.lock_service.hold(owner.key):
            cart = self.load_or_create(owner)
            existing = cart.find_item(product_id)
            cart.add_item(product_id, qty, price)

            if existing:
                logger.info(
                    f"Produkt {product_id} już jest w koszyku {cart.id}, "
                    f"ilosc teraz {existing.quantity}"
                )
            else:
                logger.info(f"Dodano produkt {product_id} x{qty} do koszyka {cart.id}")

            return self._persist(cart)

    def update_quantity(self, owner: CartOwner, product_id: int, quantity: Any) -> Dict[str, Any]:
        qty = parse_quantity(quantity)
        if qty is None:
            raise ValueError("Ilosc musi byc nieujemna liczba")

        with self.lock_service.hold(owner.key):
            cart = self.load_or_create(owner)
            cart.update_quantity(product_id, qty)
            logger.info(f"Ilosc produktu {product_id} w koszyku {cart.id} ustawiona na {qty}")
            return self._persist(cart)

    def remove_item(self, owner: CartOwner, product_id: int) -> Dict[str, Any]:
        with self.lock_service.hold(owner.key):
            cart = self.load_or_create(owner)
            cart.remove_item(product_id)
            logger.info(f"Usunieto produkt {product_id} z koszyka {cart.id}")
            return self._persist(cart)

    def apply_discount(self, owner: CartOwner, code: Optional[str]) -> Dict[str, Any]:
        with self.lock_service.hold(owner.key):
            cart = self.load_or_create(owner)
            if not cart.apply_discount(code):
                logger.warning(f"Odrzucony kod rabatowy {code!r} dla koszyka {cart.id}")
                raise InvalidDiscountCode(code)

            logger.info(f"Rabat {code} ({cart.discount_percent}%) naliczony w koszyku {cart.id}")
            return self._persist(cart)

    def clear_cart(self, owner: CartOwner) -> Dict[str, Any]:
        with self.lock_service.hold(owner.key):
            cart = self.load_or_create(owner)
            cart.clear()
            logger.info(f"Koszyk {cart.id} wyczyszczony")
            return self._persist(cart)

    def merge_guest_cart(self, owner: CartOwner, session_id: str) -> Dict[str, Any]:
        """
        Po zalogowaniu: pozycje koszyka goscia trafiaja do koszyka usera,
        a koszyk goscia jest usuwany (zawsze, nawet pusty).
        """
        if not isinstance(owner, UserOwner):
            raise PermissionError("Scalanie koszykow wymaga logowania")

        guest = GuestOwner(session_id)

        with self.lock_service.hold(owner.key, guest.key):
            user_cart = self.load_or_create(owner)
            guest_cart = self.repo.get_cart(guest)

            if guest_cart is None:
                return self.view(user_cart)

            merge_into(user_cart, guest_cart)
            self.repo.save_cart(user_cart)
            self.repo.delete_cart(guest_cart)
            self.repo.commit()

            logger.info(
                f"Przeniesiono {len(guest_cart.items)} pozycji z koszyka goscia {guest_cart.id} "
                f"do koszyka {user_cart.id}"
            )
            return self.view(user_cart)
