# bookcart/domain/cart.py
"""
Silnik koszyka: pozycje, rabat i sumy.

Czysta logika w pamieci, bez I/O. Kazda operacja modyfikujaca konczy sie
przeliczeniem sum, wiec subtotal/total nigdy nie sa nieaktualne.
"""
import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

from bookcart.domain.identity import CartOwner

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

# gorna granica ilosci jednej pozycji (kolumna Integer)
MAX_QUANTITY = 10_000

# stala tabela kodow, rozszerzana tylko zmiana kodu
DISCOUNT_CODES: Mapping[str, int] = {
    "SAVE10": 10,
    "SAVE20": 20,
    "WELCOME": 15,
}

DEFAULT_PRODUCT_NAME = "Product"
DEFAULT_PRODUCT_IMAGE = "📚"


def _to_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    # 1e999999999 jest skonczone, ale int() budowalby gigantyczna liczbe
    if number.adjusted() > 15:
        return None
    return number


def sanitize_quantity(value: Any) -> int:
    """Ilosc przy dodawaniu: cokolwiek nieliczbowego, <= 0 albo ponad MAX_QUANTITY daje 1."""
    number = _to_decimal(value)
    if number is None or number <= 0 or number > MAX_QUANTITY:
        return 1
    return max(int(number), 1)


def sanitize_price(value: Any) -> Decimal:
    number = _to_decimal(value)
    if number is None or number < 0:
        return ZERO
    return number


def parse_quantity(value: Any) -> Optional[int]:
    """Ilosc przy aktualizacji: None gdy nieliczbowa, ujemna albo ponad MAX_QUANTITY (caller zwraca 400)."""
    number = _to_decimal(value)
    if number is None or number < 0 or number > MAX_QUANTITY:
        return None
    return int(number)


def to_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


@dataclass
class LineItem:
    product_id: int
    price: Decimal
    quantity: int
    id: Optional[int] = None

    @property
    def total(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class Cart:
    owner: CartOwner
    items: List[LineItem] = field(default_factory=list)
    discount_code: Optional[str] = None
    discount_percent: Decimal = ZERO
    subtotal: Decimal = ZERO
    total: Decimal = ZERO
    id: Optional[int] = None
    version: int = 1

    def __post_init__(self):
        self.calculate_totals()

    def find_item(self, product_id: int) -> Optional[LineItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def is_empty(self) -> bool:
        return not self.items

    def calculate_totals(self) -> "Cart":
        # grosze zaokraglane tu, tak samo jak zapisze je kolumna Numeric(12, 2)
        self.subtotal = to_money(sum((item.price * item.quantity for item in self.items), ZERO))
        discount_amount = self.subtotal * (Decimal(self.discount_percent) / HUNDRED)
        self.total = to_money(self.subtotal - discount_amount)
        return self

    def add_item(self, product_id: int, quantity: int, unit_price: Decimal) -> "Cart":
        existing = self.find_item(product_id)
        if existing:
            # cena z pierwszego dodania zostaje
            existing.quantity = min(existing.quantity + quantity, MAX_QUANTITY)
        else:
            self.items.append(
                LineItem(
                    product_id=product_id,
                    price=Decimal(unit_price),
                    quantity=min(quantity, MAX_QUANTITY),
                )
            )
        return self.calculate_totals()

    def remove_item(self, product_id: int) -> "Cart":
        self.items = [item for item in self.items if item.product_id != product_id]
        return self.calculate_totals()

    def update_quantity(self, product_id: int, quantity: int) -> "Cart":
        item = self.find_item(product_id)
        if item is None:
            return self
        if quantity <= 0:
            return self.remove_item(product_id)
        item.quantity = min(quantity, MAX_QUANTITY)
        return self.calculate_totals()

    def apply_discount(self, code: Optional[str]) -> bool:
        percent = DISCOUNT_CODES.get(code) if code else None
        if percent is None:
            return False
        self.discount_code = code
        self.discount_percent = Decimal(percent)
        self.calculate_totals()
        return True

    def clear(self) -> "Cart":
        self.items = []
        self.discount_code = None
        self.discount_percent = ZERO
        return self.calculate_totals()

    def to_display_view(self, products: Mapping[int, Any]) -> Dict[str, Any]:
        """
        Widok dla frontendu: pozycje wzbogacone o dane produktu,
        discount_percent wystawiony jako `discount`, liczby zawsze liczbami.
        """
        items = []
        for item in self.items:
            product = products.get(item.product_id)
            items.append(
                {
                    "id": str(item.id) if item.id is not None else str(item.product_id),
                    "product_id": str(item.product_id),
                    "quantity": int(_number(item.quantity)),
                    "name": getattr(product, "name", None) or DEFAULT_PRODUCT_NAME,
                    "price": _number(item.price),
                    "image": getattr(product, "image", None) or DEFAULT_PRODUCT_IMAGE,
                    "stock": int(_number(getattr(product, "stock", 0))),
                }
            )

        return {
            "id": str(self.id) if self.id is not None else None,
            "items": items,
            "discount": _number(self.discount_percent),
            "subtotal": _number(self.subtotal),
            "total": _number(self.total),
        }


def merge_into(target: Cart, source: Cart) -> Cart:
    """Przenosi pozycje koszyka goscia do koszyka usera. Usuniecie zrodla nalezy do callera."""
    for item in source.items:
        target.add_item(item.product_id, item.quantity, item.price)
    return target
