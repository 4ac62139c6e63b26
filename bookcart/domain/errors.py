# bookcart/domain/errors.py


class InvalidDiscountCode(ValueError):
    def __init__(self, code: str | None):
        super().__init__("Nieprawidłowy kod rabatowy")
        self.code = code


class EmptyCartCheckout(ValueError):
    def __init__(self):
        super().__init__("Koszyk jest pusty")


class ProductNotFound(LookupError):
    def __init__(self, product_id: int):
        super().__init__("Produkt nie istnieje")
        self.product_id = product_id


class OrderNotFound(LookupError):
    def __init__(self, order_id: int):
        super().__init__("Zamówienie nie istnieje")
        self.order_id = order_id


class ConcurrencyConflict(RuntimeError):
    """Wersja koszyka zmienila sie miedzy odczytem a zapisem."""


class CartBusy(RuntimeError):
    """Inny request trzyma lock na tym koszyku."""
