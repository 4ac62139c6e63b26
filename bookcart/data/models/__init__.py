#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from bookcart.data.models.product import ProductModel
from bookcart.data.models.cart import CartModel
from bookcart.data.models.cart_item import CartItemModel
from bookcart.data.models.order import OrderModel
from bookcart.data.models.order_item import OrderItemModel

__all__ = ["ProductModel", "CartModel", "CartItemModel", "OrderModel", "OrderItemModel"]
