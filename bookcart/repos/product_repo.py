# bookcart/repos/product_repo.py
from typing import Dict, Iterable

from sqlalchemy.orm import Session

from bookcart.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        product = self.db.get(ProductModel, product_id)
        if product is None or not product.is_active:
            return None
        return product

    def get_products(self, product_ids: Iterable[int]) -> Dict[int, ProductModel]:
        ids = set(product_ids)
        if not ids:
            return {}
        rows = self.db.query(ProductModel).filter(ProductModel.id.in_(ids)).all()
        return {p.id: p for p in rows}
