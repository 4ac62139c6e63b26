# bookcart/data/seed.py
from decimal import Decimal

from bookcart.data.database import SessionLocal, init_db
from bookcart.data.models.product import ProductModel

BOOKS = [
    {"name": "The Pragmatic Programmer", "author": "Andrew Hunt, David Thomas", "price": Decimal("499.00"), "stock": 12},
    {"name": "Clean Code", "author": "Robert C. Martin", "price": Decimal("399.00"), "stock": 8},
    {"name": "Fluent Python", "author": "Luciano Ramalho", "price": Decimal("899.00"), "stock": 5},
    {"name": "Designing Data-Intensive Applications", "author": "Martin Kleppmann", "price": Decimal("1099.00"), "stock": 3},
]


def seed():
    init_db()
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            return
        db.add_all(ProductModel(**book) for book in BOOKS)
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    seed()
