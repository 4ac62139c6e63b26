# bookcart/tasks/purge.py
from bookcart.celery_worker import celery_app
from bookcart.data.database import SessionLocal
from bookcart.repos.cart_repo import CartRepo
from bookcart.utils.settings import GUEST_CART_TTL_SECONDS
from bookcart.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="bookcart.tasks.purge.purge_guest_carts_task")
def purge_guest_carts_task(max_age_seconds: int = GUEST_CART_TTL_SECONDS) -> int:
    logger.info("Purge guest carts task started")

    db = SessionLocal()
    try:
        repo = CartRepo(db)
        carts = repo.get_stale_guest_carts(max_age_seconds)

        logger.info(f"Found {len(carts)} stale guest carts")

        for cart in carts:
            db.delete(cart)
        db.commit()
        return len(carts)
    finally:
        db.close()
