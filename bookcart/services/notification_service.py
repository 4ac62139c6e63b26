# bookcart/services/notification_service.py
from bookcart.celery_worker import celery_app
from bookcart.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysyłania powiadomień.
    Używa Celery do asynchronicznego przetwarzania.
    """

    @staticmethod
    def send_order_notification(user_id: int, order_id: int):
        send_order_notification_task.delay(user_id, order_id)


@celery_app.task(name="bookcart.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_id: int):
    """
    W prawdziwym systemie email/SMS, na razie tylko log.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: Order {order_id} placed")
    return {"user_id": user_id, "order_id": order_id, "status": "sent"}
