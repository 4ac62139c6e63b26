# bookcart/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from bookcart.api.routers.carts import get_lock_service
from bookcart.data.database import get_db
from bookcart.domain.schemas import OrderOut, OrderStatusIn
from bookcart.services.lock_service import CartLockService
from bookcart.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session = Depends(get_db), lock_service: CartLockService = Depends(get_lock_service)):
    return OrderService(db, lock_service)


@router.get("/", response_model=List[OrderOut])
def list_orders(user_id: int = Query(..., gt=0), svc: OrderService = Depends(get_service)):
    """
    Zamówienia użytkownika, najnowsze najpierw.
    """
    return svc.list_orders(user_id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: int = Query(..., gt=0),
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.get_order(order_id, user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: OrderStatusIn,
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.update_status(order_id, payload.status)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
