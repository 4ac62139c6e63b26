#bookcart/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from bookcart.data.database import get_db
from bookcart.domain.errors import CartBusy, ConcurrencyConflict
from bookcart.domain.identity import CartOwner, UserOwner, resolve_owner
from bookcart.domain.order import ShippingAddress
from bookcart.domain.schemas import (
    CartOut,
    CheckoutIn,
    CheckoutOut,
    DiscountIn,
    ItemIn,
    QuantityIn,
)
from bookcart.services.cart_service import CartService
from bookcart.services.lock_service import CartLockService
from bookcart.services.order_service import OrderService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_lock_service() -> CartLockService:
    return CartLockService()


def get_owner(session_id: str, user_id: int | None = Query(None, gt=0)) -> CartOwner:
    #user_id ustawia gateway po uwierzytelnieniu
    try:
        return resolve_owner(session_id, user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def require_user(owner: CartOwner = Depends(get_owner)) -> UserOwner:
    if not isinstance(owner, UserOwner):
        raise HTTPException(status_code=401, detail="Wymagane logowanie")
    return owner


def get_service(db: Session = Depends(get_db), lock_service: CartLockService = Depends(get_lock_service)):
    return CartService(db=db, lock_service=lock_service)


def _conflict(e: Exception) -> HTTPException:
    return HTTPException(status_code=409, detail=str(e))


@router.get("/{session_id}", response_model=CartOut)
def get_cart(owner: CartOwner = Depends(get_owner), svc: CartService = Depends(get_service)):
    return svc.get_cart(owner)


@router.post("/{session_id}/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    owner: CartOwner = Depends(get_owner),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.add_item(owner, payload.product_id, payload.quantity)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (CartBusy, ConcurrencyConflict) as e:
        raise _conflict(e)


@router.put("/{session_id}/items/{product_id}", response_model=CartOut)
def update_item(
    product_id: int,
    payload: QuantityIn,
    owner: CartOwner = Depends(get_owner),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.update_quantity(owner, product_id, payload.quantity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (CartBusy, ConcurrencyConflict) as e:
        raise _conflict(e)


@router.delete("/{session_id}/items/{product_id}", response_model=CartOut)
def remove_item(
    product_id: int,
    owner: CartOwner = Depends(get_owner),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.remove_item(owner, product_id)
    except (CartBusy, ConcurrencyConflict) as e:
        raise _conflict(e)


@router.post("/{session_id}/discount", response_model=CartOut)
def apply_discount(
    payload: DiscountIn,
    owner: CartOwner = Depends(get_owner),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.apply_discount(owner, payload.code)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (CartBusy, ConcurrencyConflict) as e:
        raise _conflict(e)


@router.delete("/{session_id}", response_model=CartOut)
def clear_cart(owner: CartOwner = Depends(get_owner), svc: CartService = Depends(get_service)):
    try:
        return svc.clear_cart(owner)
    except (CartBusy, ConcurrencyConflict) as e:
        raise _conflict(e)


@router.post("/{session_id}/checkout", response_model=CheckoutOut, status_code=201)
def checkout(
    payload: CheckoutIn,
    owner: UserOwner = Depends(require_user),
    db: Session = Depends(get_db),
    lock_service: CartLockService = Depends(get_lock_service),
):
    svc = OrderService(db, lock_service)
    address = ShippingAddress(**payload.shipping_address.model_dump())
    try:
        order = svc.checkout(owner, address, payload.payment_method, payload.notes)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (CartBusy, ConcurrencyConflict) as e:
        raise _conflict(e)

    return {"message": "Checkout successful", "order_id": order["id"], "order": order}


@router.post("/{session_id}/merge", response_model=CartOut)
def merge_cart(
    session_id: str,
    owner: UserOwner = Depends(require_user),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.merge_guest_cart(owner, session_id)
    except (CartBusy, ConcurrencyConflict) as e:
        raise _conflict(e)
