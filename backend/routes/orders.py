# backend/routes/orders.py
from fastapi import APIRouter, Depends, Request, Query
from sqlalchemy.orm import Session
import logging

from database import get_db
from utils.tokenJWT import get_current_user
from utils.audit import write_log, client_ip
from utils.errors import StoreError
from models.users import User
from models.order import Order
from schemas.order import (
    OrderCreatePayload, OrderCreated, OrderResponse, OrdersPage, OrderItemOut
)
from services import order_ledger

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)

# Map Order model to OrderResponse schema
def _order_to_out(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        total_amount=order.total_amount,
        created_at=order.created_at,
        items=[OrderItemOut.model_validate(it) for it in order.items],
    )

# Place an order for the authenticated user
@router.post("", response_model=OrderCreated)
def create_order(
    payload: OrderCreatePayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user_id = current_user.id
    try:
        receipt = order_ledger.create_order(db, user_id, payload.items)
    except StoreError as e:
        write_log(db, user_id=user_id, action="ORDER_CREATE", resource="orders", status="FAIL",
                  ip=client_ip(request), meta={"lines": len(payload.items), "reason": e.code})
        raise

    write_log(db, user_id=user_id, action="ORDER_CREATE", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": receipt.order_id, "total": receipt.total})
    return OrderCreated(order_id=receipt.order_id, total=receipt.total)


# List the caller's orders, newest first
@router.get("", response_model=OrdersPage)
def list_my_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    rows, total = order_ledger.list_orders(db, current_user.id, page, page_size)
    return OrdersPage(items=[_order_to_out(o) for o in rows], total=total, page=page, page_size=page_size)


# Get details of one of the caller's orders
@router.get("/{order_id}", response_model=OrderResponse)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return _order_to_out(order_ledger.get_order(db, current_user.id, order_id))
