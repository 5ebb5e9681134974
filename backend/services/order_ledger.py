# backend/services/order_ledger.py
"""
ORDER LEDGER

Persists an order header and its line items as one atomic unit.

Hard rules:
- Money values are integer minor units computed server-side; a total sent by
  the client is never trusted.
- Header and lines are written inside one transaction scope: either all rows
  become visible or none do.
- Exactly one write attempt per call. Retrying is the caller's decision.
- The caller is already authenticated; user_id always comes from the bearer
  identity, never from the payload.
"""
import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Tuple

from sqlalchemy.orm import Session, selectinload

from database import transaction_scope
from models.order import Order, OrderItem
from utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerLine:
    product_id: str
    name: str
    unit_price: int
    quantity: int

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class OrderReceipt:
    order_id: int
    total: int


def _field(raw: Any, *names: str):
    # Lines arrive either as mappings (camelCase or snake_case keys) or as objects
    for name in names:
        if isinstance(raw, Mapping):
            if name in raw:
                return raw[name]
        elif hasattr(raw, name):
            return getattr(raw, name)
    return None


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _to_line(raw: Any, idx: int) -> LedgerLine:
    product_id = _field(raw, "product_id", "productId")
    name = _field(raw, "name", "product_name")
    unit_price = _field(raw, "unit_price", "unitPrice")
    quantity = _field(raw, "quantity")

    if not isinstance(product_id, str) or not product_id.strip():
        raise ValidationError(f"Line {idx}: product id is required", {"line": idx, "field": "productId"})
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"Line {idx}: name is required", {"line": idx, "field": "name"})
    if not _is_int(unit_price) or unit_price < 0:
        raise ValidationError(f"Line {idx}: unit price must be a non-negative integer",
                              {"line": idx, "field": "unitPrice"})
    if not _is_int(quantity) or quantity <= 0:
        raise ValidationError(f"Line {idx}: quantity must be a positive integer",
                              {"line": idx, "field": "quantity"})

    return LedgerLine(product_id=product_id.strip(), name=name.strip(), unit_price=unit_price, quantity=quantity)


def validate_lines(lines: Iterable[Any]) -> List[LedgerLine]:
    """Validate the whole sequence up front; one bad line rejects the order."""
    if lines is None:
        raise ValidationError("Order must contain at least one line")
    validated = [_to_line(raw, idx) for idx, raw in enumerate(lines)]
    if not validated:
        raise ValidationError("Order must contain at least one line")
    return validated


def compute_total(lines: Iterable[LedgerLine]) -> int:
    return sum(line.line_total for line in lines)


def _write_header(db: Session, user_id: int, total: int) -> Order:
    order = Order(user_id=user_id, total_amount=total)
    db.add(order)
    db.flush()
    return order


def _write_line(db: Session, order: Order, line: LedgerLine) -> OrderItem:
    item = OrderItem(
        order_id=order.id,
        product_id=line.product_id,
        product_name=line.name,
        unit_price=line.unit_price,
        quantity=line.quantity,
        line_total=line.line_total,
    )
    db.add(item)
    db.flush()
    return item


def create_order(db: Session, user_id: int, lines: Iterable[Any]) -> OrderReceipt:
    """
    Validate, total and persist an order for user_id.

    Raises ValidationError before touching the database, PersistenceError if
    the transaction fails (nothing is left behind in that case).
    """
    validated = validate_lines(lines)
    total = compute_total(validated)

    with transaction_scope(db, "order create"):
        order = _write_header(db, user_id, total)
        for line in validated:
            _write_line(db, order, line)
        order_id = order.id

    logger.info("Order %s created for user %s: %d lines, total %d",
                order_id, user_id, len(validated), total)
    return OrderReceipt(order_id=order_id, total=total)


def list_orders(db: Session, user_id: int, page: int = 1, page_size: int = 10) -> Tuple[List[Order], int]:
    q = (
        db.query(Order)
        .options(selectinload(Order.items))
        .filter(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    total = q.count()
    rows = q.offset((page - 1) * page_size).limit(page_size).all()
    return rows, total


def get_order(db: Session, user_id: int, order_id: int) -> Order:
    # Orders of other users are reported exactly like missing ones
    order = (
        db.query(Order)
        .options(selectinload(Order.items))
        .filter(Order.id == order_id, Order.user_id == user_id)
        .first()
    )
    if order is None:
        raise NotFoundError("Order not found")
    return order
