"""Checkout: turn the cart into an order and clear it only once confirmed."""

import logging
from dataclasses import dataclass
from typing import Dict, List

from shopclient.cart import Cart, Lines
from shopclient.errors import ValidationError
from shopclient.gateway import ApiGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderReceipt:
    order_id: int
    total: int


def order_lines(lines: Lines) -> List[Dict]:
    """Snapshot name and price of each line as the order request expects them."""
    return [
        {
            "productId": line.product.id,
            "name": line.product.name,
            "unitPrice": line.product.price,
            "quantity": line.quantity,
        }
        for line in lines
    ]


async def checkout(cart: Cart, gateway: ApiGateway) -> OrderReceipt:
    lines = cart.items
    if not lines:
        raise ValidationError("Cart is empty")

    # On any failure the cart is left exactly as it was
    data = await gateway.place_order(order_lines(lines))
    receipt = OrderReceipt(order_id=int(data["orderId"]), total=int(data["total"]))

    if receipt.total != cart.subtotal:
        logger.warning(f"Order {receipt.order_id}: server total {receipt.total} != cart subtotal {cart.subtotal}")

    cart.clear_cart()
    logger.info(f"Order {receipt.order_id} placed, total {receipt.total}")
    return receipt
