"""Cart aggregator: local, non-persisted cart lines and the derived subtotal.

Invariants:
    - At most one line per product id; adding an existing product increments
    - Every line has quantity >= 1; a quantity <= 0 removes the line
    - subtotal is recomputed from the current lines on every read

The transitions are pure functions over an immutable tuple of lines; `Cart`
only holds the latest tuple and notifies listeners after each change.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Product:
    """Immutable catalog reference; price in minor units."""
    id: str
    name: str
    price: int


@dataclass(frozen=True)
class CartLine:
    product: Product
    quantity: int

    @property
    def line_total(self) -> int:
        return self.product.price * self.quantity


Lines = Tuple[CartLine, ...]


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def add_line(lines: Lines, product: Product, qty: int = 1) -> Lines:
    if not _is_positive_int(qty):
        return lines
    for idx, line in enumerate(lines):
        if line.product.id == product.id:
            return lines[:idx] + (replace(line, quantity=line.quantity + qty),) + lines[idx + 1:]
    return lines + (CartLine(product=product, quantity=qty),)


def set_line_quantity(lines: Lines, product_id: str, qty: int) -> Lines:
    if qty <= 0:
        return remove_line(lines, product_id)
    return tuple(
        replace(line, quantity=qty) if line.product.id == product_id else line
        for line in lines
    )


def remove_line(lines: Lines, product_id: str) -> Lines:
    return tuple(line for line in lines if line.product.id != product_id)


def subtotal_of(lines: Lines) -> int:
    return sum(line.line_total for line in lines)


class Cart:
    def __init__(self):
        self._lines: Lines = ()
        self._listeners: List[Callable[["Cart"], None]] = []

    def subscribe(self, callback: Callable[["Cart"], None]) -> Callable[[], None]:
        self._listeners.append(callback)
        return lambda: self._listeners.remove(callback)

    def _commit(self, lines: Lines) -> None:
        if lines == self._lines:
            return
        self._lines = lines
        for callback in list(self._listeners):
            callback(self)

    @property
    def items(self) -> Lines:
        return self._lines

    @property
    def subtotal(self) -> int:
        return subtotal_of(self._lines)

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def line_for(self, product_id: str) -> Optional[CartLine]:
        for line in self._lines:
            if line.product.id == product_id:
                return line
        return None

    def add_to_cart(self, product: Product, qty: int = 1) -> None:
        if not _is_positive_int(qty):
            logger.debug(f"Ignoring add of {product.id} with quantity {qty!r}")
        self._commit(add_line(self._lines, product, qty))

    def set_quantity(self, product_id: str, qty: int) -> None:
        self._commit(set_line_quantity(self._lines, product_id, qty))

    def remove_from_cart(self, product_id: str) -> None:
        self._commit(remove_line(self._lines, product_id))

    def clear_cart(self) -> None:
        """Only for after the order ledger confirmed the order."""
        self._commit(())
