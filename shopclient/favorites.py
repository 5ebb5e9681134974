"""Favorites synchronizer: optimistic local favorites reconciled with the server.

Invariants:
    - Local state changes before the network call; the UI never waits
    - A failed add removes the product again; a failed remove puts the product
      back where it was, without reviving other products rolled back meanwhile
    - Confirmations reach the server in the order the toggles were issued
    - Only the latest toggle of a product may roll that product back
      (last request wins)
    - After clear() (logout) nothing from the old session is applied: queued
      confirmations are never sent and late results are dropped

Design Decisions:
    - State is an immutable tuple transformed by pure functions; the
      synchronizer only swaps the current value and tracks what is pending
    - A 409 on add means the server already agrees, so it counts as confirmed.
      A 404 on remove is raised to the caller, but the local removal is kept
      because the server does not hold the favorite either
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Tuple

from shopclient.errors import ConflictError, NotFoundError
from shopclient.gateway import ApiGateway

logger = logging.getLogger(__name__)


class ToggleState(str, Enum):
    IDLE = "idle"
    APPLIED = "optimistically_applied"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"
    DISCARDED = "discarded"


@dataclass(frozen=True)
class FavoritesState:
    """Favorited product ids, most recent first."""
    ids: Tuple[str, ...] = ()

    def __contains__(self, product_id: str) -> bool:
        return product_id in self.ids

    def __len__(self) -> int:
        return len(self.ids)


def with_added(state: FavoritesState, product_id: str) -> FavoritesState:
    if product_id in state.ids:
        return state
    return FavoritesState((product_id,) + state.ids)


def with_removed(state: FavoritesState, product_id: str) -> FavoritesState:
    if product_id not in state.ids:
        return state
    return FavoritesState(tuple(pid for pid in state.ids if pid != product_id))


def with_inserted(state: FavoritesState, product_id: str, index: int) -> FavoritesState:
    if product_id in state.ids:
        return state
    index = max(0, min(index, len(state.ids)))
    return FavoritesState(state.ids[:index] + (product_id,) + state.ids[index:])


@dataclass(frozen=True)
class ToggleResult:
    product_id: str
    action: str  # "add" | "remove"
    state: ToggleState


class FavoritesSynchronizer:
    def __init__(self, gateway: ApiGateway):
        self._gateway = gateway
        self._state = FavoritesState()
        self._listeners: List[Callable[[FavoritesState], None]] = []

        # Session epoch; bumped by clear() so late results can be recognised
        self._epoch = 0
        # Global issue counter and the latest toggle per product
        self._seq = 0
        self._latest: Dict[str, int] = {}
        self._pending: Dict[str, int] = {}
        self._status: Dict[str, ToggleState] = {}
        # FIFO: confirmations are sent one at a time, in issue order
        self._confirm_lock = asyncio.Lock()

    # ─── Observation ───────────────────────────────────────────

    @property
    def state(self) -> FavoritesState:
        return self._state

    @property
    def favorites(self) -> Tuple[str, ...]:
        return self._state.ids

    def is_favorite(self, product_id: str) -> bool:
        return product_id in self._state

    def is_pending(self, product_id: str) -> bool:
        return self._pending.get(product_id, 0) > 0

    def status(self, product_id: str) -> ToggleState:
        return self._status.get(product_id, ToggleState.IDLE)

    def subscribe(self, callback: Callable[[FavoritesState], None]) -> Callable[[], None]:
        self._listeners.append(callback)
        return lambda: self._listeners.remove(callback)

    def _apply(self, state: FavoritesState) -> None:
        if state == self._state:
            return
        self._state = state
        for callback in list(self._listeners):
            callback(state)

    # ─── Pending bookkeeping ───────────────────────────────────

    def _begin(self, product_id: str) -> Tuple[int, int]:
        self._seq += 1
        self._latest[product_id] = self._seq
        self._pending[product_id] = self._pending.get(product_id, 0) + 1
        self._status[product_id] = ToggleState.APPLIED
        return self._epoch, self._seq

    def _end(self, epoch: int, product_id: str, seq: int, outcome: ToggleState) -> None:
        if epoch != self._epoch:
            return
        left = self._pending.get(product_id, 0) - 1
        if left > 0:
            self._pending[product_id] = left
        else:
            self._pending.pop(product_id, None)
        if self._latest.get(product_id) == seq:
            self._status[product_id] = outcome

    def _discarded(self, product_id: str, action: str) -> ToggleResult:
        logger.debug(f"Dropping {action} confirmation for {product_id}: session ended")
        return ToggleResult(product_id, action, ToggleState.DISCARDED)

    # ─── Toggles ───────────────────────────────────────────────

    async def add(self, product_id: str) -> ToggleResult:
        epoch, seq = self._begin(product_id)
        self._apply(with_added(self._state, product_id))
        outcome = ToggleState.CONFIRMED
        try:
            async with self._confirm_lock:
                if epoch != self._epoch:
                    return self._discarded(product_id, "add")
                await self._gateway.add_favorite(product_id)
        except ConflictError:
            # Server already had it; both sides agree
            if epoch != self._epoch:
                return self._discarded(product_id, "add")
        except Exception as e:
            if epoch != self._epoch:
                return self._discarded(product_id, "add")
            outcome = ToggleState.ROLLED_BACK
            if self._latest.get(product_id) == seq:
                self._apply(with_removed(self._state, product_id))
            logger.warning(f"Add favorite {product_id} failed, rolled back: {e}")
            raise
        finally:
            self._end(epoch, product_id, seq, outcome)

        if epoch != self._epoch:
            return self._discarded(product_id, "add")
        return ToggleResult(product_id, "add", ToggleState.CONFIRMED)

    async def remove(self, product_id: str) -> ToggleResult:
        epoch, seq = self._begin(product_id)
        snapshot = self._state
        self._apply(with_removed(self._state, product_id))
        outcome = ToggleState.CONFIRMED
        try:
            async with self._confirm_lock:
                if epoch != self._epoch:
                    return self._discarded(product_id, "remove")
                await self._gateway.remove_favorite(product_id)
        except NotFoundError:
            if epoch != self._epoch:
                return self._discarded(product_id, "remove")
            # Server never had it: keep the local removal, but report the mismatch
            logger.info(f"Remove favorite {product_id}: not found on server")
            raise
        except Exception as e:
            if epoch != self._epoch:
                return self._discarded(product_id, "remove")
            outcome = ToggleState.ROLLED_BACK
            if self._latest.get(product_id) == seq:
                self._apply(self._restore(snapshot, product_id))
            logger.warning(f"Remove favorite {product_id} failed, rolled back: {e}")
            raise
        finally:
            self._end(epoch, product_id, seq, outcome)

        if epoch != self._epoch:
            return self._discarded(product_id, "remove")
        return ToggleResult(product_id, "remove", ToggleState.CONFIRMED)

    def _restore(self, snapshot: FavoritesState, product_id: str) -> FavoritesState:
        # Only this product is put back. The snapshot may still hold optimistic
        # adds of other products that have since been rolled back or re-toggled
        if product_id not in snapshot:
            return self._state
        # Put it back right after the closest entry that preceded it and is still there
        ids = self._state.ids
        index = 0
        for pid in reversed(snapshot.ids[:snapshot.ids.index(product_id)]):
            if pid in ids:
                index = ids.index(pid) + 1
                break
        return with_inserted(self._state, product_id, index)

    async def toggle(self, product_id: str) -> ToggleResult:
        if self.is_favorite(product_id):
            return await self.remove(product_id)
        return await self.add(product_id)

    # ─── Session lifecycle ─────────────────────────────────────

    async def load(self) -> Tuple[str, ...]:
        """Replace local state with the server's list for the current session."""
        epoch = self._epoch
        ids = await self._gateway.list_favorites()
        if epoch != self._epoch:
            logger.debug("Dropping favorites list: session changed while loading")
            return self._state.ids
        self._apply(FavoritesState(tuple(dict.fromkeys(ids))))
        logger.info(f"Loaded {len(self._state)} favorites")
        return self._state.ids

    def clear(self) -> None:
        """Forget everything of the current session. Synchronous, no network."""
        self._epoch += 1
        self._latest.clear()
        self._pending.clear()
        self._status.clear()
        # Queued confirmations of the old session stay on the old lock and bail out
        self._confirm_lock = asyncio.Lock()
        self._apply(FavoritesState())
