"""Storefront: composition root for the client core.

Created once at process start and closed at shutdown. The UI layer talks to
this object only; it owns the session store, the gateway and the local
cart/favorites state.
"""

import logging
from typing import Optional

import httpx

from shopclient.auth import AuthManager
from shopclient.cart import Cart
from shopclient.checkout import OrderReceipt, checkout
from shopclient.config import ClientSettings, get_settings
from shopclient.favorites import FavoritesSynchronizer
from shopclient.gateway import ApiGateway
from shopclient.session import Identity, Session, SessionStore

logger = logging.getLogger(__name__)


class Storefront:
    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        *,
        store: Optional[SessionStore] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        settings = settings or get_settings()
        self.store = store if store is not None else SessionStore(settings.session_file)
        self.gateway = ApiGateway(
            self.store, settings.api_base_url, timeout=settings.request_timeout, client=http_client,
        )
        self.auth = AuthManager(self.store, self.gateway)
        self.cart = Cart()
        self.favorites = FavoritesSynchronizer(self.gateway)
        self.auth.on_change(self._on_session_change)

    def _on_session_change(self, session: Optional[Session]) -> None:
        if session is None:
            self.favorites.clear()

    async def start(self) -> Optional[Identity]:
        """Restore the persisted session and, if there is one, its favorites."""
        session = self.auth.restore()
        if session is None:
            return None
        await self.favorites.load()
        return session.identity

    async def close(self) -> None:
        await self.gateway.aclose()

    async def __aenter__(self) -> "Storefront":
        await self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def login(self, email: str, password: str) -> Identity:
        identity = await self.auth.login(email, password)
        await self.favorites.load()
        return identity

    async def signup(self, name: str, email: str, password: str) -> Identity:
        identity = await self.auth.signup(name, email, password)
        await self.favorites.load()
        return identity

    def logout(self) -> None:
        self.auth.logout()

    async def checkout(self) -> OrderReceipt:
        return await checkout(self.cart, self.gateway)
