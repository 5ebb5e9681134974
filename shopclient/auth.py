"""Auth session manager: login, signup and logout on the client.

Every attempt starts by clearing the stored session, and a successful
response is stored as one `Session` value. Listeners are called
synchronously on every change, so dependent state (favorites) is dropped
before the next network call can start.
"""

import logging
from typing import Callable, List, Optional

from shopclient.gateway import ApiGateway
from shopclient.session import Identity, Session, SessionStore

logger = logging.getLogger(__name__)

Listener = Callable[[Optional[Session]], None]


class AuthManager:
    def __init__(self, store: SessionStore, gateway: ApiGateway):
        self._store = store
        self._gateway = gateway
        self._listeners: List[Listener] = []
        self.loading = False

    @property
    def user(self) -> Optional[Identity]:
        return self._store.identity

    @property
    def is_authenticated(self) -> bool:
        return self._store.current is not None

    def on_change(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _set(self, session: Optional[Session]) -> None:
        self._store.save(session)
        for listener in list(self._listeners):
            listener(session)

    def restore(self) -> Optional[Session]:
        """Pick up the session persisted by a previous run."""
        session = self._store.load()
        if session is not None:
            logger.info(f"Restored session for user {session.identity.id}")
            for listener in list(self._listeners):
                listener(session)
        return session

    async def login(self, email: str, password: str) -> Identity:
        self.loading = True
        try:
            self._set(None)
            session = await self._gateway.login(email, password)
            self._set(session)
            logger.info(f"Logged in as user {session.identity.id}")
            return session.identity
        finally:
            self.loading = False

    async def signup(self, name: str, email: str, password: str) -> Identity:
        self.loading = True
        try:
            self._set(None)
            session = await self._gateway.signup(name, email, password)
            self._set(session)
            logger.info(f"Signed up user {session.identity.id}")
            return session.identity
        finally:
            self.loading = False

    def logout(self) -> None:
        self._set(None)
        logger.info("Logged out")
