"""Authenticated request gateway.

Wraps an httpx.AsyncClient: attaches the bearer token of the current session
and turns every non-2xx response into a typed error carrying the server's
message. Authenticated calls without a session fail before anything is sent.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx

from shopclient.errors import (
    ApiError, AuthError, ConflictError, NetworkError, NotFoundError,
    PersistenceError, Unauthenticated, ValidationError,
)
from shopclient.session import Identity, Session, SessionStore

logger = logging.getLogger(__name__)

_STATUS_ERRORS = {
    400: ValidationError,
    401: AuthError,
    403: AuthError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
}


def _error_for(response: httpx.Response) -> ApiError:
    try:
        body = response.json()
    except ValueError:
        body = None

    message = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("detail")
    if not isinstance(message, str) or not message:
        message = f"Request failed ({response.status_code})"

    if response.status_code in _STATUS_ERRORS:
        cls = _STATUS_ERRORS[response.status_code]
    elif response.status_code >= 500:
        cls = PersistenceError
    else:
        cls = ApiError
    return cls(message, status=response.status_code, body=body)


def _malformed(what: str, data: Any) -> ApiError:
    logger.warning(f"Malformed {what} response: {data!r}")
    return ApiError(f"Malformed {what} response", body=data)


def _session_from(data: Any) -> Session:
    if not isinstance(data, dict):
        raise _malformed("session", data)
    try:
        return Session.from_json(data)
    except ValueError as e:
        raise _malformed("session", data) from e


class ApiGateway:
    def __init__(
        self,
        store: SessionStore,
        base_url: str = "",
        *,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._store = store
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        auth: bool = True,
    ) -> Any:
        headers = {}
        if auth:
            token = self._store.token
            if not token:
                raise Unauthenticated()
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._client.request(method, path, json=json, params=params, headers=headers)
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise NetworkError(f"Network error: {e}") from e

        if response.is_success:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                logger.warning(f"{method} {path} -> {response.status_code}: body is not JSON")
                raise ApiError(
                    f"Invalid response body ({response.status_code})", status=response.status_code, body=response.text,
                ) from e

        error = _error_for(response)
        logger.info(f"{method} {path} -> {response.status_code}: {error.message}")
        raise error

    # ─── Auth ──────────────────────────────────────────────────

    async def signup(self, name: str, email: str, password: str) -> Session:
        data = await self.request(
            "POST", "/auth/signup", json={"name": name, "email": email, "password": password}, auth=False,
        )
        return _session_from(data)

    async def login(self, email: str, password: str) -> Session:
        data = await self.request("POST", "/auth/login", json={"email": email, "password": password}, auth=False)
        return _session_from(data)

    async def me(self) -> Identity:
        return Identity.model_validate(await self.request("GET", "/auth/me"))

    # ─── Orders ────────────────────────────────────────────────

    async def place_order(self, items: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
        return await self.request("POST", "/orders", json={"items": list(items)})

    async def list_orders(self, page: int = 1, page_size: int = 10) -> Dict[str, Any]:
        return await self.request("GET", "/orders", params={"page": page, "page_size": page_size})

    async def get_order(self, order_id: int) -> Dict[str, Any]:
        return await self.request("GET", f"/orders/{order_id}")

    # ─── Favorites ─────────────────────────────────────────────

    async def list_favorites(self) -> List[str]:
        data = await self.request("GET", "/favorites")
        if not isinstance(data, dict) or not isinstance(data.get("favorites"), list):
            raise _malformed("favorites", data)
        return [str(pid) for pid in data["favorites"]]

    async def add_favorite(self, product_id: str) -> None:
        await self.request("POST", "/favorites", json={"productId": product_id})

    async def remove_favorite(self, product_id: str) -> None:
        await self.request("DELETE", f"/favorites/{quote(product_id, safe='')}")

    async def health(self) -> bool:
        data = await self.request("GET", "/health", auth=False)
        return isinstance(data, dict) and bool(data.get("ok"))
