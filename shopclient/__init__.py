"""Client core of the storefront: session, gateway, cart, favorites, checkout."""

from shopclient.app import Storefront
from shopclient.cart import Cart, CartLine, Product
from shopclient.favorites import FavoritesSynchronizer, ToggleState
from shopclient.session import Identity, Session, SessionStore

__all__ = [
    "Cart",
    "CartLine",
    "FavoritesSynchronizer",
    "Identity",
    "Product",
    "Session",
    "SessionStore",
    "Storefront",
    "ToggleState",
]
