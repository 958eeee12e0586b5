"""urlmini services - business logic layer."""

from urlmini.services.auth import AuthService
from urlmini.services.link import LinkService
from urlmini.services.store import DatabaseStore, Store, StoreFactory
from urlmini.services.token_codec import TokenCodec

__all__ = [
    "AuthService",
    "DatabaseStore",
    "LinkService",
    "Store",
    "StoreFactory",
    "TokenCodec",
]
