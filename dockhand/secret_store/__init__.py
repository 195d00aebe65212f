"""Secret store access: HTTP client and local token storage."""

from dockhand.secret_store.client import FetchResult, SecretStoreClient
from dockhand.secret_store.tokens import TokenStore

__all__ = [
    "FetchResult",
    "SecretStoreClient",
    "TokenStore",
]
