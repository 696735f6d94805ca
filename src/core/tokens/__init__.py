"""Personal access token stores."""
from src.core.tokens.memory import InMemoryTokenStore
from src.core.tokens.store import TokenStore

__all__ = [
    "TokenStore",
    "InMemoryTokenStore",
]
