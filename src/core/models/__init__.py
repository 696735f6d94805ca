from src.core.models.token import (HASH_MAX_LENGTH, PagedResult, Pagination,
                                   PersonalAccessToken, ensure_utc)

__all__ = [
    "HASH_MAX_LENGTH",
    "PersonalAccessToken",
    "Pagination",
    "PagedResult",
    "ensure_utc",
]
