"""Row store client, record decoding and the profile cache."""

from .client import RowStoreClient
from .records import UserRecord, format_balance, next_identifier, normalize_row
from .repository import ProfileStore

__all__ = [
    "ProfileStore",
    "RowStoreClient",
    "UserRecord",
    "format_balance",
    "next_identifier",
    "normalize_row",
]
