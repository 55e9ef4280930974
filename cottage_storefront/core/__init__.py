# Core modules

from .config import StorefrontSettings, get_settings
from .cart import CartStore, MenuItem, LineItem
from .storage import KeyValueStore, MemoryStore, JsonFileStore

__all__ = [
    "StorefrontSettings",
    "get_settings",
    "CartStore",
    "MenuItem",
    "LineItem",
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
]
