"""Cart package: models, storage, and the cart store."""
from .models import CartLine, CartState, ProductSnapshot
from .storage import CartStorage, FileStorage, MemoryStorage, RedisStorage, get_storage
from .store import CartStore, get_cart_store

__all__ = [
    "CartLine",
    "CartState",
    "ProductSnapshot",
    "CartStorage",
    "FileStorage",
    "MemoryStorage",
    "RedisStorage",
    "get_storage",
    "CartStore",
    "get_cart_store",
]
