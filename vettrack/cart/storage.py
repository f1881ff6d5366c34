"""
Cart Storage - durable key-value backends

The cart only needs `get(key) -> str | None` and `set(key, value)`.
Backends:
- MemoryStorage: process-local dict (tests, previews)
- FileStorage: one JSON file per key in a profile directory
- RedisStorage: Upstash Redis with a 24h TTL for abandoned carts
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

from vettrack.logging import get_logger

from .models import CartLine

logger = get_logger(__name__)


# Environment variables
CART_STORAGE_KEY = os.environ.get("CART_STORAGE_KEY", "vettrack_cart")
CART_STORAGE_BACKEND = os.environ.get("CART_STORAGE_BACKEND", "file")
CART_STORAGE_DIR = os.environ.get(
    "CART_STORAGE_DIR", str(Path.home() / ".vettrack" / "storage")
)

# Upstash Redis - standard env var names
UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL", "")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")


class RedisKeys:
    """Redis key prefixes."""

    CART = "cart:"  # cart:{storage_key}

    @staticmethod
    def cart_key(key: str) -> str:
        return f"{RedisKeys.CART}{key}"


class TTL:
    """Time-to-live constants for Redis keys (seconds)."""

    CART = 86400  # 24 hours


class CartStorage(Protocol):
    """Durable string store scoped to one profile."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStorage:
    """Dict-backed storage."""

    def __init__(self, initial: Optional[dict] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class FileStorage:
    """
    Stores each key as `<directory>/<key>.json`.

    Writes go through a temp file and os.replace so a crash mid-write
    never leaves a truncated cart behind.
    """

    def __init__(self, directory: str | Path = CART_STORAGE_DIR):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class RedisStorage:
    """Upstash Redis storage (sync client)."""

    def __init__(self, client=None, ttl: int = TTL.CART):
        self._client = client  # Lazy initialization
        self.ttl = ttl

    @property
    def client(self):
        """Get Redis client (lazy initialization)."""
        if self._client is None:
            if not UPSTASH_REDIS_REST_URL or not UPSTASH_REDIS_REST_TOKEN:
                raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
            from upstash_redis import Redis

            self._client = Redis(url=UPSTASH_REDIS_REST_URL, token=UPSTASH_REDIS_REST_TOKEN)
        return self._client

    def get(self, key: str) -> Optional[str]:
        value = self.client.get(RedisKeys.cart_key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        self.client.set(RedisKeys.cart_key(key), value, ex=self.ttl)


def get_storage(backend: str = CART_STORAGE_BACKEND) -> CartStorage:
    """Build the configured storage backend."""
    backend = backend.lower()
    if backend == "memory":
        return MemoryStorage()
    if backend == "file":
        return FileStorage(CART_STORAGE_DIR)
    if backend == "redis":
        return RedisStorage()
    raise ValueError(f"Unknown cart storage backend: {backend}")


# ==================== SERIALIZATION ====================

def dump_lines(lines: Iterable[CartLine]) -> str:
    """Serialize the whole cart as a JSON array."""
    return json.dumps([line.to_dict() for line in lines], ensure_ascii=False)


def load_lines(raw: str) -> List[CartLine]:
    """
    Parse a persisted cart.

    Raises:
        ValueError: payload is not a JSON array of valid lines, a line
            breaks 1 <= quantity <= stock_limit, or two lines share a product
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Cart payload is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ValueError("Cart payload must be a JSON array")

    lines: List[CartLine] = []
    seen: set[str] = set()
    for entry in data:
        if not isinstance(entry, dict):
            raise ValueError("Cart line must be a JSON object")
        try:
            line = CartLine.from_dict(entry)
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid cart line: {e}") from e
        if line.quantity < 1:
            raise ValueError(f"Invalid quantity {line.quantity} for product {line.product_id}")
        if line.exceeds_stock(line.quantity):
            raise ValueError(
                f"Quantity {line.quantity} above stock limit {line.stock_limit} for product {line.product_id}"
            )
        if line.product_id in seen:
            raise ValueError(f"Duplicate line for product {line.product_id}")
        seen.add(line.product_id)
        lines.append(line)
    return lines
