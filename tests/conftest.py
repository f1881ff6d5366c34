"""Pytest configuration and fixtures"""
import os
import pytest

# Set test environment variables before vettrack reads them
os.environ.setdefault("CART_STORAGE_BACKEND", "memory")
os.environ.setdefault("CART_LANGUAGE", "en")
os.environ.setdefault("VETTRACK_API_URL", "http://vettrack.test")

from vettrack.cart import CartStore, MemoryStorage
from vettrack.notifications import CollectingSink


@pytest.fixture
def storage():
    """Empty in-memory storage"""
    return MemoryStorage()


@pytest.fixture
def sink():
    """Toast sink that records every notification"""
    return CollectingSink()


@pytest.fixture
def store(storage, sink):
    """Hydrated cart store over empty storage"""
    return CartStore(storage=storage, notify=sink, lang="en").hydrate()


@pytest.fixture
def sample_product():
    """Dry food product as the catalog sends it"""
    return {
        "id": "p1",
        "name": "Adult Dog Food 3kg",
        "price": "10.00",
        "stockQty": 5,
        "images": ["https://cdn.vettrack.test/p1.jpg"],
        "brand": "Royal Canin",
    }


@pytest.fixture
def second_product():
    """Product with a different price"""
    return {
        "id": "p2",
        "name": "Cat Treats",
        "price": "4.50",
        "stockQty": 10,
        "images": [],
        "brand": None,
    }


@pytest.fixture
def unlimited_product():
    """Product without stock information"""
    return {
        "id": "p3",
        "name": "Flea Collar",
        "price": "7.25",
    }
