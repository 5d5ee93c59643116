"""Pytest configuration and fixtures"""
import json
import os
import pytest
from unittest.mock import AsyncMock

from tenacity import wait_none

# Keep Redis unconfigured and logs quiet during tests
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from marketplace.cart import CartStore, MemoryKeyValueStore, ProductDescriptor  # noqa: E402
from marketplace.db import StorageKeys  # noqa: E402


@pytest.fixture
def shirt():
    """Sample product descriptor"""
    return ProductDescriptor(id="p1", title="Shirt", image_url="u", price=10)


@pytest.fixture
def mug():
    """Second sample product descriptor"""
    return ProductDescriptor(id="p2", title="Mug", image_url="https://img/mug.png", price=4.5)


@pytest.fixture
def store():
    """Empty cart store"""
    return CartStore()


@pytest.fixture
def memory_kv():
    """Empty in-memory key-value store"""
    return MemoryKeyValueStore()


@pytest.fixture
def persisted_kv():
    """Key-value store holding a previously saved cart"""
    snapshot = [
        {"id": "p2", "title": "Mug", "image_url": "https://img/mug.png", "price": 4.5, "quantity": 3}
    ]
    return MemoryKeyValueStore({StorageKeys.PRODUCTS: json.dumps(snapshot)})


@pytest.fixture
def mock_kv():
    """Mock async key-value store (Upstash Redis shaped)"""
    kv = AsyncMock()
    kv.get = AsyncMock(return_value=None)
    kv.set = AsyncMock(return_value=True)
    return kv


@pytest.fixture
def no_wait():
    """Retry wait strategy that does not sleep"""
    return wait_none()
