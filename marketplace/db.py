"""
Storage Module - Upstash Redis Client and Cart Storage Settings

Provides:
- Async Upstash Redis client (singleton) used as the durable cart store
- Storage key names and persistence settings read from the environment
"""

import os
from typing import Optional

from upstash_redis.asyncio import Redis as AsyncRedis

from marketplace.errors import ERROR_STORAGE_NOT_CONFIGURED


# Upstash Redis - standard env var names per docs
UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL", "")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")

# Number of attempts for a single snapshot write (first try included)
CART_SAVE_ATTEMPTS = max(1, int(os.environ.get("CART_SAVE_ATTEMPTS", "3")))


# Singleton instance
_redis_client: Optional[AsyncRedis] = None


def get_redis() -> AsyncRedis:
    """
    Get async Upstash Redis client (singleton).

    Uses standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN

    The client exposes async get/set on string values, which is all the
    persistence bridge needs.
    """
    global _redis_client

    if _redis_client is None:
        if not UPSTASH_REDIS_REST_URL or not UPSTASH_REDIS_REST_TOKEN:
            raise ValueError(ERROR_STORAGE_NOT_CONFIGURED)
        _redis_client = AsyncRedis(url=UPSTASH_REDIS_REST_URL, token=UPSTASH_REDIS_REST_TOKEN)

    return _redis_client


class StorageKeys:
    """Key names for persisted cart data."""

    # Whole cart snapshot (JSON array of line items)
    PRODUCTS = os.environ.get("CART_STORAGE_KEY", "@GoMarketplace:products")
