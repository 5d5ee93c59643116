"""Keeps the durable cart snapshot in sync with CartStore."""
import asyncio
import contextlib
from typing import Callable, Optional

from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from marketplace.errors import ERROR_BRIDGE_NOT_STARTED
from marketplace.logging import get_logger
from .models import dump_snapshot, parse_snapshot
from .storage import CART_SAVE_ATTEMPTS, KeyValueStore, StorageKeys
from .store import CartStore, Snapshot

logger = get_logger(__name__)


class PersistenceBridge:
    """
    Loads the cart once at startup and saves it after every change.

    Saves are fire-and-forget for the code that mutates the cart: each
    change serializes the full snapshot and puts it on a queue. A single
    writer task drains the queue in order, so the store always ends up
    holding the latest snapshot. Failed writes are retried, then logged
    and dropped; the in-memory cart stays authoritative.

    Usage:
        bridge = PersistenceBridge(store, get_redis())
        await bridge.start()
        ...
        await bridge.aclose()
    """

    def __init__(
        self,
        store: CartStore,
        kv: KeyValueStore,
        key: str = StorageKeys.PRODUCTS,
        attempts: int = CART_SAVE_ATTEMPTS,
        retry_wait=None,
    ):
        self.store = store
        self.key = key
        self._kv = kv
        self._attempts = max(1, attempts)
        self._retry_wait = retry_wait or wait_exponential(multiplier=0.2, max=5)
        self._queue: "asyncio.Queue[str]" = asyncio.Queue()
        self._writer: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def running(self) -> bool:
        return self._writer is not None and not self._writer.done()

    @property
    def pending(self) -> int:
        """Number of snapshots waiting to be written."""
        return self._queue.qsize()

    async def load(self) -> bool:
        """
        Seed the store from the persisted snapshot.

        Returns:
            True if a snapshot was found and applied
        """
        try:
            raw = await self._kv.get(self.key)
        except Exception as e:
            logger.error(f"Failed to read cart snapshot: {e}", exc_info=True)
            return False

        if not raw:
            logger.debug("No persisted cart snapshot, starting empty")
            return False

        try:
            items = parse_snapshot(raw)
        except (KeyError, TypeError, ValueError) as e:
            # Corrupted data - keep the empty cart, next save overwrites it
            logger.warning(f"Corrupted cart snapshot under {self.key}: {e}")
            return False

        self.store._hydrate(items)
        logger.info(f"Loaded cart with {len(self.store)} line(s)")
        return True

    async def start(self) -> None:
        """Load the snapshot, then persist every subsequent change."""
        if self.running:
            return

        await self.load()
        self._unsubscribe = self.store.subscribe(self._on_change)
        self._writer = asyncio.create_task(self._run_writer())

    async def flush(self) -> None:
        """Wait until every queued snapshot has been written (or given up on)."""
        if not self.running:
            raise RuntimeError(ERROR_BRIDGE_NOT_STARTED)
        await self._queue.join()

    async def aclose(self) -> None:
        """Stop observing the store, drain pending saves and stop the writer."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        if self._writer is None:
            return

        if self.running:
            await self._queue.join()
        self._writer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._writer
        self._writer = None

    def _on_change(self, snapshot: Snapshot) -> None:
        # A listener notified earlier may have changed the cart again;
        # always queue the current state, never the delivered one.
        self._queue.put_nowait(dump_snapshot(self.store.products))

    async def _run_writer(self) -> None:
        while True:
            payload = await self._queue.get()
            try:
                await self._write(payload)
            except Exception as e:
                logger.error(f"Failed to save cart snapshot: {e}", exc_info=True)
            finally:
                self._queue.task_done()

    async def _write(self, payload: str) -> None:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._attempts),
            wait=self._retry_wait,
            reraise=True,
        ):
            with attempt:
                await self._kv.set(self.key, payload)
