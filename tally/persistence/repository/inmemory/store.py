"""In-memory vote store for tests and offline runs."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional
from weakref import WeakValueDictionary

from tally.domain.error import ConcurrencyConflict
from tally.domain.model import ProductAggregate, QuotaState, VoteRecord
from tally.domain.repository import StoreTransaction, VoteKey, VoteStore
from tally.domain.value import ProductId, VoterId

from .aggregate import InMemoryAggregateRepository
from .quota import InMemoryQuotaRepository
from .vote import InMemoryVoteRepository

RecordKey = tuple[ProductId, VoterId]


class InMemoryStoreTransaction(StoreTransaction):
    """Transaction over an InMemoryVoteStore.

    Writes are staged here and only reach the store in one synchronous
    commit, so other coroutines never see a ledger change without the
    matching aggregate change. Locks are held until the transaction ends.
    """

    def __init__(self, store: "InMemoryVoteStore") -> None:
        self.store = store
        self.record_writes: dict[RecordKey, Optional[VoteRecord]] = {}
        self.aggregate_writes: dict[ProductId, ProductAggregate] = {}
        self.quota_writes: dict[VoterId, QuotaState] = {}
        self._held: dict[str, asyncio.Lock] = {}

        self.votes = InMemoryVoteRepository(self)
        self.aggregates = InMemoryAggregateRepository(self)
        self.quotas = InMemoryQuotaRepository(self)

    async def lock(self, name: str) -> None:
        """Acquire a named lock for the rest of the transaction (re-entrant).

        Raises:
            ConcurrencyConflict: If the lock is not released within the store timeout
        """
        if name in self._held:
            return

        lock = self.store.lock_for(name)
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self.store.lock_timeout)
        except asyncio.TimeoutError as e:
            raise ConcurrencyConflict(f"Timed out waiting for lock {name}") from e
        self._held[name] = lock

    def release(self) -> None:
        for lock in reversed(list(self._held.values())):
            lock.release()
        self._held.clear()


class InMemoryVoteStore(VoteStore):
    """Process-local implementation of VoteStore.

    State is owned by the store instance and only reachable through its
    transactions.
    """

    def __init__(self, lock_timeout: float = 5.0) -> None:
        self.records: dict[RecordKey, VoteRecord] = {}
        self.aggregates: dict[ProductId, ProductAggregate] = {}
        self.quotas: dict[VoterId, QuotaState] = {}
        self.lock_timeout = lock_timeout
        # Entries disappear once no transaction holds or waits on the lock
        self._locks: WeakValueDictionary[str, asyncio.Lock] = WeakValueDictionary()

    def lock_for(self, name: str) -> asyncio.Lock:
        lock = self._locks.get(name)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[name] = lock
        return lock

    @asynccontextmanager
    async def transaction(
        self, key: Optional[VoteKey] = None
    ) -> AsyncIterator[InMemoryStoreTransaction]:
        """Open a transaction, optionally holding the per-key lock."""
        tx = InMemoryStoreTransaction(self)
        try:
            if key is not None:
                await tx.lock(key.lock_name)
            yield tx
            self._commit(tx)
        finally:
            tx.release()

    def _commit(self, tx: InMemoryStoreTransaction) -> None:
        """Apply staged writes. Must not await."""
        for key, record in tx.record_writes.items():
            if record is None:
                self.records.pop(key, None)
            else:
                self.records[key] = record
        self.aggregates.update(tx.aggregate_writes)
        self.quotas.update(tx.quota_writes)
