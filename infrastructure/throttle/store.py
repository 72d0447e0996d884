"""In-memory registry of login attempt records.

One AttemptRecord per identity, process-local, gone on restart. Unlocked
records are kept in least-recently-touched order so eviction can walk from
the front:

- a record idle for longer than ``idle_ttl`` is dropped;
- past ``max_records`` the least-recently-touched records go first.

Locked records are never evicted. They are parked outside the touch order,
in a heap keyed by ``locked_until``, so sweeps do not walk over them; a
sweep that finds a lock expired puts the record back at the end of the
touch order, as if it had been touched at that moment. Callers touch a
record after changing its lock so the store can park or release it.

Sweeps run lazily when a record is created; there is no background task.
The store does no locking of its own; LoginThrottle serializes access.
"""

from __future__ import annotations

import heapq
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from shared.logging import get_logger

log = get_logger(__name__)


@dataclass
class AttemptRecord:
    identity: str
    failure_count: int = 0
    last_attempt_at: Optional[datetime] = None
    locked_until: Optional[datetime] = None

    def is_locked(self, now: datetime) -> bool:
        return self.locked_until is not None and now < self.locked_until


class InMemoryThrottleStore:
    def __init__(
        self,
        idle_ttl: timedelta = timedelta(hours=24),
        max_records: int = 100_000,
    ) -> None:
        if idle_ttl <= timedelta(0):
            raise ValueError("idle_ttl must be positive")
        if max_records < 1:
            raise ValueError("max_records must be at least 1")
        self.idle_ttl = idle_ttl
        self.max_records = max_records
        self._records: dict[str, AttemptRecord] = {}
        # identity -> last touch, unlocked records only, oldest first
        self._touch_order: OrderedDict[str, datetime] = OrderedDict()
        # (locked_until, identity); entries for released records are skipped
        self._lock_heap: list[tuple[datetime, str]] = []
        self._parked: set[str] = set()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, identity: str) -> bool:
        return identity in self._records

    @property
    def locked_count(self) -> int:
        """Records currently parked as locked."""
        return len(self._parked)

    def get(self, identity: str) -> Optional[AttemptRecord]:
        return self._records.get(identity)

    def get_or_create(self, identity: str, now: datetime) -> AttemptRecord:
        record = self._records.get(identity)
        if record is None:
            self.sweep(now, reserve=1)
            record = AttemptRecord(identity=identity, last_attempt_at=now)
            self._records[identity] = record
            self._touch_order[identity] = now
        else:
            self.touch(identity, now)
        return record

    def touch(self, identity: str, now: datetime) -> None:
        record = self._records.get(identity)
        if record is None:
            return
        if record.is_locked(now):
            self._park(identity, record)
            return
        self._parked.discard(identity)
        self._touch_order[identity] = now
        self._touch_order.move_to_end(identity)

    def sweep(self, now: datetime, reserve: int = 0) -> int:
        """Evict idle and over-capacity records; return how many went.

        *reserve* makes room for records about to be inserted.
        """
        self._release_expired(now)

        cutoff = now - self.idle_ttl
        overflow = len(self._records) + reserve - self.max_records
        doomed: list[str] = []
        locked: list[str] = []

        for identity, touched_at in self._touch_order.items():
            if self._records[identity].is_locked(now):
                # Locked without a touch; park it below.
                locked.append(identity)
                continue
            if touched_at <= cutoff:
                doomed.append(identity)
            elif overflow - len(doomed) > 0:
                doomed.append(identity)
            else:
                break

        for identity in locked:
            self._park(identity, self._records[identity])

        for identity in doomed:
            del self._records[identity]
            del self._touch_order[identity]

        if doomed:
            log.info(
                "throttle_records_evicted",
                evicted=len(doomed),
                remaining=len(self._records),
            )
        return len(doomed)

    def clear(self) -> None:
        self._records.clear()
        self._touch_order.clear()
        self._lock_heap.clear()
        self._parked.clear()

    def _park(self, identity: str, record: AttemptRecord) -> None:
        self._touch_order.pop(identity, None)
        if identity in self._parked:
            return
        self._parked.add(identity)
        heapq.heappush(self._lock_heap, (record.locked_until, identity))

    def _release_expired(self, now: datetime) -> None:
        while self._lock_heap and self._lock_heap[0][0] <= now:
            _, identity = heapq.heappop(self._lock_heap)
            if identity not in self._parked:
                continue
            record = self._records[identity]
            if record.is_locked(now):
                heapq.heappush(self._lock_heap, (record.locked_until, identity))
                continue
            self._parked.discard(identity)
            self._touch_order[identity] = now
