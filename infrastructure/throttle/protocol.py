"""ThrottleStore protocol — LoginThrottle depends on this, not the concrete store."""

from datetime import datetime
from typing import Optional, Protocol

from infrastructure.throttle.store import AttemptRecord


class ThrottleStore(Protocol):
    def get(self, identity: str) -> Optional[AttemptRecord]: ...

    def get_or_create(self, identity: str, now: datetime) -> AttemptRecord: ...

    def touch(self, identity: str, now: datetime) -> None: ...

    def sweep(self, now: datetime, reserve: int = 0) -> int: ...

    def clear(self) -> None: ...

    def __len__(self) -> int: ...
