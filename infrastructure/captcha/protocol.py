"""CaptchaProvider protocol — services depend on this, not the concrete implementation."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol


class CaptchaOutcome(str, Enum):
    PASSED = "passed"
    REJECTED = "rejected"  # provider answered and said no
    UNAVAILABLE = "unavailable"  # provider could not give a usable answer


@dataclass(frozen=True)
class CaptchaVerdict:
    outcome: CaptchaOutcome
    error_codes: list[str] = field(default_factory=list)
    detail: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.outcome is CaptchaOutcome.PASSED


class CaptchaProvider(Protocol):
    name: str

    @property
    def configured(self) -> bool: ...

    async def verify(
        self, token: str, remote_ip: Optional[str] = None
    ) -> CaptchaVerdict: ...
