from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MediaKind(Enum):
    VIDEO = "video"
    IMAGE = "image"


@dataclass(frozen=True)
class PlatformMedia:
    """A single Instagram media item resolved from a post, reel or carousel."""
    kind: MediaKind
    direct_url: str


@dataclass
class RetryPolicy:
    """
    Backoff state for one metadata request.

    Only `advance()` mutates it: one attempt fewer, twice the delay.
    Each extraction works on its own copy.
    """
    remaining_attempts: int = 5
    base_delay_ms: int = 1000

    def __post_init__(self):
        if self.remaining_attempts < 0:
            raise ValueError("remaining_attempts must be >= 0")
        if self.base_delay_ms <= 0:
            raise ValueError("base_delay_ms must be > 0")

    def can_retry(self) -> bool:
        return self.remaining_attempts > 0

    def wait_ms(self, retry_after: Optional[str] = None) -> int:
        """
        Delay before the next attempt; a numeric Retry-After (seconds) wins.

        Fractional seconds are truncated and negative values clamp to 0.
        """
        if retry_after is not None:
            try:
                seconds = int(float(str(retry_after).strip()))
            except (ValueError, OverflowError):
                # HTTP-date form is not supported
                pass
            else:
                return max(0, seconds) * 1000
        return self.base_delay_ms

    def advance(self) -> None:
        if not self.can_retry():
            raise RuntimeError("No retry attempts left")
        self.remaining_attempts -= 1
        self.base_delay_ms *= 2
