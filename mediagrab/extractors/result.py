from dataclasses import dataclass
from enum import Enum
from typing import List


class LocationKind(Enum):
    REMOTE = "remote"
    LOCAL = "local"


@dataclass
class ExtractResult:
    """
    Unified result contract for all media extractors.

    REMOTE locations are URLs owned by a third party and can be handed to
    a client as-is. LOCAL locations are paths on disk; whoever receives
    them owns their lifecycle (upload, then delete).
    """
    locations: List[str]
    location_kind: LocationKind = LocationKind.REMOTE

    def __post_init__(self):
        if not self.locations:
            raise ValueError("ExtractResult requires at least one location")
