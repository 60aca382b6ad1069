from types import MappingProxyType
from typing import Dict, FrozenSet, Optional

from .base import BaseExtractor


class ExtractorRegistry:
    """
    Registry mapping hostnames to extractors.

    Keys are matched exactly as they appear in the URL; `www.example.com`
    and `example.com` are separate entries. Call `freeze()` once wiring is
    done; afterwards the table is read-only and safe to share across threads.
    """

    def __init__(self, entries: Optional[Dict[str, BaseExtractor]] = None):
        self._extractors: Dict[str, BaseExtractor] = {}
        self._frozen = False
        for hostname, extractor in (entries or {}).items():
            self.register(hostname, extractor)

    def register(self, hostname: str, extractor: BaseExtractor):
        """Register an extractor for one literal hostname."""
        if self._frozen:
            raise RuntimeError("Registry is frozen; register extractors before freeze()")
        if not hostname:
            raise ValueError("hostname must be a non-empty string")
        self._extractors[hostname] = extractor

    def freeze(self) -> "ExtractorRegistry":
        self._frozen = True
        self._extractors = MappingProxyType(dict(self._extractors))
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def resolve(self, hostname: str) -> Optional[BaseExtractor]:
        """
        Find the extractor registered for the given hostname.

        Returns:
            The extractor instance or None.
        """
        return self._extractors.get(hostname)

    def list_supported_hostnames(self) -> FrozenSet[str]:
        return frozenset(self._extractors)
