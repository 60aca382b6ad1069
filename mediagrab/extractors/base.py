from abc import ABC, abstractmethod
from .result import ExtractResult

class BaseExtractor(ABC):
    """
    Abstract base class for all media extractors.

    Extractors are looked up by hostname in the ExtractorRegistry, never by
    inspecting the URL themselves, so the only contract is `extract`.

    CRITICAL BOUNDARIES:
    - Extractors keep no state between calls.
    - Extractors do NOT retry on behalf of the caller (except where a
      platform protocol requires it, e.g. Instagram rate limits).
    - Extractors do NOT delete the files they produce.
    """

    #: Short platform identifier used in logs.
    name = "base"

    @abstractmethod
    def extract(self, url: str) -> ExtractResult:
        """
        Extract media locations from an already validated URL.

        Args:
            url: Absolute http(s) URL.

        Returns:
            ExtractResult: non-empty list of locations and their kind.

        Raises:
            ExtractionError: subclass describing the failed stage.
        """
        pass
