import logging
import uuid
from typing import Optional

from mediagrab.core.errors import InvalidUrlError, InvalidUrlFormatError
from mediagrab.core.validator import validate_url
from mediagrab.extractors.registry import ExtractorRegistry
from mediagrab.extractors.result import ExtractResult


class MediaService:
    """
    Service that turns a URL into media locations.

    RESPONSIBILITIES:
    - Orchestrate the "Validate -> Route -> Extract" pipeline.
    - Return the extractor's ExtractResult unchanged.
    - Report unsupported hosts as None, never as an exception.
    - It does NOT retry, translate errors or clean up files.

    The service holds no per-request state; one instance can serve any
    number of threads at once.
    """

    def __init__(self, registry: ExtractorRegistry, logger: Optional[logging.Logger] = None):
        self.registry = registry
        self.logger = logger or logging.getLogger(__name__)

    def process(self, url: str) -> Optional[ExtractResult]:
        """
        Main entry point for extracting media.

        Returns:
            ExtractResult, or None when no extractor handles the host.

        Raises:
            InvalidUrlFormatError: `url` is not an absolute http(s) URL.
            ExtractionError: whatever the selected extractor raised.
        """
        log = logging.LoggerAdapter(self.logger, {"request_id": uuid.uuid4().hex[:8]})
        log.info(f"Processing URL: {url}")

        try:
            parsed = validate_url(url)
        except InvalidUrlError as e:
            log.error(f"Invalid URL format: {url}")
            raise InvalidUrlFormatError(url, e.reason) from e

        extractor = self.registry.resolve(parsed.hostname)
        if extractor is None:
            log.warning(f"No suitable downloader found for URL: {url}")
            return None

        try:
            result = extractor.extract(parsed.raw)
        except Exception:
            log.exception(f"Failed to process URL: {url} ({extractor.name})")
            raise

        log.info(f"Successfully processed URL: {url} -> {', '.join(result.locations)}")
        return result

    def get_supported_domains(self):
        return sorted(self.registry.list_supported_hostnames())
