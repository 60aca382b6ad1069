import logging
from typing import Optional

from ..base import BaseExtractor
from ..result import ExtractResult, LocationKind
from .client import InstagramMetadataClient
from .models import RetryPolicy


class InstagramExtractor(BaseExtractor):
    """Instagram post/reel extractor. Returns the CDN URL, downloads nothing."""

    name = "instagram"

    def __init__(
        self,
        client: Optional[InstagramMetadataClient] = None,
        policy: Optional[RetryPolicy] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.client = client or InstagramMetadataClient(logger=self.logger)
        self.policy = policy

    def extract(self, url: str) -> ExtractResult:
        self.logger.info(f"Processing Instagram URL: {url}")
        try:
            media = self.client.get_media(url, self.policy)
        except Exception as e:
            self.logger.error(f"Failed to get Instagram download URL: {e}")
            raise

        self.logger.info(f"Successfully extracted {media.kind.value} download URL")
        return ExtractResult(locations=[media.direct_url], location_kind=LocationKind.REMOTE)
