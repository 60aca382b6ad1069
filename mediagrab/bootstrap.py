import logging
from typing import Optional

from mediagrab.app.media_service import MediaService
from mediagrab.core.config import AppConfig, load_config
from mediagrab.core.interfaces import ChunkSplitter
from mediagrab.extractors.generic.extractor import GenericExtractor
from mediagrab.extractors.instagram.client import InstagramMetadataClient
from mediagrab.extractors.instagram.extractor import InstagramExtractor
from mediagrab.extractors.registry import ExtractorRegistry
from mediagrab.infra.media.splitter import PassthroughChunkSplitter
from mediagrab.infra.process.ytdlp import YtDlpRunner

INSTAGRAM_HOSTS = (
    "instagram.com",
    "www.instagram.com",
)

GENERIC_HOSTS = (
    "youtube.com",
    "www.youtube.com",
    "youtu.be",
    "tumblr.com",
    "www.tumblr.com",
    "twitter.com",
    "www.twitter.com",
    "x.com",
    "www.x.com",
    "tiktok.com",
    "www.tiktok.com",
    "facebook.com",
    "www.facebook.com",
)


def build_registry(instagram, generic) -> ExtractorRegistry:
    registry = ExtractorRegistry()
    for host in INSTAGRAM_HOSTS:
        registry.register(host, instagram)
    for host in GENERIC_HOSTS:
        registry.register(host, generic)
    return registry.freeze()


def create_container(config: Optional[AppConfig] = None, splitter: Optional[ChunkSplitter] = None) -> dict:
    # 1. Config
    config = config or load_config()

    # 2. Infra
    runner = YtDlpRunner(config.ytdlp_binary, logger=logging.getLogger("mediagrab.ytdlp"))
    splitter = splitter or PassthroughChunkSplitter()
    instagram_client = InstagramMetadataClient(
        user_agent=config.user_agent,
        logger=logging.getLogger("mediagrab.instagram"),
    )

    # 3. Extractors
    instagram = InstagramExtractor(client=instagram_client, logger=logging.getLogger("mediagrab.instagram"))
    generic = GenericExtractor(
        config.download_dir,
        runner=runner,
        splitter=splitter,
        logger=logging.getLogger("mediagrab.generic"),
    )
    registry = build_registry(instagram, generic)

    # 4. Service
    media_service = MediaService(registry, logger=logging.getLogger("mediagrab.service"))

    return {
        "config": config,
        "registry": registry,
        "media_service": media_service,
        "extractors": {"instagram": instagram, "generic": generic},
    }
