import logging
import threading
from unittest.mock import MagicMock

import pytest

from mediagrab.app.media_service import MediaService
from mediagrab.bootstrap import build_registry
from mediagrab.core.errors import CsrfTokenError, ErrorKind, InvalidUrlFormatError
from mediagrab.extractors.base import BaseExtractor
from mediagrab.extractors.result import ExtractResult, LocationKind

REMOTE = ExtractResult(["https://scontent.cdninstagram.com/video.mp4"], LocationKind.REMOTE)
LOCAL = ExtractResult(["/tmp/downloads/youtube.com_1.mp4"], LocationKind.LOCAL)


@pytest.fixture
def instagram():
    extractor = MagicMock(spec=BaseExtractor)
    extractor.name = "instagram"
    extractor.extract.return_value = REMOTE
    return extractor


@pytest.fixture
def generic():
    extractor = MagicMock(spec=BaseExtractor)
    extractor.name = "generic"
    extractor.extract.return_value = LOCAL
    return extractor


@pytest.fixture
def service(instagram, generic):
    return MediaService(build_registry(instagram, generic))


class TestMediaService:
    def test_routes_instagram(self, service, instagram, generic):
        url = "https://www.instagram.com/p/test123/"
        assert service.process(url) is REMOTE
        instagram.extract.assert_called_once_with(url)
        generic.extract.assert_not_called()

    @pytest.mark.parametrize("url", [
        "https://youtube.com/watch?v=1",
        "https://www.youtube.com/watch?v=1",
        "https://youtu.be/1",
        "https://x.com/a/status/1",
        "https://www.tiktok.com/@a/video/1",
    ])
    def test_routes_generic(self, service, instagram, generic, url):
        assert service.process(url) is LOCAL
        generic.extract.assert_called_once_with(url)
        instagram.extract.assert_not_called()

    @pytest.mark.parametrize("url", ["", "instagram.com/p/x", "//youtu.be/1", "ftp://youtube.com/x"])
    def test_invalid_url_never_reaches_an_extractor(self, service, instagram, generic, url):
        with pytest.raises(InvalidUrlFormatError) as exc:
            service.process(url)

        assert exc.value.kind is ErrorKind.INVALID_INPUT
        assert str(exc.value).startswith(f"Invalid URL format: {url}")
        assert instagram.extract.call_count == 0
        assert generic.extract.call_count == 0

    @pytest.mark.parametrize("url", [
        "https://vimeo.com/123",
        "https://m.youtube.com/watch?v=1",
        "https://WWW.INSTAGRAM.COM/p/x/",
    ])
    def test_unsupported_host_returns_none(self, service, instagram, generic, url, caplog):
        with caplog.at_level(logging.WARNING):
            assert service.process(url) is None

        assert "No suitable downloader found" in caplog.text
        instagram.extract.assert_not_called()
        generic.extract.assert_not_called()

    def test_extractor_errors_propagate_unchanged(self, service, instagram):
        error = CsrfTokenError("Failed to obtain CSRF: CSRF token not found in response headers")
        instagram.extract.side_effect = error

        with pytest.raises(CsrfTokenError) as exc:
            service.process("https://instagram.com/reel/abc/")

        assert exc.value is error

    def test_supported_domains(self, service):
        domains = service.get_supported_domains()
        assert "instagram.com" in domains
        assert "www.x.com" in domains
        assert domains == sorted(domains)

    def test_slow_extraction_does_not_block_other_calls(self, service, instagram, generic):
        release = threading.Event()
        instagram.extract.side_effect = lambda url: release.wait(5) and REMOTE

        results = {}
        slow = threading.Thread(target=lambda: results.setdefault("slow", service.process("https://instagram.com/p/a/")))
        slow.start()

        assert service.process("https://youtu.be/1") is LOCAL
        assert slow.is_alive()

        release.set()
        slow.join(5)
        assert results["slow"] is REMOTE
