import logging
import os
import re
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlsplit

from mediagrab.core.errors import (
    ChunkSplitError,
    DownloadVerificationError,
    MediaTooLongError,
    MetadataParseError,
    StorageUnavailableError,
)
from mediagrab.core.interfaces import ChunkSplitter
from mediagrab.infra.media.splitter import PassthroughChunkSplitter
from mediagrab.infra.process.ytdlp import RECODE_FORMAT, YtDlpRunner
from ..base import BaseExtractor
from ..result import ExtractResult, LocationKind

MAX_VIDEO_LENGTH_SECONDS = 180
DOWNLOAD_TIMEOUT_SECONDS = 300

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9.-]+")


def parse_duration(info: Dict[str, Any]) -> int:
    """
    Read the `duration` field (seconds) from yt-dlp metadata.

    Absent or null durations count as 0, i.e. unknown.
    """
    raw = info.get("duration")
    if raw is None or raw == "":
        return 0
    if isinstance(raw, bool):
        raise MetadataParseError(f"Failed to parse file duration: {raw!r}")
    try:
        return int(float(raw))
    except (TypeError, ValueError) as e:
        raise MetadataParseError(f"Failed to parse file duration: {raw!r}") from e


def generate_filename(url: str, now: Callable[[], float] = time.time) -> str:
    """`{hostname}_{epoch millis}.mp4`, with `www.` dropped and unsafe characters replaced."""
    timestamp = int(now() * 1000)
    try:
        hostname = urlsplit(url).hostname or ""
    except ValueError:
        hostname = ""
    hostname = re.sub(r"^www\.", "", hostname)
    hostname = _UNSAFE_CHARS.sub("_", hostname).strip("._")
    if not hostname:
        return f"video_{timestamp}.{RECODE_FORMAT}"
    return f"{hostname}_{timestamp}.{RECODE_FORMAT}"


class GenericExtractor(BaseExtractor):
    """
    Downloads media from any yt-dlp supported site into the download
    directory and hands the file to the chunk splitter.
    """

    name = "generic"

    def __init__(
        self,
        download_dir: Path,
        runner: Optional[YtDlpRunner] = None,
        splitter: Optional[ChunkSplitter] = None,
        logger: Optional[logging.Logger] = None,
        max_duration: int = MAX_VIDEO_LENGTH_SECONDS,
        timeout: float = DOWNLOAD_TIMEOUT_SECONDS,
    ):
        self.download_dir = Path(download_dir)
        self.logger = logger or logging.getLogger(__name__)
        self.runner = runner or YtDlpRunner(logger=self.logger)
        self.splitter = splitter or PassthroughChunkSplitter()
        self.max_duration = max_duration
        self.timeout = timeout
        self.logger.info(f"Initialized with download directory: {self.download_dir}")

    def extract(self, url: str) -> ExtractResult:
        self.logger.info(f"Processing generic URL: {url}")
        try:
            chunks = self._download(url)
        except Exception:
            self.logger.exception(f"Failed to download from URL: {url}")
            raise

        self.logger.info(f"Successfully downloaded and processed file(s): {len(chunks)} chunk(s) created")
        return ExtractResult(locations=chunks, location_kind=LocationKind.LOCAL)

    def ensure_directory(self) -> None:
        try:
            self.download_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(f"Directory access error: {e}") from e
        if not os.access(self.download_dir, os.W_OK):
            raise StorageUnavailableError(f"Directory access error: {self.download_dir} is not writable")

    def check_duration(self, url: str) -> int:
        info = self.runner.probe(url, timeout=self.timeout)
        duration = parse_duration(info)
        self.logger.debug(f"File duration: {duration} seconds")
        if duration > self.max_duration and duration != 0:
            self.logger.warning(f"File duration is above {self.max_duration} seconds, skipping download")
            raise MediaTooLongError(duration, self.max_duration)
        return duration

    def _download(self, url: str):
        self.ensure_directory()
        self.check_duration(url)

        file_path = self.download_dir / generate_filename(url)
        self.logger.debug(f"Target file path: {file_path}")
        self.runner.download(url, file_path, timeout=self.timeout)

        if not file_path.is_file() or not os.access(file_path, os.R_OK):
            self._log_directory_contents()
            raise DownloadVerificationError(f"Downloaded file not accessible: {file_path}")
        self.logger.debug(f"File created successfully: {file_path} ({file_path.stat().st_size} bytes)")

        try:
            chunks = list(self.splitter.split(str(file_path)))
        except Exception as e:
            raise ChunkSplitError(f"Failed to split {file_path}: {e}") from e
        if not chunks:
            raise ChunkSplitError(f"Chunk splitter returned no files for {file_path}")
        return chunks

    def _log_directory_contents(self) -> None:
        try:
            files = sorted(p.name for p in self.download_dir.iterdir())
        except OSError as e:
            self.logger.debug(f"Could not list download directory: {e}")
            return
        self.logger.debug(f"Files in download directory: {', '.join(files)}")
