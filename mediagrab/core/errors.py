from __future__ import annotations
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    INVALID_INPUT = "INVALID_INPUT"
    UNSUPPORTED = "UNSUPPORTED"
    AUTHENTICATION_FAILURE = "AUTHENTICATION_FAILURE"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMITED = "RATE_LIMITED"
    UPSTREAM_FAILURE = "UPSTREAM_FAILURE"
    EXTERNAL_TOOL_FAILURE = "EXTERNAL_TOOL_FAILURE"
    STORAGE_FAILURE = "STORAGE_FAILURE"
    POLICY_VIOLATION = "POLICY_VIOLATION"


class MediaGrabError(Exception):
    """
    Base class for every failure raised by the pipeline.

    `kind` places the error in the taxonomy, `stage` names the step that
    failed (e.g. "csrf", "download"). The underlying exception, if any,
    is chained via `raise ... from`.
    """
    kind = ErrorKind.UPSTREAM_FAILURE
    stage = "unknown"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class ProcessingError(MediaGrabError):
    pass


class ExtractionError(MediaGrabError):
    pass


# --- Input ---

class InvalidUrlError(ProcessingError):
    kind = ErrorKind.INVALID_INPUT
    stage = "validate"
    prefix = "Invalid URL"

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        message = f"{self.prefix}: {url}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class InvalidUrlFormatError(InvalidUrlError):
    """Raised by the orchestrator when its input fails validation."""
    prefix = "Invalid URL format"


# --- Instagram ---

class ShortcodeNotFoundError(ExtractionError):
    kind = ErrorKind.NOT_FOUND
    stage = "shortcode"


InvalidUrlShapeError = ShortcodeNotFoundError


class CsrfTokenError(ExtractionError):
    kind = ErrorKind.AUTHENTICATION_FAILURE
    stage = "csrf"


class UnsupportedMediaError(ExtractionError):
    kind = ErrorKind.NOT_FOUND
    stage = "metadata"


class InstagramRequestError(ExtractionError):
    kind = ErrorKind.UPSTREAM_FAILURE
    stage = "metadata"


class RetryExhaustedError(ExtractionError):
    kind = ErrorKind.RATE_LIMITED
    stage = "metadata"

    def __init__(self, message: str, last_error: Optional[BaseException] = None, attempts: int = 0):
        super().__init__(message)
        self.last_error = last_error
        self.attempts = attempts


# --- Generic / yt-dlp ---

class StorageUnavailableError(ExtractionError):
    kind = ErrorKind.STORAGE_FAILURE
    stage = "storage"


class DownloadVerificationError(ExtractionError):
    kind = ErrorKind.STORAGE_FAILURE
    stage = "verify"


class MetadataParseError(ExtractionError):
    kind = ErrorKind.EXTERNAL_TOOL_FAILURE
    stage = "probe"


class MediaTooLongError(ExtractionError):
    kind = ErrorKind.POLICY_VIOLATION
    stage = "probe"

    def __init__(self, duration: int, limit: int):
        self.duration = duration
        self.limit = limit
        super().__init__(
            f"File duration is above {limit} seconds ({duration}s), skipping download"
        )


class DownloaderError(ExtractionError):
    kind = ErrorKind.EXTERNAL_TOOL_FAILURE
    stage = "download"

    def __init__(self, message: str, stage: Optional[str] = None, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message, stage=stage)
        self.returncode = returncode
        self.stderr = stderr


class DownloadTimeoutError(DownloaderError):
    pass


class ChunkSplitError(ExtractionError):
    kind = ErrorKind.EXTERNAL_TOOL_FAILURE
    stage = "split"
