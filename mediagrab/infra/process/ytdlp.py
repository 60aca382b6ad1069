import json
import logging
import shlex
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from mediagrab.core.errors import DownloadTimeoutError, DownloaderError, MetadataParseError

# Best resolution, preferring an mp4/m4a pair, recoded to a single mp4
FORMAT_SORT = "res,ext:mp4:m4a"
RECODE_FORMAT = "mp4"


class YtDlpRunner:
    """
    Thin wrapper around the yt-dlp command line.

    Runs yt-dlp as a child process so a hung download can be killed on
    timeout (subprocess.run kills the child when the timeout expires).
    """

    def __init__(self, binary: Union[str, List[str]] = "yt-dlp", logger: Optional[logging.Logger] = None):
        self.command = shlex.split(binary) if isinstance(binary, str) else list(binary)
        self.logger = logger or logging.getLogger(__name__)

    def probe(self, url: str, timeout: float) -> Dict[str, Any]:
        """Return yt-dlp's JSON description of `url` without downloading it."""
        args = self.command + ["-J", "--no-playlist", url]
        result = self._run(args, timeout, stage="probe")
        try:
            info = json.loads(result.stdout)
        except ValueError as e:
            raise MetadataParseError(f"Failed to parse metadata: {e}") from e
        if not isinstance(info, dict):
            raise MetadataParseError("Failed to parse metadata: expected a JSON object")
        return info

    def download(self, url: str, output_path: Path, timeout: float) -> None:
        args = self.command + [
            url,
            "-o", str(output_path),
            "--no-playlist",
            "-S", FORMAT_SORT,
            "--recode", RECODE_FORMAT,
        ]
        result = self._run(args, timeout, stage="download", cwd=output_path.parent)
        if result.stdout:
            self.logger.debug(f"yt-dlp stdout: {result.stdout.strip()}")
        if result.stderr:
            self.logger.warning(f"yt-dlp stderr: {result.stderr.strip()}")

    def _run(self, args: List[str], timeout: float, stage: str, cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
        self.logger.debug(f"Executing command: {shlex.join(args)}")
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=timeout,
                cwd=str(cwd) if cwd else None,
            )
        except subprocess.TimeoutExpired as e:
            raise DownloadTimeoutError(
                f"yt-dlp timed out after {timeout:g}s", stage=stage
            ) from e
        except OSError as e:
            raise DownloaderError(f"Could not start yt-dlp: {e}", stage=stage) from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise DownloaderError(
                f"yt-dlp exited with code {result.returncode}: {stderr or 'no output'}",
                stage=stage,
                returncode=result.returncode,
                stderr=stderr,
            )
        return result
