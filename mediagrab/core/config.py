import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_TEMP_DIR = "/tmp/downloads"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/127.0.0.0 Safari/537.36"
)


@dataclass(frozen=True)
class AppConfig:
    """
    Settings read once at startup.

    The duration ceiling and the download timeout are fixed policy and
    live with the generic extractor, not here.
    """
    download_dir: Path = Path(DEFAULT_TEMP_DIR)
    log_level: str = "INFO"
    ytdlp_binary: str = "yt-dlp"
    user_agent: str = DEFAULT_USER_AGENT
    workers: int = 4


def load_config(env: Optional[Mapping[str, str]] = None, dotenv_path: Optional[str] = None) -> AppConfig:
    """
    Build an AppConfig from the environment.

    When `env` is None the process environment is used, after loading a
    `.env` file if one is present. Passing `env` skips the .env lookup.
    """
    if env is None:
        load_dotenv(dotenv_path)
        env = os.environ

    download_dir = env.get("DOWNLOAD_PATH") or env.get("TEMP_DIR") or DEFAULT_TEMP_DIR

    try:
        workers = int(env.get("MEDIAGRAB_WORKERS", "4"))
    except ValueError:
        workers = 4

    return AppConfig(
        download_dir=Path(download_dir).expanduser(),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
        ytdlp_binary=env.get("YTDLP_BINARY", "yt-dlp").strip() or "yt-dlp",
        user_agent=env.get("INSTAGRAM_USER_AGENT", DEFAULT_USER_AGENT),
        workers=max(1, workers),
    )
