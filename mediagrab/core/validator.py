from dataclasses import dataclass
from urllib.parse import urlsplit

from mediagrab.core.errors import InvalidUrlError

ALLOWED_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class ParsedUrl:
    """An absolute http(s) URL split into the parts the pipeline routes on."""
    raw: str
    scheme: str
    hostname: str  # Literal host as written (case and www. preserved)
    path: str
    query: str = ""


def _literal_host(netloc: str) -> str:
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        end = host.find("]")
        return host[:end + 1] if end != -1 else ""
    return host.partition(":")[0]


def validate_url(raw: str) -> ParsedUrl:
    """
    Confirm that `raw` is a well-formed absolute http(s) URL.

    Raises:
        InvalidUrlError: for empty, relative, protocol-relative or
            non-HTTP inputs, or an unparsable port.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidUrlError(str(raw), "empty")
    if raw != raw.strip() or any(c.isspace() for c in raw):
        raise InvalidUrlError(raw, "contains whitespace")

    try:
        parts = urlsplit(raw)
        # Accessing .port validates it
        parts.port
    except ValueError as e:
        raise InvalidUrlError(raw, str(e)) from e

    if not parts.scheme:
        raise InvalidUrlError(raw, "missing scheme")
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidUrlError(raw, f"unsupported scheme '{parts.scheme}'")

    hostname = _literal_host(parts.netloc)
    if not hostname:
        raise InvalidUrlError(raw, "missing host")

    return ParsedUrl(
        raw=raw,
        scheme=parts.scheme.lower(),
        hostname=hostname,
        path=parts.path,
        query=parts.query,
    )
