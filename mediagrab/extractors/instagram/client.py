import json
import logging
import re
import time
from dataclasses import replace
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlsplit

import requests

from mediagrab.core.config import DEFAULT_USER_AGENT
from mediagrab.core.errors import (
    CsrfTokenError,
    InstagramRequestError,
    RetryExhaustedError,
    ShortcodeNotFoundError,
    UnsupportedMediaError,
)
from .models import MediaKind, PlatformMedia, RetryPolicy


ROOT_URL = "https://www.instagram.com/"
GRAPHQL_URL = "https://www.instagram.com/graphql/query"
DOCUMENT_ID = "9510064595728286"
POST_TAGS = ("p", "reel", "tv", "reels")
SIDECAR_TYPENAME = "XDTGraphSidecar"
RETRYABLE_STATUS = (429, 403)
TIMEOUT = (10, 30)

_CSRF_RE = re.compile(r"csrftoken=([^;,\s]+)")


class _RetryableResponse(Exception):
    """Internal signal: the metadata endpoint answered 429/403."""

    def __init__(self, response: requests.Response):
        self.status_code = response.status_code
        self.retry_after = response.headers.get("retry-after")
        super().__init__(f"HTTP {response.status_code} from {GRAPHQL_URL}")


def extract_shortcode(url: str) -> str:
    """
    Return the path segment that follows the first p/reel/tv/reels segment.

    Accepts a full URL or a bare path; query strings and fragments are ignored.
    """
    path = urlsplit(url).path
    segments = path.split("/")
    for index, segment in enumerate(segments):
        if segment in POST_TAGS:
            following = segments[index + 1] if index + 1 < len(segments) else ""
            if not following:
                raise ShortcodeNotFoundError(f"Failed to obtain shortcode: Shortcode not found in URL {url}")
            return following
    raise ShortcodeNotFoundError(f"Failed to obtain shortcode: no post segment in URL {url}")


def resolve_media(media: Dict[str, Any]) -> PlatformMedia:
    """
    Turn an `xdt_shortcode_media` object into a PlatformMedia.

    Carousels resolve to their first child only.
    """
    if not isinstance(media, dict):
        raise UnsupportedMediaError("Failed to create output data: media is not an object")

    node = media
    if media.get("__typename") == SIDECAR_TYPENAME and media.get("edge_sidecar_to_children"):
        children = media["edge_sidecar_to_children"]
        edges = children.get("edges") if isinstance(children, dict) else None
        first = edges[0] if isinstance(edges, list) and edges else None
        node = first.get("node") if isinstance(first, dict) else None
        if not isinstance(node, dict) or not node:
            raise UnsupportedMediaError("Failed to create output data: carousel has no items")

    if node.get("is_video"):
        kind, direct_url = MediaKind.VIDEO, node.get("video_url")
    else:
        kind, direct_url = MediaKind.IMAGE, node.get("display_url")

    if not direct_url or not isinstance(direct_url, str):
        raise UnsupportedMediaError(f"Failed to create output data: no {kind.value} URL in response")
    return PlatformMedia(kind=kind, direct_url=direct_url)


class InstagramMetadataClient:
    """
    Resolves Instagram post/reel URLs to direct CDN URLs through the
    public web GraphQL endpoint.

    Every call uses a fresh `requests.Session` (from `session_factory`) and
    a fresh CSRF token per attempt; nothing is cached between calls.
    """

    def __init__(
        self,
        session_factory: Callable[[], requests.Session] = requests.Session,
        sleep: Callable[[float], None] = time.sleep,
        user_agent: str = DEFAULT_USER_AGENT,
        logger: Optional[logging.Logger] = None,
    ):
        self._session_factory = session_factory
        self._sleep = sleep
        self._user_agent = user_agent
        self.logger = logger or logging.getLogger(__name__)

    def get_media(self, url: str, policy: Optional[RetryPolicy] = None) -> PlatformMedia:
        """
        Fetch the direct media URL for an Instagram post or reel.

        Args:
            url: Post, reel, tv or share URL.
            policy: Backoff for 429/403 answers. Copied, never mutated.

        Raises:
            ShortcodeNotFoundError, CsrfTokenError, UnsupportedMediaError,
            RetryExhaustedError, InstagramRequestError
        """
        policy = replace(policy) if policy is not None else RetryPolicy()
        self.logger.info(f"Fetching Instagram metadata for URL: {url}")

        try:
            with self._session_factory() as session:
                session.headers.update({"User-Agent": self._user_agent})
                resolved = self._check_redirect(session, url)
                shortcode = extract_shortcode(resolved)
                media = self._request_with_retry(session, shortcode, policy)
            result = resolve_media(media)
        except Exception:
            self.logger.exception("Failed to fetch Instagram metadata")
            raise

        self.logger.info("Successfully fetched Instagram metadata")
        return result

    def _check_redirect(self, session: requests.Session, url: str) -> str:
        if "share" not in url.split("/"):
            return url
        try:
            response = session.get(url, timeout=TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise InstagramRequestError(f"Failed to resolve share link: {e}", stage="redirect") from e
        resolved = urlsplit(response.url).path if response.url else ""
        self.logger.debug(f"Share link {url} resolved to {resolved}")
        return resolved or url

    def _request_with_retry(self, session: requests.Session, shortcode: str, policy: RetryPolicy) -> Dict[str, Any]:
        attempts = 0
        while True:
            attempts += 1
            token = self._get_csrf_token(session)
            try:
                return self._query_media(session, shortcode, token)
            except _RetryableResponse as e:
                if not policy.can_retry():
                    raise RetryExhaustedError(
                        f"Failed instagram request after {attempts} attempt(s): {e}",
                        last_error=e,
                        attempts=attempts,
                    ) from e
                wait_ms = policy.wait_ms(e.retry_after)
                self.logger.warning(
                    f"Instagram answered {e.status_code}, retrying in {wait_ms}ms "
                    f"({policy.remaining_attempts} attempt(s) left)"
                )
                self._sleep(wait_ms / 1000)
                policy.advance()

    def _get_csrf_token(self, session: requests.Session) -> str:
        # Drop cookies from earlier attempts so the server issues a new token
        session.cookies.clear()
        try:
            response = session.get(ROOT_URL, timeout=TIMEOUT)
        except requests.RequestException as e:
            raise CsrfTokenError(f"Failed to obtain CSRF: {e}") from e

        set_cookie = response.headers.get("set-cookie")
        if not set_cookie:
            raise CsrfTokenError("Failed to obtain CSRF: CSRF token not found in response headers")
        match = _CSRF_RE.search(set_cookie)
        if not match:
            raise CsrfTokenError("Failed to obtain CSRF: csrftoken cookie missing")
        return match.group(1)

    def _query_media(self, session: requests.Session, shortcode: str, token: str) -> Dict[str, Any]:
        body = {
            "variables": json.dumps({
                "shortcode": shortcode,
                "fetch_tagged_user_count": None,
                "hoisted_comment_id": None,
                "hoisted_reply_id": None,
            }),
            "doc_id": DOCUMENT_ID,
        }
        headers = {
            "X-CSRFToken": token,
            "Content-Type": "application/x-www-form-urlencoded",
        }

        try:
            response = session.post(GRAPHQL_URL, data=body, headers=headers, timeout=TIMEOUT)
        except requests.RequestException as e:
            raise InstagramRequestError(f"Failed instagram request: {e}") from e

        if response.status_code in RETRYABLE_STATUS:
            raise _RetryableResponse(response)
        try:
            response.raise_for_status()
            payload = response.json()
        except requests.HTTPError as e:
            raise InstagramRequestError(f"Failed instagram request: {e}") from e
        except ValueError as e:
            raise InstagramRequestError(f"Failed instagram request: response is not JSON ({e})") from e

        data = payload.get("data") if isinstance(payload, dict) else None
        media = data.get("xdt_shortcode_media") if isinstance(data, dict) else None
        if not media or not isinstance(media, dict):
            raise UnsupportedMediaError("Only posts/reels supported, check if your link is valid")
        return media
