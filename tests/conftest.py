"""
Shared fixtures: fake HTTP sessions and responses for the Instagram client,
and a recording sleep so retry tests never actually wait.
"""

import json
import sys
from pathlib import Path

import pytest
import requests

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


def make_response(status=200, body=None, headers=None, url="https://www.instagram.com/"):
    response = requests.Response()
    response.status_code = status
    response.url = url
    if headers:
        response.headers.update(headers)
    if body is not None:
        response._content = body if isinstance(body, bytes) else json.dumps(body).encode()
    else:
        response._content = b""
    return response


def csrf_response(token="test-csrf-token"):
    return make_response(headers={"Set-Cookie": f"csrftoken={token}; Path=/; Secure"})


def media_response(media):
    return make_response(body={"data": {"xdt_shortcode_media": media}}, url="https://www.instagram.com/graphql/query")


class FakeSession:
    """Stands in for requests.Session; serves queued responses in order."""

    def __init__(self, get_responses=None, post_responses=None):
        self.headers = {}
        self.cookies = requests.cookies.RequestsCookieJar()
        self.get_responses = list(get_responses or [])
        self.post_responses = list(post_responses or [])
        self.get_calls = []
        self.post_calls = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def _next(self, queue, url):
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(url)
        return item

    def get(self, url, **kwargs):
        self.get_calls.append((url, kwargs))
        return self._next(self.get_responses, url)

    def post(self, url, **kwargs):
        self.post_calls.append((url, kwargs))
        return self._next(self.post_responses, url)


class RecordingSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def sleep():
    return RecordingSleep()


VIDEO_MEDIA = {
    "__typename": "GraphVideo",
    "is_video": True,
    "video_url": "https://scontent.cdninstagram.com/video.mp4",
    "display_url": "https://scontent.cdninstagram.com/image.jpg",
}

IMAGE_MEDIA = {
    "__typename": "GraphImage",
    "is_video": False,
    "video_url": None,
    "display_url": "https://scontent.cdninstagram.com/image.jpg",
}
