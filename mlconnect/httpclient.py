"""Minimal HTTP client for fetching and posting content."""

from __future__ import annotations

import urllib.error
import urllib.request
from dataclasses import dataclass


@dataclass(frozen=True)
class HttpResponse:
    """Status code and raw body of a completed request.

    The status is 0 when the scheme carries no status code, as for files.
    """

    status: int
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def _perform(request: urllib.request.Request) -> HttpResponse:
    try:
        with urllib.request.urlopen(request) as response:
            return HttpResponse(response.getcode() or 0, response.read())
    except urllib.error.HTTPError as err:
        with err:
            return HttpResponse(err.code, err.read())


def get_call(url: str, http_method: str = "GET") -> HttpResponse:
    """Send a body-less request to *url* with the given method."""
    return _perform(urllib.request.Request(url, method=http_method))


def post_call(
    url: str,
    content: str | bytes,
    http_method: str = "POST",
    content_type: str = "application/json",
) -> HttpResponse:
    """Send *content* to *url* with the given method and content type."""
    data = content.encode("utf-8") if isinstance(content, str) else content
    request = urllib.request.Request(
        url,
        data=data,
        method=http_method,
        headers={"Content-Type": content_type},
    )
    return _perform(request)