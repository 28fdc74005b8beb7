"""Derive stable page identifiers from browser locations."""

from urllib.parse import urlparse


def page_id_from_url(url: str) -> str:
    """Return the page id for ``url``: its first path segment, lower-cased.

    Query string, fragment, host and trailing path segments are ignored, so
    ``https://quiz.example.com/Height?step=3#top`` and ``/height/`` both map
    to ``"height"``. The site root maps to ``""``.
    """
    path = urlparse(url.strip()).path
    segments = [s for s in path.split("/") if s]
    if not segments:
        return ""
    return segments[0].lower()
