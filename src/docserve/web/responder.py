"""HTTP response composition for documents, listings and error pages."""

from __future__ import annotations

import gzip
import html
from typing import Iterable

from fastapi.responses import Response

from docserve.errors import RenderError
from docserve.models import IndexEntry, Page
from docserve.web.templates import TemplateFragments

HTML_CONTENT_TYPE = "text/html; charset=UTF-8"
ERROR_FORMAT = "<h2>Oops! We've hit a bit of a problem...</h2><p>{}</p>"
GENERIC_ERROR_MESSAGE = "Page not available"


def accepts_gzip(accept_encoding: str | None) -> bool:
    """Return True if the Accept-Encoding header allows a gzip body."""
    if not accept_encoding:
        return False
    qualities: dict[str, float] = {}
    for item in accept_encoding.split(","):
        coding, _, params = item.strip().partition(";")
        coding = coding.strip().lower()
        if coding == "x-gzip":
            coding = "gzip"
        if coding not in ("gzip", "*"):
            continue
        quality = 1.0
        for param in params.split(";"):
            key, _, value = param.strip().partition("=")
            if key.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        qualities[coding] = max(quality, qualities.get(coding, 0.0))
    # An explicit gzip entry overrides the wildcard, including gzip;q=0.
    if "gzip" in qualities:
        return qualities["gzip"] > 0
    return qualities.get("*", 0.0) > 0


def etag_matches(if_none_match: str | None, fingerprint: str) -> bool:
    """Case-insensitively compare an If-None-Match header with a fingerprint."""
    if not if_none_match:
        return False
    for candidate in if_none_match.split(","):
        tag = candidate.strip()
        if tag == "*":
            return True
        if tag[:2].upper() == "W/":
            tag = tag[2:]
        if tag.strip('"').lower() == fingerprint.lower():
            return True
    return False


def compose(
    fragments: TemplateFragments,
    content: bytes,
    *,
    accept_encoding: str | None,
    fingerprint: str | None = None,
) -> Response:
    """Wrap ``content`` in the template, compressing when the client allows it."""
    headers = {"Content-Type": HTML_CONTENT_TYPE, "Vary": "Accept-Encoding"}
    if fingerprint:
        headers["ETag"] = f'"{fingerprint}"'

    body = b"".join((fragments.prefix, content, fragments.suffix))
    if accepts_gzip(accept_encoding):
        body = gzip.compress(body, mtime=0)
        headers["Content-Encoding"] = "gzip"
    # Starlette derives Content-Length from the final body.
    return Response(content=body, headers=headers)


def page_response(
    fragments: TemplateFragments,
    page: Page,
    *,
    if_none_match: str | None,
    accept_encoding: str | None,
) -> Response:
    if etag_matches(if_none_match, page.fingerprint):
        return Response(status_code=304)
    return compose(
        fragments,
        page.content,
        accept_encoding=accept_encoding,
        fingerprint=page.fingerprint,
    )


def render_listing(title: str, entries: Iterable[IndexEntry]) -> bytes:
    """Render index entries as headings and summaries, keeping their order."""
    parts = [f"<h2>{html.escape(title)}</h2>\n"]
    for entry in entries:
        parts.append(f"<h3>{html.escape(entry.name)}</h3>\n<p>{html.escape(entry.summary)}</p>\n")
    return "".join(parts).encode("utf-8")


def index_response(
    fragments: TemplateFragments,
    title: str,
    entries: Iterable[IndexEntry],
    *,
    accept_encoding: str | None,
) -> Response:
    return compose(fragments, render_listing(title, entries), accept_encoding=accept_encoding)


def error_response(fragments: TemplateFragments, exc: BaseException) -> Response:
    """Template-wrapped error page. Never compressed and never cached."""
    if isinstance(exc, RenderError):
        status_code, message = exc.status_code, exc.message
    else:
        status_code, message = 500, GENERIC_ERROR_MESSAGE

    body = b"".join(
        (
            fragments.prefix,
            ERROR_FORMAT.format(html.escape(message)).encode("utf-8"),
            fragments.suffix,
        )
    )
    return Response(
        content=body,
        status_code=status_code,
        headers={"Content-Type": HTML_CONTENT_TYPE, "Cache-Control": "no-store"},
    )
