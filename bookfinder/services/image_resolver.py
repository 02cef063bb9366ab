"""Cover image URL cleaning and the two-tier cover fallback.

Callers resolve a cover in a fixed order: the cleaned primary URL, then
``fallback(book.id)``, then a static placeholder. ``CoverLoader`` walks that
order and stops at the first URL that returns something Pillow recognizes
as an image.
"""

import io
import logging
import re
import zlib
from urllib.parse import urlsplit, urlunsplit

import httpx
from PIL import Image

from bookfinder.models import Book, CoverImage

logger = logging.getLogger(__name__)

PLACEHOLDER_URL = "https://picsum.photos/seed/{bucket}/200/300"
OPENLIBRARY_COVER_URL = "https://covers.openlibrary.org/b/isbn/{id}-M.jpg"

_ZOOM_RE = re.compile(r"^zoom=\d+$")


class ImageUrlResolver:
    def __init__(self, constrained: bool = False, placeholder_buckets: int = 100) -> None:
        self.constrained = constrained
        self.placeholder_buckets = placeholder_buckets

    def clean(self, url: str | None) -> str | None:
        if not url:
            return None
        url = url.strip()
        if not url:
            return None

        try:
            parts = urlsplit(url)
        except ValueError:
            return None
        if parts.scheme in ("http", "https") and not parts.netloc:
            return None
        if parts.scheme == "http":
            parts = parts._replace(scheme="https")

        if self.constrained:
            # Browsers reject many of the catalog's query-string forms.
            return urlunsplit(parts._replace(query="", fragment=""))

        params = []
        for param in parts.query.split("&") if parts.query else []:
            if param == "edge=curl":
                continue
            if _ZOOM_RE.match(param):
                param = "zoom=1"
            params.append(param)
        return urlunsplit(parts._replace(query="&".join(params)))

    def fallback(self, book_id: str) -> str | None:
        if not book_id:
            return None
        if self.constrained:
            return PLACEHOLDER_URL.format(bucket=self.placeholder_bucket(book_id))
        return OPENLIBRARY_COVER_URL.format(id=book_id)

    def placeholder_bucket(self, book_id: str) -> int:
        # crc32 is stable across processes, unlike hash().
        return zlib.crc32(book_id.encode("utf-8")) % self.placeholder_buckets

    def candidates(self, book: Book) -> list[str]:
        urls = []
        for url in (self.clean(book.image_url), self.fallback(book.id)):
            if url and url not in urls:
                urls.append(url)
        return urls


class ImageErrorLog:
    """Logs each failing image URL once."""

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def report(self, url: str, error: object) -> None:
        if url in self._seen:
            return
        self._seen.add(url)
        logger.warning("Image loading error for %s: %s (%s)", url, error, type(error).__name__)

    def clear(self) -> None:
        self._seen.clear()

    @property
    def count(self) -> int:
        return len(self._seen)


class CoverLoader:
    def __init__(
        self,
        resolver: ImageUrlResolver,
        client: httpx.AsyncClient,
        error_log: ImageErrorLog | None = None,
    ) -> None:
        self._resolver = resolver
        self._client = client
        self.error_log = error_log or ImageErrorLog()

    async def load(self, book: Book) -> CoverImage:
        primary = self._resolver.clean(book.image_url)
        fallback = self._resolver.fallback(book.id)

        for source, url in (("primary", primary), ("fallback", fallback)):
            if not url:
                continue
            try:
                content, content_type = await self._fetch(url)
            except Exception as e:
                self.error_log.report(url, e)
                continue
            return CoverImage(source=source, url=url, content=content, content_type=content_type)

        return CoverImage(source="placeholder")

    async def _fetch(self, url: str) -> tuple[bytes, str | None]:
        response = await self._client.get(url)
        response.raise_for_status()
        content = response.content
        with Image.open(io.BytesIO(content)) as image:
            image.verify()
        return content, response.headers.get("content-type")
