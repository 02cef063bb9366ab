import logging
from urllib.parse import quote

import httpx

from bookfinder.config import Settings, settings as default_settings
from bookfinder.errors import MalformedPayload, RemoteError
from bookfinder.interfaces.book_search import BookSearchClient
from bookfinder.mapping import from_remote_payload
from bookfinder.models import Book

logger = logging.getLogger(__name__)


class GoogleBooksClient(BookSearchClient):
    BASE_URL = "https://www.googleapis.com/books/v1/volumes"
    MAX_RESULTS = 40

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or default_settings
        self._client = client
        self._owns_client = client is None
        self._base_url = settings.api_base_url or self.BASE_URL
        self._max_results = settings.max_results or self.MAX_RESULTS
        self._timeout = httpx.Timeout(settings.request_timeout)
        self._headers = {"User-Agent": settings.user_agent}

    async def search(self, query: str) -> list[Book]:
        query = query.strip()
        if not query:
            return []

        url = f"{self._base_url}?q={quote(query, safe='')}&maxResults={self._max_results}"
        data = await self._get_json(url, "search books")
        items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(items, list) or not items:
            return []

        books = []
        for item in items:
            try:
                books.append(from_remote_payload(item))
            except MalformedPayload as e:
                logger.debug("Skipping search result: %s", e)
        return books

    async def get_book(self, book_id: str) -> Book | None:
        if not book_id:
            return None
        try:
            data = await self._get_json(
                f"{self._base_url}/{quote(book_id, safe='')}", f"load book {book_id}"
            )
        except RemoteError as e:
            if e.status_code == 404:
                return None
            raise
        try:
            return from_remote_payload(data)
        except MalformedPayload:
            return None

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, headers=self._headers)
        return self._client

    async def _get_json(self, url: str, action: str):
        try:
            response = await self._http().get(url)
        except httpx.HTTPError as e:
            raise RemoteError(f"Failed to {action}: {e}") from e

        if not response.is_success:
            raise RemoteError(
                f"Failed to {action}: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(f"Invalid response from book catalog: {e}") from e
