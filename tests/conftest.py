import pytest

from bookfinder.backends.preference_store import PreferenceFavoritesStore
from bookfinder.backends.preferences import InMemoryPreferences
from bookfinder.backends.sqlite_store import SqliteFavoritesStore
from bookfinder.errors import RemoteError
from bookfinder.interfaces.book_search import BookSearchClient
from bookfinder.interfaces.preferences import PreferenceStore
from bookfinder.models import Book


class MockBookSearchClient(BookSearchClient):
    def __init__(self, results: list[Book] | None = None, error: Exception | None = None):
        self._results = results or []
        self._error = error
        self.queries: list[str] = []

    async def search(self, query: str) -> list[Book]:
        self.queries.append(query)
        if self._error:
            raise self._error
        return self._results

    async def get_book(self, book_id: str) -> Book | None:
        return next((b for b in self._results if b.id == book_id), None)


class FailingPreferences(PreferenceStore):
    """Preference store whose reads or writes blow up."""

    def __init__(self, fail_reads: bool = False, fail_writes: bool = True):
        self._inner = InMemoryPreferences()
        self._fail_reads = fail_reads
        self._fail_writes = fail_writes

    async def get_string_list(self, key: str) -> list[str] | None:
        if self._fail_reads:
            raise OSError("preferences unreadable")
        return await self._inner.get_string_list(key)

    async def set_string_list(self, key: str, value: list[str]) -> bool:
        if self._fail_writes:
            raise OSError("preferences read-only")
        return await self._inner.set_string_list(key, value)

    async def get_string(self, key: str) -> str | None:
        if self._fail_reads:
            raise OSError("preferences unreadable")
        return await self._inner.get_string(key)

    async def set_string(self, key: str, value: str) -> bool:
        if self._fail_writes:
            raise OSError("preferences read-only")
        return await self._inner.set_string(key, value)

    async def remove(self, key: str) -> bool:
        if self._fail_writes:
            raise OSError("preferences read-only")
        return await self._inner.remove(key)


class BrokenMethodPreferences(InMemoryPreferences):
    """In-memory preferences where the named write methods raise."""

    def __init__(self, broken: set[str] | None = None, initial: dict | None = None):
        super().__init__(initial)
        self.broken = set(broken or ())

    async def set_string_list(self, key: str, value: list[str]) -> bool:
        if "set_string_list" in self.broken:
            raise OSError("quota exceeded")
        return await super().set_string_list(key, value)

    async def set_string(self, key: str, value: str) -> bool:
        if "set_string" in self.broken:
            raise OSError("quota exceeded")
        return await super().set_string(key, value)


@pytest.fixture
def dune() -> Book:
    return Book(id="b1", title="Dune", authors=["Frank Herbert"])


@pytest.fixture
def sample_books() -> list[Book]:
    return [
        Book(
            id="zyTCAlFPjgYC",
            title="The Google Story",
            authors=["David A. Vise", "Mark Malseed"],
            image_url="https://books.google.com/books/content?id=zyTCAlFPjgYC&zoom=1",
            description="Here is the story behind one of the most remarkable companies.",
        ),
        Book(id="x7T1", title="Untitled Draft", authors=[]),
    ]


@pytest.fixture
def sample_volume() -> dict:
    return {
        "kind": "books#volume",
        "id": "zyTCAlFPjgYC",
        "volumeInfo": {
            "title": "The Google Story",
            "authors": ["David A. Vise", "Mark Malseed"],
            "description": "Here is the story behind one of the most remarkable companies.",
            "imageLinks": {
                "smallThumbnail": "http://books.google.com/books/content?id=zyTCAlFPjgYC&zoom=5&edge=curl",
                "thumbnail": "http://books.google.com/books/content?id=zyTCAlFPjgYC&zoom=1&edge=curl",
            },
        },
    }


@pytest.fixture
async def sqlite_store(tmp_path):
    store = SqliteFavoritesStore(tmp_path / "favorites.db")
    yield store
    await store.close()


@pytest.fixture
def preference_store() -> PreferenceFavoritesStore:
    return PreferenceFavoritesStore(InMemoryPreferences())


@pytest.fixture
def remote_500() -> RemoteError:
    return RemoteError("Failed to load books: HTTP 500", status_code=500)
