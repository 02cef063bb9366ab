import logging

from bookfinder.backends.preference_store import PreferenceFavoritesStore
from bookfinder.backends.preferences import JsonFilePreferences
from bookfinder.config import Settings
from bookfinder.errors import StorageUnavailable, StorageWriteError
from bookfinder.interfaces.favorites_store import FavoritesStore
from bookfinder.models import Book
from bookfinder.platform import Platform

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Favorites are unavailable on this platform"


def build_favorites_store(settings: Settings, platform: Platform) -> FavoritesStore:
    if platform is Platform.NATIVE:
        # sqlite3 may be missing on the web variant.
        from bookfinder.backends.sqlite_store import SqliteFavoritesStore

        return SqliteFavoritesStore(settings.database_path)
    return PreferenceFavoritesStore(JsonFilePreferences(settings.preferences_path))


class FavoritesService:
    """The single favorites API used by the presentation layer.

    Writes against a backend that is unavailable raise
    ``StorageUnavailable``; writes the backend reports as failed raise
    ``StorageWriteError``. Reads never raise.
    """

    def __init__(self, store: FavoritesStore) -> None:
        self._store = store

    @property
    def store(self) -> FavoritesStore:
        return self._store

    async def add(self, book: Book) -> None:
        self._check_available()
        try:
            ok = await self._store.add(book)
        except StorageUnavailable as e:
            raise StorageUnavailable(UNAVAILABLE_MESSAGE) from e
        if not ok:
            raise StorageWriteError(f"Failed to add {book.title} to favorites")

    async def remove(self, book_id: str) -> None:
        self._check_available()
        try:
            ok = await self._store.remove(book_id)
        except StorageUnavailable as e:
            raise StorageUnavailable(UNAVAILABLE_MESSAGE) from e
        if not ok:
            raise StorageWriteError(f"Failed to remove {book_id} from favorites")

    async def toggle(self, book: Book) -> bool:
        """Flip membership of ``book`` and return the new state."""
        if await self.is_favorite(book.id):
            await self.remove(book.id)
            return False
        await self.add(book)
        return True

    async def is_favorite(self, book_id: str) -> bool:
        if not self._store.is_available:
            return False
        return await self._store.is_favorite(book_id)

    async def list(self) -> list[Book]:
        if not self._store.is_available:
            return []
        return await self._store.get_all()

    async def clear(self) -> None:
        self._check_available()
        try:
            ok = await self._store.clear_all()
        except StorageUnavailable as e:
            raise StorageUnavailable(UNAVAILABLE_MESSAGE) from e
        if not ok:
            raise StorageWriteError("Failed to clear favorites")

    async def close(self) -> None:
        await self._store.close()

    def _check_available(self) -> None:
        if not self._store.is_available:
            logger.info("Rejecting favorites write: backend unavailable")
            raise StorageUnavailable(UNAVAILABLE_MESSAGE)
