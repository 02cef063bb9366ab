import json
import logging
from typing import Any

from bookfinder.interfaces.favorites_store import FavoritesStore
from bookfinder.interfaces.preferences import PreferenceStore
from bookfinder.mapping import from_preference_record, to_preference_record
from bookfinder.models import Book

logger = logging.getLogger(__name__)

FAVORITES_KEY = "user_favorites"
FAVORITE_BOOKS_KEY = "favorite_books_data"


class PreferenceFavoritesStore(FavoritesStore):
    """Favorites emulated on top of a preference store.

    Two entries are kept: an ordered list of favorite ids under
    ``user_favorites`` and a JSON object mapping id to the stored record
    under ``favorite_books_data``. Every operation is a read-modify-write of
    those entries and reports failure as ``False``/``[]`` instead of raising.
    """

    def __init__(self, preferences: PreferenceStore) -> None:
        self._prefs = preferences

    async def add(self, book: Book) -> bool:
        if not book.id:
            return False
        try:
            favorites = await self._ids()
            previous = await self._prefs.get_string(FAVORITE_BOOKS_KEY)
            records = self._parse_records(previous)
            records[book.id] = to_preference_record(book)
            # Record first, id last: a failed id write leaves the set unchanged.
            if not await self._prefs.set_string(FAVORITE_BOOKS_KEY, json.dumps(records)):
                return False
            if book.id in favorites:
                return True
            try:
                stored = await self._prefs.set_string_list(FAVORITES_KEY, [*favorites, book.id])
            except Exception:
                await self._restore_records(previous)
                raise
            if not stored:
                await self._restore_records(previous)
            return stored
        except Exception as e:
            logger.warning("Error adding book %s to favorites: %s", book.id, e)
            return False

    async def remove(self, book_id: str) -> bool:
        if not book_id:
            return False
        try:
            favorites = await self._ids()
            records = await self._records()
            # Id first, record last: a dangling record is never listed.
            if book_id in favorites:
                remaining = [i for i in favorites if i != book_id]
                if not await self._prefs.set_string_list(FAVORITES_KEY, remaining):
                    return False
            if book_id not in records:
                return True
            records.pop(book_id)
            try:
                stored = await self._prefs.set_string(FAVORITE_BOOKS_KEY, json.dumps(records))
            except Exception:
                await self._restore_ids(favorites)
                raise
            if not stored:
                await self._restore_ids(favorites)
            return stored
        except Exception as e:
            logger.warning("Error removing book %s from favorites: %s", book_id, e)
            return False

    async def get_all(self) -> list[Book]:
        try:
            favorites = await self._ids()
            records = await self._records()
        except Exception as e:
            logger.warning("Error getting favorite books: %s", e)
            return []
        books = []
        for book_id in favorites:
            book = from_preference_record(records.get(book_id))
            if book is None:
                logger.debug("Skipping favorite %s with no stored record", book_id)
                continue
            books.append(book)
        return books

    async def is_favorite(self, book_id: str) -> bool:
        try:
            return book_id in await self._ids()
        except Exception as e:
            logger.warning("Error checking favorites: %s", e)
            return False

    async def clear_all(self) -> bool:
        try:
            removed_ids = await self._prefs.remove(FAVORITES_KEY)
            removed_records = await self._prefs.remove(FAVORITE_BOOKS_KEY)
        except Exception as e:
            logger.warning("Error clearing favorites: %s", e)
            return False
        return removed_ids and removed_records

    async def _ids(self) -> list[str]:
        return list(await self._prefs.get_string_list(FAVORITES_KEY) or [])

    async def _records(self) -> dict[str, Any]:
        return self._parse_records(await self._prefs.get_string(FAVORITE_BOOKS_KEY))

    @staticmethod
    def _parse_records(raw: str | None) -> dict[str, Any]:
        try:
            records = json.loads(raw or "{}")
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable favorites data")
            return {}
        return records if isinstance(records, dict) else {}

    async def _restore_records(self, previous: str | None) -> None:
        try:
            if previous is None:
                await self._prefs.remove(FAVORITE_BOOKS_KEY)
            else:
                await self._prefs.set_string(FAVORITE_BOOKS_KEY, previous)
        except Exception as e:
            logger.error("Could not restore favorites data: %s", e)

    async def _restore_ids(self, favorites: list[str]) -> None:
        try:
            await self._prefs.set_string_list(FAVORITES_KEY, favorites)
        except Exception as e:
            logger.error("Could not restore favorite ids: %s", e)
