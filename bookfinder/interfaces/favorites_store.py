from abc import ABC, abstractmethod

from bookfinder.models import Book


class FavoritesStore(ABC):
    """A local backend holding the favorites set, keyed by book id.

    ``add`` is an upsert: adding a book whose id is already present
    replaces the stored record wholesale. Reads never raise; writes either
    raise or report failure by returning ``False``.
    """

    @property
    def is_available(self) -> bool:
        return True

    @abstractmethod
    async def add(self, book: Book) -> bool:
        ...

    @abstractmethod
    async def remove(self, book_id: str) -> bool:
        ...

    @abstractmethod
    async def get_all(self) -> list[Book]:
        ...

    @abstractmethod
    async def is_favorite(self, book_id: str) -> bool:
        ...

    @abstractmethod
    async def clear_all(self) -> bool:
        ...

    async def close(self) -> None:
        return None
