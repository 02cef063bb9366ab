from abc import ABC, abstractmethod

from bookfinder.models import Book


class BookSearchClient(ABC):
    @abstractmethod
    async def search(self, query: str) -> list[Book]:
        ...

    @abstractmethod
    async def get_book(self, book_id: str) -> Book | None:
        ...
