import asyncio
import logging
from typing import Awaitable, Callable

from bookfinder.errors import BookfinderError, StorageUnavailable, StorageWriteError
from bookfinder.interfaces.book_search import BookSearchClient
from bookfinder.models import Book, FavoriteToggleResult, SearchState
from bookfinder.services.favorites import FavoritesService

logger = logging.getLogger(__name__)

SearchFn = Callable[[str], Awaitable[list[Book]]]
DeliverFn = Callable[[str, list[Book], BookfinderError | None], None]


class SearchDebouncer:
    """Runs only the last of a burst of searches.

    Each ``schedule`` call bumps a generation counter and cancels the pending
    task. A task delivers its outcome only if its generation is still the
    latest once the quiet interval and the search itself have finished.
    """

    def __init__(self, search: SearchFn, quiet_interval: float = 0.5) -> None:
        self._search = search
        self.quiet_interval = quiet_interval
        self._generation = 0
        self._task: asyncio.Task | None = None

    def schedule(self, query: str, deliver: DeliverFn) -> asyncio.Task:
        self._generation += 1
        self._cancel_pending()
        self._task = asyncio.create_task(self._run(query, self._generation, deliver))
        return self._task

    def cancel(self) -> None:
        self._generation += 1
        self._cancel_pending()

    async def wait(self) -> None:
        if self._task is not None:
            await asyncio.wait([self._task])

    def _cancel_pending(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def _run(self, query: str, generation: int, deliver: DeliverFn) -> None:
        await asyncio.sleep(self.quiet_interval)
        if generation != self._generation:
            return

        error: BookfinderError | None = None
        try:
            results = await self._search(query)
        except BookfinderError as e:
            logger.warning("Search for %r failed: %s", query, e)
            results, error = [], e

        if generation != self._generation:
            logger.debug("Dropping stale results for %r", query)
            return
        deliver(query, results, error)


class SearchController:
    def __init__(
        self,
        client: BookSearchClient,
        favorites: FavoritesService,
        quiet_interval: float = 0.5,
    ) -> None:
        self._favorites = favorites
        self._debouncer = SearchDebouncer(client.search, quiet_interval)
        self.state = SearchState()

    def on_query_changed(self, query: str) -> None:
        if not query.strip():
            self._debouncer.cancel()
            self.state = SearchState(query=query)
            return

        self.state = self.state.model_copy(
            update={"query": query, "is_loading": True, "error_message": ""}
        )
        self._debouncer.schedule(query, self._deliver)

    async def wait(self) -> None:
        await self._debouncer.wait()

    def cancel(self) -> None:
        self._debouncer.cancel()
        self.state = self.state.model_copy(update={"is_loading": False})

    async def toggle_favorite(self, book: Book) -> FavoriteToggleResult:
        was_favorite = await self._favorites.is_favorite(book.id)
        try:
            if was_favorite:
                await self._favorites.remove(book.id)
            else:
                await self._favorites.add(book)
        except (StorageUnavailable, StorageWriteError) as e:
            return FavoriteToggleResult(
                success=False,
                is_favorite=was_favorite,
                message=f"Error updating favorites: {e}",
            )

        if was_favorite:
            message = f"{book.title} removed from favorites"
        else:
            message = f"{book.title} added to favorites"
        return FavoriteToggleResult(success=True, is_favorite=not was_favorite, message=message)

    def _deliver(
        self, query: str, results: list[Book], error: BookfinderError | None
    ) -> None:
        if error is not None:
            self.state = SearchState(
                query=query,
                results=[],
                is_loading=False,
                error_message=f"Error searching books: {error}",
            )
            return
        self.state = SearchState(query=query, results=results, is_loading=False)
