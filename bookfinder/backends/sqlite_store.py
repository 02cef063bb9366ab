import asyncio
import logging
import sqlite3
from pathlib import Path
from typing import Callable, TypeVar

from bookfinder.errors import StorageUnavailable, StorageWriteError
from bookfinder.interfaces.favorites_store import FavoritesStore
from bookfinder.mapping import from_storage_row, to_storage_row
from bookfinder.models import Book

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS books (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        authors TEXT NOT NULL,
        imageUrl TEXT,
        description TEXT
    )
"""


class SqliteFavoritesStore(FavoritesStore):
    """Favorites kept in a single SQLite table keyed by book id.

    The connection is opened on first use and reused afterwards. If opening
    it fails, the failure is remembered and every later call raises
    ``StorageUnavailable`` straight away instead of retrying.

    Reads swallow storage errors and return ``[]``/``False`` so a broken
    database never blocks browsing; writes raise.
    """

    def __init__(self, db_path: Path | str = "books_database.db") -> None:
        self.db_path = str(db_path)
        self._conn: sqlite3.Connection | None = None
        self._init_error: str | None = None
        self._init_lock = asyncio.Lock()

    @property
    def is_available(self) -> bool:
        return self._init_error is None

    async def insert(self, book: Book) -> None:
        row = to_storage_row(book)
        await self._write(
            lambda conn: conn.execute(
                "INSERT OR REPLACE INTO books (id, title, authors, imageUrl, description) "
                "VALUES (:id, :title, :authors, :imageUrl, :description)",
                row,
            ),
            f"insert {book.id}",
        )
        logger.debug("Book inserted: %s", book.title)

    async def delete(self, book_id: str) -> None:
        await self._write(
            lambda conn: conn.execute("DELETE FROM books WHERE id = ?", (book_id,)),
            f"delete {book_id}",
        )
        logger.debug("Book deleted: %s", book_id)

    async def get_all(self) -> list[Book]:
        try:
            rows = await self._read(
                lambda conn: conn.execute("SELECT * FROM books ORDER BY rowid").fetchall()
            )
        except (StorageUnavailable, sqlite3.Error) as e:
            logger.warning("Error getting books: %s", e)
            return []
        books = [from_storage_row(row) for row in rows]
        logger.debug("Retrieved %d books from database", len(books))
        return books

    async def is_favorite(self, book_id: str) -> bool:
        try:
            row = await self._read(
                lambda conn: conn.execute(
                    "SELECT 1 FROM books WHERE id = ? LIMIT 1", (book_id,)
                ).fetchone()
            )
        except (StorageUnavailable, sqlite3.Error) as e:
            logger.warning("Error checking favorite status of %s: %s", book_id, e)
            return False
        return row is not None

    async def clear_all(self) -> bool:
        await self._write(lambda conn: conn.execute("DELETE FROM books"), "clear")
        logger.debug("All books cleared from database")
        return True

    async def add(self, book: Book) -> bool:
        await self.insert(book)
        return True

    async def remove(self, book_id: str) -> bool:
        await self.delete(book_id)
        return True

    async def close(self) -> None:
        if self._conn is not None:
            conn, self._conn = self._conn, None
            await asyncio.get_running_loop().run_in_executor(None, conn.close)

    async def _connection(self) -> sqlite3.Connection:
        if self._init_error is not None:
            raise StorageUnavailable(f"Database initialization failed: {self._init_error}")
        if self._conn is not None:
            return self._conn

        async with self._init_lock:
            if self._init_error is not None:
                raise StorageUnavailable(
                    f"Database initialization failed: {self._init_error}"
                )
            if self._conn is None:
                loop = asyncio.get_running_loop()
                try:
                    self._conn = await loop.run_in_executor(None, self._open)
                except (sqlite3.Error, OSError) as e:
                    self._init_error = str(e) or type(e).__name__
                    logger.error("Database initialization error: %s", e)
                    raise StorageUnavailable(
                        f"Database initialization failed: {self._init_error}"
                    ) from e
        return self._conn

    def _open(self) -> sqlite3.Connection:
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Database path: %s", self.db_path)
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        try:
            conn.row_factory = sqlite3.Row
            conn.execute(_SCHEMA)
            conn.commit()
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    async def _read(self, query: Callable[[sqlite3.Connection], T]) -> T:
        conn = await self._connection()
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: query(conn))

    async def _write(
        self, statement: Callable[[sqlite3.Connection], object], action: str
    ) -> None:
        conn = await self._connection()
        loop = asyncio.get_running_loop()

        def run() -> None:
            try:
                statement(conn)
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                raise

        try:
            await loop.run_in_executor(None, run)
        except sqlite3.Error as e:
            logger.error("Error during %s: %s", action, e)
            raise StorageWriteError(f"Failed to {action}: {e}") from e
