import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import httpx

from bookfinder.config import Settings, settings as default_settings
from bookfinder.interfaces.favorites_store import FavoritesStore
from bookfinder.platform import Platform, detect_platform
from bookfinder.services.favorites import FavoritesService, build_favorites_store
from bookfinder.services.google_books import GoogleBooksClient
from bookfinder.services.image_resolver import CoverLoader, ImageUrlResolver
from bookfinder.services.search import SearchController

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    platform: Platform
    books: GoogleBooksClient
    favorites: FavoritesService
    images: ImageUrlResolver
    covers: CoverLoader
    search: SearchController


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(
    settings: Settings | None = None,
    store: FavoritesStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    configure_logs: bool = False,
) -> AsyncIterator[AppServices]:
    settings = settings or default_settings
    if configure_logs:
        configure_logging(settings.log_level)
    platform = detect_platform(settings.platform)
    logger.info("Starting bookfinder on the %s platform", platform.value)

    http = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout),
        headers={"User-Agent": settings.user_agent},
        follow_redirects=True,
        transport=transport,
    )
    favorites = FavoritesService(store or build_favorites_store(settings, platform))
    books = GoogleBooksClient(http, settings)
    images = ImageUrlResolver(
        constrained=platform.is_constrained,
        placeholder_buckets=settings.placeholder_buckets,
    )
    services = AppServices(
        platform=platform,
        books=books,
        favorites=favorites,
        images=images,
        covers=CoverLoader(images, http),
        search=SearchController(books, favorites, settings.debounce_seconds),
    )
    try:
        yield services
    finally:
        services.search.cancel()
        await favorites.close()
        await http.aclose()
