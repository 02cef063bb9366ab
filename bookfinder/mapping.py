"""Conversions between Book and its remote and stored shapes.

Remote payloads come from the Google Books volumes API and are parsed
field-by-field with explicit presence checks: anything missing or of the
wrong type falls back to a default instead of raising. Stored rows (SQLite)
and preference records (JSON) share one flat shape where authors are
comma-joined and absent optional fields are empty strings.
"""

from typing import Any

from bookfinder.errors import MalformedPayload
from bookfinder.models import Book

UNKNOWN_TITLE = "Unknown Title"

# Highest resolution first.
IMAGE_LINK_PREFERENCE = (
    "extraLarge",
    "large",
    "medium",
    "small",
    "thumbnail",
    "smallThumbnail",
)


def from_remote_payload(payload: dict[str, Any]) -> Book:
    book_id = payload.get("id") if isinstance(payload, dict) else None
    if not isinstance(book_id, str) or not book_id:
        raise MalformedPayload("Volume has no usable id")

    volume_info = payload.get("volumeInfo")
    if not isinstance(volume_info, dict):
        volume_info = {}

    title = volume_info.get("title")
    if not isinstance(title, str) or not title:
        title = UNKNOWN_TITLE

    raw_authors = volume_info.get("authors")
    authors: list[str] = []
    if isinstance(raw_authors, list):
        authors = [a for a in raw_authors if isinstance(a, str) and a]

    description = volume_info.get("description")
    if not isinstance(description, str) or not description:
        description = None

    image_url = pick_image_link(volume_info.get("imageLinks"))
    if image_url is not None:
        image_url = normalize_image_url(image_url)

    return Book(
        id=book_id,
        title=title,
        authors=authors,
        image_url=image_url,
        description=description,
    )


def pick_image_link(image_links: Any) -> str | None:
    if not isinstance(image_links, dict) or not image_links:
        return None
    for variant in IMAGE_LINK_PREFERENCE:
        url = image_links.get(variant)
        if isinstance(url, str) and url:
            return url
    for url in image_links.values():
        if isinstance(url, str) and url:
            return url
    return None


def normalize_image_url(url: str) -> str | None:
    url = url.replace("{", "").replace("}", "").strip()
    if url.startswith("http://"):
        url = "https://" + url[len("http://"):]
    return url or None


def to_storage_row(book: Book) -> dict[str, str]:
    return {
        "id": book.id,
        "title": book.title,
        "authors": ",".join(book.authors),
        "imageUrl": book.image_url or "",
        "description": book.description or "",
    }


def from_storage_row(row: Any) -> Book:
    # Accepts dicts and sqlite3.Row alike.
    authors = row["authors"] or ""
    return Book(
        id=row["id"],
        title=row["title"],
        authors=authors.split(",") if authors else [],
        image_url=row["imageUrl"] or None,
        description=row["description"] or None,
    )


to_preference_record = to_storage_row


def from_preference_record(record: Any) -> Book | None:
    """Rebuild a Book from a preference record, or None if it is unusable."""
    if not isinstance(record, dict):
        return None
    book_id = record.get("id")
    if not isinstance(book_id, str) or not book_id:
        return None
    title = record.get("title")
    return from_storage_row(
        {
            "id": book_id,
            "title": title if isinstance(title, str) and title else UNKNOWN_TITLE,
            "authors": _as_str(record.get("authors")),
            "imageUrl": _as_str(record.get("imageUrl")),
            "description": _as_str(record.get("description")),
        }
    )


def _as_str(value: Any) -> str:
    if isinstance(value, list):
        return ",".join(str(v) for v in value)
    return value if isinstance(value, str) else ""
