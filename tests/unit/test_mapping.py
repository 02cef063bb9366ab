import pytest

from bookfinder.errors import MalformedPayload
from bookfinder.mapping import (
    from_preference_record,
    from_remote_payload,
    from_storage_row,
    normalize_image_url,
    pick_image_link,
    to_storage_row,
)
from bookfinder.models import Book


class TestFromRemotePayload:
    def test_full_payload(self, sample_volume):
        book = from_remote_payload(sample_volume)
        assert book.id == "zyTCAlFPjgYC"
        assert book.title == "The Google Story"
        assert book.authors == ["David A. Vise", "Mark Malseed"]
        assert book.description.startswith("Here is the story")
        # thumbnail beats smallThumbnail
        assert book.image_url == (
            "https://books.google.com/books/content?id=zyTCAlFPjgYC&zoom=1&edge=curl"
        )

    def test_missing_volume_info(self):
        book = from_remote_payload({"id": "abc"})
        assert book.title == "Unknown Title"
        assert book.authors == []
        assert book.image_url is None
        assert book.description is None

    def test_malformed_fields_degrade(self):
        book = from_remote_payload(
            {
                "id": "abc",
                "volumeInfo": {
                    "title": 42,
                    "authors": "Frank Herbert",
                    "imageLinks": ["not", "a", "map"],
                    "description": {"text": "nope"},
                },
            }
        )
        assert book.title == "Unknown Title"
        assert book.authors == []
        assert book.image_url is None
        assert book.description is None

    def test_non_string_authors_dropped(self):
        book = from_remote_payload(
            {"id": "abc", "volumeInfo": {"authors": ["Ann", None, 3, "Bob"]}}
        )
        assert book.authors == ["Ann", "Bob"]

    def test_volume_info_not_a_dict(self):
        book = from_remote_payload({"id": "abc", "volumeInfo": "broken"})
        assert book.title == "Unknown Title"

    @pytest.mark.parametrize("payload", [{}, {"id": ""}, {"id": 7}, "not a dict"])
    def test_missing_id_is_malformed(self, payload):
        with pytest.raises(MalformedPayload):
            from_remote_payload(payload)


class TestPickImageLink:
    def test_prefers_highest_resolution(self):
        links = {
            "thumbnail": "t",
            "large": "l",
            "small": "s",
            "extraLarge": "xl",
        }
        assert pick_image_link(links) == "xl"

    def test_preference_order(self):
        assert pick_image_link({"small": "s", "medium": "m"}) == "m"
        assert pick_image_link({"smallThumbnail": "st", "thumbnail": "t"}) == "t"

    def test_first_available_key_when_no_named_variant(self):
        assert pick_image_link({"poster": "p", "banner": "b"}) == "p"

    def test_skips_empty_values(self):
        assert pick_image_link({"large": "", "medium": "m"}) == "m"

    def test_empty_or_missing(self):
        assert pick_image_link({}) is None
        assert pick_image_link(None) is None


class TestNormalizeImageUrl:
    def test_upgrades_protocol(self):
        assert normalize_image_url("http://x.org/a.jpg") == "https://x.org/a.jpg"

    def test_strips_braces(self):
        assert normalize_image_url("https://x.org/{id}.jpg") == "https://x.org/id.jpg"

    def test_keeps_https(self):
        assert normalize_image_url("https://x.org/a.jpg") == "https://x.org/a.jpg"


class TestStorageRow:
    def test_to_storage_row(self):
        row = to_storage_row(Book(id="b1", title="Good Omens", authors=["Pratchett", "Gaiman"]))
        assert row == {
            "id": "b1",
            "title": "Good Omens",
            "authors": "Pratchett,Gaiman",
            "imageUrl": "",
            "description": "",
        }

    def test_empty_strings_become_none(self):
        book = from_storage_row(
            {"id": "b1", "title": "T", "authors": "", "imageUrl": "", "description": ""}
        )
        assert book.authors == []
        assert book.image_url is None
        assert book.description is None

    def test_null_columns_become_none(self):
        book = from_storage_row(
            {"id": "b1", "title": "T", "authors": "A", "imageUrl": None, "description": None}
        )
        assert book.image_url is None
        assert book.description is None

    def test_round_trip(self, sample_books, dune):
        for book in [*sample_books, dune]:
            assert from_storage_row(to_storage_row(book)) == book

    def test_round_trip_with_blank_author_payload(self):
        book = from_remote_payload({"id": "x", "volumeInfo": {"authors": [""]}})
        assert book.authors == []
        assert from_storage_row(to_storage_row(book)) == book

    def test_round_trip_with_blank_image_url(self):
        book = Book(id="x", title="T", image_url="", authors=["", "Ann"])
        assert from_storage_row(to_storage_row(book)) == book


class TestPreferenceRecord:
    def test_round_trip(self, dune):
        assert from_preference_record(to_storage_row(dune)) == dune

    def test_authors_stored_as_list(self):
        book = from_preference_record({"id": "b1", "title": "T", "authors": ["A", "B"]})
        assert book.authors == ["A", "B"]

    def test_missing_title_defaults(self):
        assert from_preference_record({"id": "b1"}).title == "Unknown Title"

    @pytest.mark.parametrize("record", [None, "b1", {}, {"id": ""}])
    def test_unusable_record(self, record):
        assert from_preference_record(record) is None
