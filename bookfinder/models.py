from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
    )


class Book(CamelModel):
    id: str = Field(min_length=1)
    title: str
    authors: list[str] = []
    image_url: str | None = None
    description: str | None = None

    @field_validator("image_url", "description", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        return None if value == "" else value

    @field_validator("authors")
    @classmethod
    def _drop_blank_authors(cls, value: list[str]) -> list[str]:
        return [author for author in value if author]

    @property
    def primary_author(self) -> str:
        return self.authors[0] if self.authors else "Unknown"

    @property
    def author_names(self) -> str:
        return ", ".join(self.authors) if self.authors else "Unknown"


class CoverImage(CamelModel):
    source: Literal["primary", "fallback", "placeholder"]
    url: str | None = None
    content: bytes | None = None
    content_type: str | None = None


class SearchState(CamelModel):
    query: str = ""
    results: list[Book] = []
    is_loading: bool = False
    error_message: str = ""


class FavoriteToggleResult(CamelModel):
    success: bool
    is_favorite: bool
    message: str
