from abc import ABC, abstractmethod


class PreferenceStore(ABC):
    """A small string-keyed store in the style of platform preferences."""

    @abstractmethod
    async def get_string_list(self, key: str) -> list[str] | None:
        ...

    @abstractmethod
    async def set_string_list(self, key: str, value: list[str]) -> bool:
        ...

    @abstractmethod
    async def get_string(self, key: str) -> str | None:
        ...

    @abstractmethod
    async def set_string(self, key: str, value: str) -> bool:
        ...

    @abstractmethod
    async def remove(self, key: str) -> bool:
        ...
