class BookfinderError(Exception):
    """Base class for errors raised by bookfinder."""


class RemoteError(BookfinderError):
    """The book catalog could not be searched.

    ``status_code`` is set for non-success HTTP responses and left as
    ``None`` for transport failures (timeouts, DNS, connection resets).
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StorageUnavailable(BookfinderError):
    """The favorites backend is not supported here or failed to initialize."""


class StorageWriteError(BookfinderError):
    """A favorites write failed after the backend was confirmed available."""


class MalformedPayload(BookfinderError):
    """A remote payload cannot be turned into a Book at all."""
