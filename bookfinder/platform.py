import enum
import importlib.util
import logging
import sys

logger = logging.getLogger(__name__)


class Platform(str, enum.Enum):
    NATIVE = "native"
    WEB = "web"

    @property
    def is_constrained(self) -> bool:
        return self is Platform.WEB


def sqlite_available() -> bool:
    return importlib.util.find_spec("_sqlite3") is not None


def detect_platform(override: str = "auto") -> Platform:
    if override != "auto":
        return Platform(override)
    if sys.platform == "emscripten" or not sqlite_available():
        logger.info("Relational storage unavailable; using the web variant")
        return Platform.WEB
    return Platform.NATIVE
