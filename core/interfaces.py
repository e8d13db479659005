"""Abstract base classes for dependency injection."""

from abc import ABC, abstractmethod
from datetime import datetime


class KeyValueStore(ABC):
    """Abstract base class for string-valued persistence.

    Any call may raise; callers treat a failure as absent/no-op.
    """

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored value for key, or None if absent."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key if present."""
        pass


class Clock(ABC):
    """Source of the current time."""

    @abstractmethod
    def now(self) -> datetime:
        """Current local time, timezone-aware."""
        pass


class IdGenerator(ABC):
    """Source of identifiers unique within the process lifetime."""

    @abstractmethod
    def new_id(self) -> str:
        pass


class ReplyGenerator(ABC):
    """Abstract base class for the persona reply provider."""

    @abstractmethod
    def generate_reply(self, messages: list[dict], system_prompt: str) -> tuple[str, int]:
        """Generate the next persona message. Returns (reply_text, generation_time_ms)."""
        pass
