from abc import ABC, abstractmethod
from typing import Any

import orjson


class Serializer(ABC):
    """Abstract base class for data serialization."""

    @abstractmethod
    def serialize(self, data: Any) -> bytes:
        """Serializes data into bytes."""
        pass

    @abstractmethod
    def deserialize(self, data: bytes) -> Any:
        """Deserializes bytes into data."""
        pass


def _record_to_plain(obj: Any) -> Any:
    # Slotted records expose to_dict(); orjson hands us anything it can't encode
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Cannot serialize {type(obj).__name__}")


class JsonSerializer(Serializer):
    """orjson serializer for record lists such as a client's subscriptions."""

    def serialize(self, data: Any) -> bytes:
        return orjson.dumps(data, default=_record_to_plain)

    def deserialize(self, data: bytes) -> Any:
        """
        Decode JSON bytes.

        Raises:
            orjson.JSONDecodeError: if ``data`` is not valid JSON
        """
        return orjson.loads(data)
