from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from subtrie.datastructures.type_aliases import ClientId, TopicFilter


@dataclass(frozen=True, slots=True)
class Subscription:
    """
    A client's registration for a topic filter.

    Equality covers every field, so two SUBSCRIBE requests from the same
    client for the same filter with different QoS are distinct entries.
    """

    client_id: ClientId
    topic: TopicFilter
    qos: int = 0
    clean_session: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Subscription:
        return cls(
            client_id=str(data["client_id"]),
            topic=str(data["topic"]),
            qos=int(data.get("qos", 0)),
            clean_session=bool(data.get("clean_session", False)),
        )
