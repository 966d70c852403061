"""
Row change events as delivered by the change feed
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from resolve.models import Comment, Complaint


class ChangeKind(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ALL = "*"


class FeedTable(str, Enum):
    COMPLAINTS = "complaints"
    COMMENTS = "comments"


RECORD_TYPES = {
    FeedTable.COMPLAINTS: Complaint,
    FeedTable.COMMENTS: Comment,
}


@dataclass(frozen=True)
class ChangeEvent:
    """One committed row change.

    ``record`` is the new row parsed into its record type. ``previous`` holds
    whatever the transport reported for the old row; without full replica
    identity this is often only the primary key.
    """

    table: FeedTable
    kind: ChangeKind
    record: Union[Complaint, Comment]
    previous: Mapping[str, Any] = field(default_factory=dict)
    commit_timestamp: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ChangeEvent":
        """Parse a realtime postgres_changes payload.

        Accepts the Python client shape (``{"data": {"type", "record",
        "old_record", "table"}}``) and the flattened shape
        (``{"eventType", "new", "old", "table"}``).
        """
        data = payload.get("data", payload)

        kind = data.get("type") or data.get("eventType")
        new_row = data.get("record")
        if new_row is None:
            new_row = data.get("new")
        old_row = data.get("old_record")
        if old_row is None:
            old_row = data.get("old")

        if not kind or not data.get("table"):
            raise ValueError("Change payload is missing its type or table")

        table = FeedTable(data["table"])
        if not new_row:
            raise ValueError(f"Change payload for {table.value} has no new row")

        return cls(
            table=table,
            kind=ChangeKind(kind),
            record=RECORD_TYPES[table].model_validate(new_row),
            previous=dict(old_row or {}),
            commit_timestamp=data.get("commit_timestamp"),
        )

    @property
    def complaint_id(self) -> str:
        if isinstance(self.record, Comment):
            return self.record.complaint_id
        return self.record.id
