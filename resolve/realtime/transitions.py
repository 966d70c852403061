"""
Last observed status and severity per complaint
"""
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional

from resolve.models import Complaint, ComplaintStatus, Severity


@dataclass(frozen=True)
class Observed:
    status: Optional[ComplaintStatus] = None
    severity: Optional[Severity] = None


class TransitionLog:
    """Per-complaint record of what this view has already seen.

    Transitions are detected against the last observed values, so a
    replayed event compares equal to itself and fires nothing.
    """

    def __init__(self):
        self._observed: Dict[str, Observed] = {}

    def __contains__(self, complaint_id: str) -> bool:
        return complaint_id in self._observed

    def __len__(self) -> int:
        return len(self._observed)

    def seed(self, complaints: Iterable[Complaint]) -> None:
        """Record complaints fetched by a refresh, keeping anything already known"""
        for complaint in complaints:
            if complaint.id not in self._observed:
                self._observed[complaint.id] = Observed(complaint.status, complaint.severity)

    def previous(self, complaint_id: str, reported: Mapping[str, object]) -> Observed:
        """Values before this event.

        The transport's old row may hold only the primary key; values this
        view observed take precedence over it.
        """
        observed = self._observed.get(complaint_id)
        if observed is not None:
            return observed

        status = reported.get("status")
        severity = reported.get("severity")
        return Observed(
            ComplaintStatus(status) if status else None,
            Severity(severity) if severity else None,
        )

    def record(self, complaint: Complaint) -> None:
        self._observed[complaint.id] = Observed(complaint.status, complaint.severity)

    def forget(self, complaint_id: str) -> None:
        self._observed.pop(complaint_id, None)
