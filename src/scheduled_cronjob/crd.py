"""Status shape and lifecycle phases of the ScheduledCronJob resource."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class Phase(str, Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"

    def as_str(self) -> str:
        """Stable string form, used for display and as the event reason."""
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ScheduledCronJobStatus:
    phase: Phase
    message: str | None = None
    last_update_time: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        status: dict[str, Any] = {"phase": self.phase.as_str()}
        if self.message is not None:
            status["message"] = self.message
        if self.last_update_time is not None:
            status["lastUpdateTime"] = self.last_update_time.isoformat()
        return status

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ScheduledCronJobStatus | None:
        """Parse a status block; ``None`` when it is absent or carries no known phase.

        A malformed ``lastUpdateTime`` reads as unset.
        """
        if not data or not data.get("phase"):
            return None
        try:
            phase = Phase(data["phase"])
        except ValueError:
            return None
        return cls(
            phase=phase,
            message=data.get("message"),
            last_update_time=_parse_time(data.get("lastUpdateTime")),
        )


def _parse_time(raw: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp; anything unparseable reads as unset."""
    if not raw or not isinstance(raw, str):
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None
