"""
Machine Model - Represents production machines and their risk windows

This module defines the Machine class and the RiskWindow class used by the
risk-aware scheduler.

Key Features:
    - Machine type matching against job requirements
    - Operational status (only operational machines are assignable)
    - Elevated failure-risk windows with overlap checks
"""

from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Any
from dataclasses import dataclass

from models.exceptions import InvalidInputError
from models.job import Job, parse_timestamp


DEFAULT_RISK_WINDOW_THRESHOLD = 0.6


class MachineStatus(str, Enum):
    """Machine availability states."""
    OPERATIONAL = "operational"
    WARNING = "warning"
    MAINTENANCE = "maintenance"
    OFFLINE = "offline"


@dataclass(frozen=True)
class RiskWindow:
    """
    A time interval on a machine flagged with an elevated failure risk.

    Supplied by the risk provider; the risk-aware scheduler penalizes
    assignments that overlap a high-risk window.
    """
    start: datetime
    end: datetime
    risk: float

    def overlaps_with(self, start: datetime, end: datetime) -> bool:
        """
        Check if this window overlaps the interval [start, end).

        Args:
            start: Interval start
            end: Interval end

        Returns:
            True if there's overlap, False otherwise
        """
        return start < self.end and end > self.start

    def is_high_risk(self, threshold: float = DEFAULT_RISK_WINDOW_THRESHOLD) -> bool:
        return self.risk >= threshold

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "risk": self.risk,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RiskWindow':
        return cls(
            start=parse_timestamp(data["start"]),
            end=parse_timestamp(data["end"]),
            risk=float(data["risk"]),
        )

    def __str__(self) -> str:
        return f"RiskWindow({self.start:%H:%M}-{self.end:%H:%M}: {self.risk:.2f})"


@dataclass(frozen=True)
class Machine:
    """
    Represents a production machine.

    Example:
        >>> machine = Machine(
        ...     machine_id="BM-01",
        ...     name="Blow Molder 1",
        ...     machine_type="blow_mold",
        ...     status=MachineStatus.OPERATIONAL,
        ... )
    """

    machine_id: str                       # Unique identifier (e.g., "BM-01")
    name: str = ""
    machine_type: str = ""                # Matched against Job.required_machine_type
    status: MachineStatus = MachineStatus.OPERATIONAL
    setup_group: Optional[str] = None     # Current tooling, informational

    def __post_init__(self):
        """Coerce a raw status string into the enum."""
        if not isinstance(self.status, MachineStatus):
            try:
                object.__setattr__(self, "status", MachineStatus(str(self.status).lower()))
            except ValueError as exc:
                raise InvalidInputError(
                    f"Unknown machine status: {self.status!r}",
                    {"machine_id": self.machine_id}
                ) from exc

    @property
    def is_operational(self) -> bool:
        """Only operational machines are assignable."""
        return self.status is MachineStatus.OPERATIONAL

    def can_run(self, job: Job) -> bool:
        """
        Check if this machine can process the given job.

        Args:
            job: Job to check

        Returns:
            True if the type matches or the job accepts any machine
        """
        return job.accepts_any_machine or self.machine_type == job.required_machine_type

    def to_dict(self) -> Dict[str, Any]:
        """Convert machine to dictionary."""
        return {
            "machine_id": self.machine_id,
            "name": self.name,
            "machine_type": self.machine_type,
            "status": self.status.value,
            "setup_group": self.setup_group,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Machine':
        """Create a Machine from snake_case or API (camelCase) keys."""
        return cls(
            machine_id=data.get("machine_id", data.get("id")),
            name=data.get("name", ""),
            machine_type=data.get("machine_type", data.get("type", "")),
            status=data.get("status", MachineStatus.OPERATIONAL),
            setup_group=data.get("setup_group", data.get("setupGroup")) or None,
        )

    def __str__(self) -> str:
        return f"Machine({self.machine_id}: {self.machine_type}, {self.status.value})"
