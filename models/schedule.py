"""
Schedule Model - Represents production schedules and KPIs

This module defines the output bundle of a scheduling run: the schedule
items, the KPIs computed from them, and the mode that produced them.

Key Features:
    - Immutable schedule items (one per assigned job)
    - KPI record with the exact empty-schedule sentinel
    - Dictionary / DataFrame views for the API and reporting layers
"""

from datetime import datetime
from typing import List, Dict, Tuple, Any
from dataclasses import dataclass, field

import pandas as pd


BASELINE_MODE = "baseline"
RISK_AWARE_MODE = "risk_aware"
SCHEDULE_MODES = (BASELINE_MODE, RISK_AWARE_MODE)


@dataclass(frozen=True)
class ScheduleItem:
    """
    Represents a job assigned to a specific machine with timing.
    """
    item_id: str                # "SI-<n>", 1-based creation order
    machine_id: str
    job_id: str
    start_ts: datetime
    end_ts: datetime
    frozen: bool = False        # Locked from later rescheduling (urgent jobs)
    risk_score: float = 0.0

    def get_duration_minutes(self) -> float:
        return (self.end_ts - self.start_ts).total_seconds() / 60

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.item_id,
            "machine_id": self.machine_id,
            "job_id": self.job_id,
            "start_ts": self.start_ts.isoformat(),
            "end_ts": self.end_ts.isoformat(),
            "frozen": self.frozen,
            "risk_score": self.risk_score,
        }


@dataclass(frozen=True)
class ScheduleKPIs:
    """
    Key Performance Indicators for schedule evaluation.
    """

    makespan: float = 0             # Minutes from first start to last end
    total_lateness: float = 0       # Minutes past due, summed
    on_time_rate: float = 1.0       # Fraction of items finishing by due date
    changeovers: int = 0            # Setup group transitions per machine
    utilization: float = 0.0        # Processing time / available machine time
    risk_cost: float = 0.0          # Mean item risk score
    stability: float = 1.0

    @classmethod
    def empty(cls) -> 'ScheduleKPIs':
        """Sentinel KPIs for a schedule without items."""
        return cls(
            makespan=0,
            total_lateness=0,
            on_time_rate=1,
            changeovers=0,
            utilization=0,
            risk_cost=0,
            stability=1,
        )

    @property
    def utilization_flagged(self) -> bool:
        """Utilization above 1 means the inputs were inconsistent."""
        return self.utilization > 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "makespan": self.makespan,
            "total_lateness": self.total_lateness,
            "on_time_rate": self.on_time_rate,
            "changeovers": self.changeovers,
            "utilization": self.utilization,
            "risk_cost": self.risk_cost,
            "stability": self.stability,
        }

    def __str__(self) -> str:
        return (f"KPI(Makespan: {self.makespan}min, "
                f"Lateness: {self.total_lateness}min, "
                f"On-time: {self.on_time_rate:.0%}, "
                f"Changeovers: {self.changeovers}, "
                f"Risk: {self.risk_cost:.2f})")


@dataclass(frozen=True)
class ScheduleResult:
    """
    Represents a complete production schedule.

    Created atomically by one scheduling call and owned by the caller.
    """

    items: Tuple[ScheduleItem, ...] = field(default_factory=tuple)
    kpis: ScheduleKPIs = field(default_factory=ScheduleKPIs.empty)
    mode: str = BASELINE_MODE

    def get_machine_items(self, machine_id: str) -> List[ScheduleItem]:
        """
        Get all items assigned to a specific machine, in creation order.

        Args:
            machine_id: Machine identifier

        Returns:
            List of schedule items for that machine
        """
        return [item for item in self.items if item.machine_id == machine_id]

    def assigned_job_ids(self) -> List[str]:
        return [item.job_id for item in self.items]

    def to_dict(self) -> Dict[str, Any]:
        """Convert schedule to dictionary."""
        return {
            "items": [item.to_dict() for item in self.items],
            "kpis": self.kpis.to_dict(),
            "mode": self.mode,
        }

    def to_dataframe(self) -> pd.DataFrame:
        """One row per schedule item, in creation order."""
        columns = ["id", "machine_id", "job_id", "start_ts", "end_ts", "frozen", "risk_score"]
        rows = [
            {
                "id": item.item_id,
                "machine_id": item.machine_id,
                "job_id": item.job_id,
                "start_ts": item.start_ts,
                "end_ts": item.end_ts,
                "frozen": item.frozen,
                "risk_score": item.risk_score,
            }
            for item in self.items
        ]
        return pd.DataFrame(rows, columns=columns)

    def __str__(self) -> str:
        machines = {item.machine_id for item in self.items}
        return (f"Schedule({self.mode}: {len(machines)} machines, "
                f"{len(self.items)} jobs, KPI: {self.kpis})")
