"""
Shared helpers for the greedy schedulers.
"""

from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence

from models.job import Job
from models.machine import Machine
from models.policy import SchedulingPolicy


def operational_machines(machines: Sequence[Machine]) -> List[Machine]:
    """Keep only assignable machines, preserving input order."""
    return [m for m in machines if m.is_operational]


def compatible_machines(job: Job, machines: Sequence[Machine]) -> List[Machine]:
    return [m for m in machines if m.can_run(job)]


def current_time(jobs: Sequence[Job]) -> datetime:
    """Wall-clock now, in the timezone of the job due dates (naive if they are)."""
    tz = jobs[0].due_date.tzinfo if jobs else None
    return datetime.now(tz)


def initial_clocks(
    machines: Sequence[Machine],
    policy: SchedulingPolicy,
    start_time: datetime,
) -> Dict[str, datetime]:
    """Every machine becomes free at the shift start of the anchor day."""
    anchor = policy.calendar.day_start(start_time)
    return {m.machine_id: anchor for m in machines}


def machine_risk(machine_id: str, machine_risks: Mapping[str, float], policy: SchedulingPolicy) -> float:
    """Externally supplied risk for the machine, or the policy default when absent."""
    risk = machine_risks.get(machine_id)
    return policy.default_machine_risk if risk is None else float(risk)
