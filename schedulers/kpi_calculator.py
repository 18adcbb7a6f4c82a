"""
KPI Calculator - Makes baseline and risk-aware schedules comparable

Derives makespan, lateness, on-time rate, changeovers, utilization, risk
cost and stability from the items of one scheduling run.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Sequence

from models.job import Job
from models.machine import Machine
from models.policy import SchedulingPolicy
from models.schedule import SCHEDULE_MODES, ScheduleItem, ScheduleKPIs
from models.exceptions import InvalidInputError

logger = logging.getLogger(__name__)


def _minutes(delta) -> float:
    return delta.total_seconds() / 60


def count_changeovers(items: Sequence[ScheduleItem], jobs_by_id: Mapping[str, Job]) -> int:
    """
    Count setup-group transitions per machine.

    Items are grouped per machine in insertion order (not re-sorted by
    time). Items whose job has no setup group are left out of the sequence.
    """
    groups_per_machine: Dict[str, List[str]] = defaultdict(list)
    for item in items:
        job = jobs_by_id.get(item.job_id)
        if job is not None and job.setup_group:
            groups_per_machine[item.machine_id].append(job.setup_group)

    changeovers = 0
    for groups in groups_per_machine.values():
        for previous, current in zip(groups, groups[1:]):
            if current != previous:
                changeovers += 1
    return changeovers


def calculate_kpis(
    items: Sequence[ScheduleItem],
    jobs: Sequence[Job],
    machines: Sequence[Machine],
    machine_risks: Optional[Mapping[str, float]],
    mode: str,
    policy: Optional[SchedulingPolicy] = None,
) -> ScheduleKPIs:
    """
    Calculate KPIs for a produced schedule.

    Args:
        items: Schedule items in creation order
        jobs: All input jobs (used to look up due dates and setup groups)
        machines: All input machines (operational ones form the capacity)
        machine_risks: Risk map the schedule was built with
        mode: "baseline" or "risk_aware"
        policy: Supplies the per-mode stability constant

    Returns:
        ScheduleKPIs; the empty sentinel when there are no items
    """
    if mode not in SCHEDULE_MODES:
        raise InvalidInputError(f"Unknown schedule mode: {mode!r}")

    if not items:
        return ScheduleKPIs.empty()

    policy = policy or SchedulingPolicy()
    jobs_by_id = {job.job_id: job for job in jobs}

    first_start = min(item.start_ts for item in items)
    last_end = max(item.end_ts for item in items)
    makespan = _minutes(last_end - first_start)

    # Lateness and on-time rate; unknown jobs still count in the denominator
    total_lateness = 0.0
    on_time = 0
    for item in items:
        job = jobs_by_id.get(item.job_id)
        if job is None:
            continue
        lateness = max(0.0, _minutes(item.end_ts - job.due_date))
        total_lateness += lateness
        if lateness == 0:
            on_time += 1
    on_time_rate = on_time / len(items)

    changeovers = count_changeovers(items, jobs_by_id)

    total_processing = sum(
        jobs_by_id[item.job_id].processing_time_min
        for item in items if item.job_id in jobs_by_id
    )
    operational_count = sum(1 for m in machines if m.is_operational)
    utilization = (
        total_processing / (makespan * operational_count)
        if operational_count > 0 and makespan > 0 else 0.0
    )
    if utilization > 1:
        logger.warning(
            "Utilization %.2f exceeds 1; schedule items and machine list are inconsistent",
            utilization
        )

    risk_cost = sum(item.risk_score for item in items) / len(items)
    stability = policy.stability[mode]

    return ScheduleKPIs(
        makespan=round(makespan),
        total_lateness=round(total_lateness),
        on_time_rate=round(on_time_rate, 2),
        changeovers=changeovers,
        utilization=round(utilization, 2),
        risk_cost=round(risk_cost, 2),
        stability=round(stability, 2),
    )
