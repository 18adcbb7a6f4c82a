"""
Baseline Scheduler - Greedy priority / FIFO implementation

This provides the naive strategy the risk-aware scheduler is compared
against. Risk is ignored beyond tagging each item with the chosen machine's
static risk score.
"""

import logging
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence

from models.job import Job
from models.machine import Machine
from models.policy import SchedulingPolicy
from models.schedule import BASELINE_MODE, ScheduleItem, ScheduleResult
from schedulers.common import (
    compatible_machines,
    current_time,
    initial_clocks,
    machine_risk,
    operational_machines,
)
from schedulers.kpi_calculator import calculate_kpis

logger = logging.getLogger(__name__)


class BaselineScheduler:
    """
    Greedy priority-then-due-date scheduler.

    This scheduler uses minimal intelligence:
    - Orders jobs by priority (desc), then due date (asc)
    - Chooses the compatible machine that becomes free earliest
    - No setup grouping, no risk avoidance, no backtracking
    """

    mode = BASELINE_MODE

    def __init__(self, policy: Optional[SchedulingPolicy] = None):
        """
        Initialize baseline scheduler.

        Args:
            policy: Work calendar and default risk (defaults if omitted)
        """
        self.policy = policy or SchedulingPolicy()

    def order_jobs(self, jobs: Sequence[Job]) -> List[Job]:
        """Priority descending, then due date ascending; ties keep input order."""
        return sorted(jobs, key=lambda j: (-j.priority, j.due_date))

    def schedule(
        self,
        jobs: Sequence[Job],
        machines: Sequence[Machine],
        machine_risks: Optional[Mapping[str, float]] = None,
        start_time: Optional[datetime] = None,
    ) -> ScheduleResult:
        """
        Build a baseline schedule.

        Algorithm:
        1. Keep operational machines only
        2. Sort jobs by priority (desc), due date (asc)
        3. For each job pick the compatible machine free earliest
        4. Place it there, wrapping to the next shift if it would end too late

        Jobs without a compatible machine are dropped without an item.

        Args:
            jobs: Jobs to schedule
            machines: All machines (non-operational ones are ignored)
            machine_risks: machine_id -> static risk score
            start_time: Anchor day; clocks start at its shift start

        Returns:
            ScheduleResult in baseline mode
        """
        machine_risks = machine_risks or {}
        available = operational_machines(machines)
        free_at: Dict[str, datetime] = initial_clocks(
            available, self.policy, start_time or current_time(jobs)
        )

        items: List[ScheduleItem] = []
        dropped = 0

        for job in self.order_jobs(jobs):
            compatible = compatible_machines(job, available)
            if not compatible:
                logger.debug("No compatible machine for %s, skipping", job.job_id)
                dropped += 1
                continue

            # Earliest free machine; first one wins on ties
            selected = compatible[0]
            for machine in compatible[1:]:
                if free_at[machine.machine_id] < free_at[selected.machine_id]:
                    selected = machine

            start, end = self.policy.calendar.fit(free_at[selected.machine_id], job.processing_time_min)

            items.append(ScheduleItem(
                item_id=f"SI-{len(items) + 1}",
                machine_id=selected.machine_id,
                job_id=job.job_id,
                start_ts=start,
                end_ts=end,
                frozen=job.is_urgent,
                risk_score=machine_risk(selected.machine_id, machine_risks, self.policy),
            ))

            free_at[selected.machine_id] = end

        if dropped:
            logger.warning("Baseline schedule dropped %d job(s) with no compatible machine", dropped)

        kpis = calculate_kpis(items, jobs, machines, machine_risks, self.mode, self.policy)
        logger.info("Baseline schedule: %d/%d jobs assigned, %s", len(items), len(jobs), kpis)

        return ScheduleResult(items=tuple(items), kpis=kpis, mode=self.mode)

    def __str__(self) -> str:
        return "BaselineScheduler(algorithm=priority/FIFO, risk=ignored)"
