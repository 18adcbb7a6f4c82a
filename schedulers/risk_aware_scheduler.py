"""
Risk-Aware Scheduler - Greedy multi-criteria assignment

This scheduler weighs setup continuity, machine failure risk, risk-window
conflicts, due-date slack, urgency and priority in one additive score per
candidate machine.

Key Responsibilities:
    - Order jobs by a composite urgency score
    - Score every compatible operational machine for each job
    - Commit the best machine and move on (single pass, no backtracking)

The result is a heuristic and deliberately not globally optimal.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Mapping, Optional, Sequence

from models.job import Job
from models.machine import Machine, RiskWindow
from models.policy import SchedulingPolicy
from models.schedule import RISK_AWARE_MODE, ScheduleItem, ScheduleResult
from schedulers.common import (
    compatible_machines,
    current_time,
    initial_clocks,
    machine_risk,
    operational_machines,
)
from schedulers.kpi_calculator import calculate_kpis

logger = logging.getLogger(__name__)


class RiskAwareScheduler:
    """
    Greedy scheduler that steers work away from risky machines and windows.
    """

    mode = RISK_AWARE_MODE

    def __init__(self, policy: Optional[SchedulingPolicy] = None):
        """
        Initialize the risk-aware scheduler.

        Args:
            policy: Calendar, default risk, scoring and urgency weights
        """
        self.policy = policy or SchedulingPolicy()

    def urgency_score(self, job: Job, now: datetime) -> float:
        """
        Composite ordering score; higher is scheduled first.

        Overdue jobs count as due within 24 hours.
        """
        weights = self.policy.urgency
        hours_until_due = (job.due_date - now).total_seconds() / 3600

        score = 0.0
        if hours_until_due < 24:
            score += weights.due_within_24h
        elif hours_until_due < 48:
            score += weights.due_within_48h

        score += job.priority * weights.priority_weight

        if job.is_urgent:
            score += weights.urgent_bonus

        return score

    def order_jobs(self, jobs: Sequence[Job], now: datetime) -> List[Job]:
        """Urgency score descending; ties keep input order."""
        return sorted(jobs, key=lambda j: -self.urgency_score(j, now))

    def score_machine(
        self,
        job: Job,
        start: datetime,
        last_setup_group: Optional[str],
        risk: float,
        risk_window: Optional[RiskWindow],
    ) -> float:
        """
        Additive desirability of running ``job`` on a machine free at ``start``.

        The tentative interval is [start, start + processing time), before
        any shift wrap.

        Args:
            job: Job being placed
            start: When the candidate machine becomes free
            last_setup_group: Setup group of the machine's previous job
            risk: Machine's current failure risk
            risk_window: Machine's risk window, if any

        Returns:
            Score (higher is better)
        """
        weights = self.policy.scoring
        end = start + timedelta(minutes=job.processing_time_min)
        score = 0.0

        # Setup continuity
        if last_setup_group == job.setup_group:
            score += weights.setup_match_bonus
        elif job.setup_group:
            score -= weights.changeover_penalty

        # Risk avoidance
        score -= risk * weights.risk_weight

        if (risk_window is not None
                and risk_window.is_high_risk(self.policy.risk_window_threshold)
                and risk_window.overlaps_with(start, end)):
            score -= weights.risk_window_penalty

        # Due-date slack in minutes
        slack = (job.due_date - end).total_seconds() / 60
        if slack < 0:
            score -= abs(slack) * weights.lateness_weight
        else:
            score += min(slack, weights.slack_cap_min) * weights.slack_weight

        if job.is_urgent:
            score += weights.urgent_bonus

        score += job.priority * weights.priority_weight

        return score

    def schedule(
        self,
        jobs: Sequence[Job],
        machines: Sequence[Machine],
        machine_risks: Optional[Mapping[str, float]] = None,
        risk_windows: Optional[Mapping[str, RiskWindow]] = None,
        start_time: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> ScheduleResult:
        """
        Build a risk-aware schedule.

        Args:
            jobs: Jobs to schedule
            machines: All machines (non-operational ones are ignored)
            machine_risks: machine_id -> current risk score
            risk_windows: machine_id -> elevated-risk window
            start_time: Anchor day; clocks start at its shift start
            now: Reference time for the due-within-24h/48h ordering terms

        Returns:
            ScheduleResult in risk_aware mode
        """
        machine_risks = machine_risks or {}
        risk_windows = risk_windows or {}
        now = now or current_time(jobs)

        available = operational_machines(machines)
        free_at: Dict[str, datetime] = initial_clocks(available, self.policy, start_time or now)
        last_setup: Dict[str, Optional[str]] = {m.machine_id: None for m in available}

        items: List[ScheduleItem] = []
        dropped = 0

        for job in self.order_jobs(jobs, now):
            compatible = compatible_machines(job, available)
            if not compatible:
                logger.debug("No compatible machine for %s, skipping", job.job_id)
                dropped += 1
                continue

            best_machine = None
            best_score = float("-inf")

            for machine in compatible:
                mid = machine.machine_id
                score = self.score_machine(
                    job,
                    free_at[mid],
                    last_setup[mid],
                    machine_risk(mid, machine_risks, self.policy),
                    risk_windows.get(mid),
                )

                # Strictly greater: first machine seen wins on ties
                if score > best_score:
                    best_score = score
                    best_machine = machine

            mid = best_machine.machine_id
            start, end = self.policy.calendar.fit(free_at[mid], job.processing_time_min)

            logger.debug("Job %s -> %s (score %.1f)", job.job_id, mid, best_score)

            items.append(ScheduleItem(
                item_id=f"SI-{len(items) + 1}",
                machine_id=mid,
                job_id=job.job_id,
                start_ts=start,
                end_ts=end,
                frozen=job.is_urgent,
                risk_score=machine_risk(mid, machine_risks, self.policy),
            ))

            free_at[mid] = end
            last_setup[mid] = job.setup_group

        if dropped:
            logger.warning("Risk-aware schedule dropped %d job(s) with no compatible machine", dropped)

        kpis = calculate_kpis(items, jobs, machines, machine_risks, self.mode, self.policy)
        logger.info("Risk-aware schedule: %d/%d jobs assigned, %s", len(items), len(jobs), kpis)

        return ScheduleResult(items=tuple(items), kpis=kpis, mode=self.mode)

    def __str__(self) -> str:
        return "RiskAwareScheduler(algorithm=greedy multi-criteria)"
