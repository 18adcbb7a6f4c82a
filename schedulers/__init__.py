"""
Scheduling strategies package.

Contains the two competing greedy schedulers and the KPI calculator that
makes their outputs comparable:
- BaselineScheduler: priority / FIFO assignment
- RiskAwareScheduler: multi-criteria, risk-avoiding assignment
- calculate_kpis: schedule KPIs for either mode

The module-level functions are the in-process contracts used by the API
layer.
"""

from datetime import datetime
from typing import Mapping, Optional, Sequence

from models.job import Job
from models.machine import Machine, RiskWindow
from models.policy import SchedulingPolicy
from models.schedule import ScheduleResult
from schedulers.baseline_scheduler import BaselineScheduler
from schedulers.kpi_calculator import calculate_kpis
from schedulers.risk_aware_scheduler import RiskAwareScheduler

__all__ = [
    'BaselineScheduler', 'RiskAwareScheduler', 'calculate_kpis',
    'generate_baseline_schedule', 'generate_risk_aware_schedule',
]


def generate_baseline_schedule(
    jobs: Sequence[Job],
    machines: Sequence[Machine],
    machine_risks: Optional[Mapping[str, float]] = None,
    *,
    policy: Optional[SchedulingPolicy] = None,
    start_time: Optional[datetime] = None,
) -> ScheduleResult:
    return BaselineScheduler(policy).schedule(jobs, machines, machine_risks, start_time=start_time)


def generate_risk_aware_schedule(
    jobs: Sequence[Job],
    machines: Sequence[Machine],
    machine_risks: Optional[Mapping[str, float]] = None,
    risk_windows: Optional[Mapping[str, RiskWindow]] = None,
    *,
    policy: Optional[SchedulingPolicy] = None,
    start_time: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> ScheduleResult:
    return RiskAwareScheduler(policy).schedule(
        jobs, machines, machine_risks, risk_windows, start_time=start_time, now=now
    )
