"""
Shared fixtures for the scheduler test-suite.

Also ensures the project root is on sys.path so the flat packages
(models, schedulers, risk, ...) import without installation.
"""

import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

_root = Path(__file__).resolve().parents[1]
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from models.job import Job  # noqa: E402
from models.machine import Machine, MachineStatus  # noqa: E402


@pytest.fixture
def anchor() -> datetime:
    """Monday 2024-05-06 08:00, the shift start every test schedules from."""
    return datetime(2024, 5, 6, 8, 0)


@pytest.fixture
def make_job(anchor):
    """Factory for jobs due a number of hours after the anchor."""
    def _make(job_id, due_in_hours=72, priority=1, minutes=60,
              machine_type="blow_mold", setup_group=None, urgent=False):
        return Job(
            job_id=job_id,
            due_date=anchor + timedelta(hours=due_in_hours),
            priority=priority,
            processing_time_min=minutes,
            required_machine_type=machine_type,
            setup_group=setup_group,
            is_urgent=urgent,
        )
    return _make


@pytest.fixture
def two_blow_molders():
    return [
        Machine("A", "Blow Molder A", "blow_mold", MachineStatus.OPERATIONAL),
        Machine("B", "Blow Molder B", "blow_mold", MachineStatus.OPERATIONAL),
    ]


@pytest.fixture
def mixed_machines():
    """Two operational machines of different types plus two unavailable ones."""
    return [
        Machine("BM-1", "Blow Molder 1", "blow_mold", MachineStatus.OPERATIONAL),
        Machine("BM-2", "Blow Molder 2", "blow_mold", MachineStatus.MAINTENANCE),
        Machine("LB-1", "Labeler 1", "labeler", MachineStatus.OPERATIONAL),
        Machine("LB-2", "Labeler 2", "labeler", MachineStatus.OFFLINE),
    ]
