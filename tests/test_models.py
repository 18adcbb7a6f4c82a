from datetime import datetime, timedelta, timezone

import pytest

from models.exceptions import ConfigError, InputError, InvalidInputError
from models.job import Job
from models.machine import Machine, MachineStatus, RiskWindow
from models.policy import SchedulingPolicy, WorkCalendar
from models.schedule import ScheduleKPIs


def test_job_rejects_non_positive_processing_time(anchor) -> None:
    with pytest.raises(InvalidInputError):
        Job("J1", anchor, processing_time_min=0)


def test_job_rejects_priority_below_one(anchor) -> None:
    with pytest.raises(InputError):
        Job("J1", anchor, priority=0)


def test_job_empty_setup_group_means_none(anchor) -> None:
    assert Job("J1", anchor, setup_group="").setup_group is None


def test_job_from_dict_accepts_api_keys() -> None:
    job = Job.from_dict({
        "id": "J-7",
        "dueDate": "2024-05-07T10:00:00Z",
        "priority": 3,
        "processingTimeMin": 45,
        "requiredMachineType": "any",
        "setupGroup": "500ml",
        "isUrgent": None,
        "unexpected": "ignored",
    })

    assert job.job_id == "J-7"
    assert job.due_date == datetime(2024, 5, 7, 10, 0, tzinfo=timezone.utc)
    assert job.accepts_any_machine
    assert job.setup_group == "500ml"
    assert job.is_urgent is False


def test_job_from_dict_rejects_bad_timestamp() -> None:
    with pytest.raises(InvalidInputError):
        Job.from_dict({"job_id": "J1", "due_date": "tomorrow"})


def test_machine_status_coerced_and_validated() -> None:
    assert Machine("M1", status="Operational").is_operational
    assert not Machine("M2", status="warning").is_operational

    with pytest.raises(InvalidInputError):
        Machine("M3", status="broken")


def test_machine_can_run_matches_type_or_wildcard(anchor) -> None:
    machine = Machine("M1", machine_type="labeler")

    assert machine.can_run(Job("J1", anchor, required_machine_type="labeler"))
    assert machine.can_run(Job("J2", anchor, required_machine_type="any"))
    assert not machine.can_run(Job("J3", anchor, required_machine_type="blow_mold"))


def test_risk_window_overlap_is_half_open(anchor) -> None:
    window = RiskWindow(anchor, anchor + timedelta(hours=2), risk=0.8)

    assert window.overlaps_with(anchor + timedelta(hours=1), anchor + timedelta(hours=3))
    assert not window.overlaps_with(anchor + timedelta(hours=2), anchor + timedelta(hours=3))
    assert not window.overlaps_with(anchor - timedelta(hours=1), anchor)
    assert window.is_high_risk()
    assert not RiskWindow(anchor, anchor, 0.59).is_high_risk()


def test_calendar_keeps_job_ending_before_shift_end(anchor) -> None:
    start = anchor.replace(hour=20)
    assert WorkCalendar().fit(start, 60) == (start, start + timedelta(hours=1))


def test_calendar_wraps_job_ending_at_shift_end(anchor) -> None:
    start, end = WorkCalendar().fit(anchor.replace(hour=21), 60)

    assert start == datetime(2024, 5, 7, 8, 0)
    assert end == datetime(2024, 5, 7, 9, 0)


def test_calendar_rejects_inverted_hours() -> None:
    with pytest.raises(ConfigError):
        WorkCalendar(start_hour=22, end_hour=8)


def test_policy_requires_stability_for_both_modes() -> None:
    with pytest.raises(ConfigError):
        SchedulingPolicy(stability={"baseline": 0.65})


def test_empty_kpis_sentinel() -> None:
    kpis = ScheduleKPIs.empty()
    assert (kpis.makespan, kpis.total_lateness, kpis.on_time_rate, kpis.changeovers,
            kpis.utilization, kpis.risk_cost, kpis.stability) == (0, 0, 1, 0, 0, 0, 1)
    assert not kpis.utilization_flagged
