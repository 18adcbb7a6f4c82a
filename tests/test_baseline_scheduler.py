from datetime import datetime

from models.machine import Machine
from models.policy import SchedulingPolicy, WorkCalendar
from models.schedule import ScheduleKPIs
from schedulers import generate_baseline_schedule
from schedulers.baseline_scheduler import BaselineScheduler


def test_orders_by_priority_then_due_date(anchor, make_job) -> None:
    machines = [Machine("A", machine_type="blow_mold")]
    jobs = [
        make_job("low", priority=1),
        make_job("high", priority=3),
        make_job("mid-late", priority=2, due_in_hours=30),
        make_job("mid-early", priority=2, due_in_hours=10),
    ]

    result = BaselineScheduler().schedule(jobs, machines, start_time=anchor)

    assert result.assigned_job_ids() == ["high", "mid-early", "mid-late", "low"]
    assert [item.start_ts.hour for item in result.items] == [8, 9, 10, 11]
    assert [item.item_id for item in result.items] == ["SI-1", "SI-2", "SI-3", "SI-4"]


def test_picks_earliest_free_machine_first_on_ties(anchor, make_job, two_blow_molders) -> None:
    jobs = [make_job("J1"), make_job("J2"), make_job("J3")]

    result = BaselineScheduler().schedule(jobs, two_blow_molders, start_time=anchor)

    assert [item.machine_id for item in result.items] == ["A", "B", "A"]
    assert result.items[2].start_ts == datetime(2024, 5, 6, 9, 0)


def test_ignores_non_operational_and_drops_incompatible(anchor, make_job, mixed_machines) -> None:
    jobs = [
        make_job("bottle", machine_type="blow_mold"),
        make_job("bottle-2", machine_type="blow_mold"),
        make_job("cap", machine_type="capper"),
        make_job("anything", machine_type="any"),
    ]

    result = BaselineScheduler().schedule(jobs, mixed_machines, start_time=anchor)

    assert "cap" not in result.assigned_job_ids()
    assert len(result.items) == 3
    assert {item.machine_id for item in result.items} <= {"BM-1", "LB-1"}
    bottle_machines = {i.machine_id for i in result.items if i.job_id.startswith("bottle")}
    assert bottle_machines == {"BM-1"}


def test_job_that_would_run_past_shift_moves_to_next_day(anchor, make_job) -> None:
    machines = [Machine("A", machine_type="blow_mold")]
    jobs = [make_job("long", priority=2, minutes=600), make_job("short", minutes=300)]

    result = BaselineScheduler().schedule(jobs, machines, start_time=anchor)

    first, second = result.items
    assert (first.start_ts, first.end_ts) == (datetime(2024, 5, 6, 8), datetime(2024, 5, 6, 18))
    assert (second.start_ts, second.end_ts) == (datetime(2024, 5, 7, 8), datetime(2024, 5, 7, 13))


def test_custom_calendar_sets_shift_start(anchor, make_job) -> None:
    policy = SchedulingPolicy(calendar=WorkCalendar(start_hour=6, end_hour=20))
    machines = [Machine("A", machine_type="blow_mold")]

    result = BaselineScheduler(policy).schedule([make_job("J1")], machines, start_time=anchor)

    assert result.items[0].start_ts == datetime(2024, 5, 6, 6, 0)


def test_risk_tags_use_default_when_absent(anchor, make_job, two_blow_molders) -> None:
    jobs = [make_job("J1"), make_job("J2")]

    result = BaselineScheduler().schedule(jobs, two_blow_molders, {"A": 0.0}, start_time=anchor)

    risks = {item.machine_id: item.risk_score for item in result.items}
    assert risks == {"A": 0.0, "B": 0.2}


def test_urgent_jobs_are_frozen(anchor, make_job, two_blow_molders) -> None:
    jobs = [make_job("rush", urgent=True), make_job("normal")]

    result = BaselineScheduler().schedule(jobs, two_blow_molders, start_time=anchor)

    frozen = {item.job_id: item.frozen for item in result.items}
    assert frozen == {"rush": True, "normal": False}


def test_every_item_is_well_formed(anchor, make_job, mixed_machines) -> None:
    jobs = [make_job(f"J{i}", priority=i % 3 + 1, minutes=45 + 15 * i,
                     machine_type="any" if i % 2 else "blow_mold")
            for i in range(8)]

    result = BaselineScheduler().schedule(jobs, mixed_machines, start_time=anchor)

    operational = {m.machine_id for m in mixed_machines if m.is_operational}
    assert len(result.items) == len(jobs)
    assert len(set(result.assigned_job_ids())) == len(jobs)
    for item in result.items:
        assert item.machine_id in operational
        assert item.start_ts < item.end_ts
        assert item.end_ts.hour < 22


def test_empty_inputs_return_sentinel_kpis(anchor, make_job, two_blow_molders) -> None:
    no_jobs = BaselineScheduler().schedule([], two_blow_molders, start_time=anchor)
    no_machines = BaselineScheduler().schedule([make_job("J1")], [], start_time=anchor)

    for result in (no_jobs, no_machines):
        assert result.items == ()
        assert result.kpis == ScheduleKPIs.empty()
        assert result.mode == "baseline"


def test_identical_inputs_give_identical_schedules(anchor, make_job, two_blow_molders) -> None:
    jobs = [make_job("J1", priority=2), make_job("J2", setup_group="g1"), make_job("J3")]

    first = generate_baseline_schedule(jobs, two_blow_molders, {"A": 0.3}, start_time=anchor)
    second = generate_baseline_schedule(jobs, two_blow_molders, {"A": 0.3}, start_time=anchor)

    assert first == second
    assert first.to_dict() == second.to_dict()
