from datetime import datetime

from models.schedule import ScheduleItem, ScheduleKPIs, ScheduleResult
from utils.reporting import compare_kpis, machine_share


def _result(mode, machine_ids, **kpis):
    items = tuple(
        ScheduleItem(f"SI-{n}", machine_id, f"J{n}", datetime(2024, 5, 6, 8), datetime(2024, 5, 6, 9))
        for n, machine_id in enumerate(machine_ids, start=1)
    )
    return ScheduleResult(items=items, kpis=ScheduleKPIs(**kpis), mode=mode)


def test_compare_kpis_marks_improvements() -> None:
    baseline = _result("baseline", ["A"], makespan=300, risk_cost=0.4, on_time_rate=0.5, stability=0.65)
    risk_aware = _result("risk_aware", ["A"], makespan=320, risk_cost=0.1, on_time_rate=0.75, stability=0.88)

    table = compare_kpis(baseline, risk_aware)

    assert list(table.columns) == ["baseline", "risk_aware", "delta", "risk_aware_better"]
    assert table.loc["risk_cost", "delta"] == -0.3
    assert bool(table.loc["risk_cost", "risk_aware_better"])
    assert bool(table.loc["on_time_rate", "risk_aware_better"])
    assert not bool(table.loc["makespan", "risk_aware_better"])
    assert not bool(table.loc["changeovers", "risk_aware_better"])


def test_machine_share_fills_missing_machines() -> None:
    baseline = _result("baseline", ["A", "B", "A", "B"])
    risk_aware = _result("risk_aware", ["A", "A", "A", "A"])
    empty = ScheduleResult(mode="baseline")

    table = machine_share([baseline, risk_aware])

    assert table.index.name == "machine_id"
    assert table.loc["A", "baseline"] == 0.5
    assert table.loc["A", "risk_aware"] == 1.0
    assert table.loc["B", "risk_aware"] == 0.0
    assert machine_share([empty]).empty
