import pytest

from risk.failure_model import FailureRiskService
from workflows.orchestrator import ComparisonOrchestrator


@pytest.fixture
def jobs(make_job):
    return [
        make_job("J1", due_in_hours=26, priority=1),
        make_job("J2", due_in_hours=28, priority=2),
        make_job("J3", due_in_hours=30, priority=1),
    ]


def test_compares_both_strategies(anchor, jobs, two_blow_molders) -> None:
    orchestrator = ComparisonOrchestrator()

    result = orchestrator.compare(jobs, two_blow_molders, {"A": 0.1, "B": 0.6}, start_time=anchor)

    assert result["success"]
    assert result["status"] == "completed"
    assert result["baseline"].mode == "baseline"
    assert result["risk_aware"].mode == "risk_aware"

    comparison = result["comparison"]
    assert comparison.loc["risk_cost", "baseline"] == 0.27
    assert comparison.loc["risk_cost", "risk_aware"] == 0.1
    assert bool(comparison.loc["risk_cost", "risk_aware_better"])

    share = result["machine_share"]
    assert share.loc["A", "risk_aware"] == 1.0
    assert share.loc["A", "baseline"] == pytest.approx(2 / 3)


def test_explicit_risks_win_over_predictions(anchor, jobs, two_blow_molders) -> None:
    orchestrator = ComparisonOrchestrator(risk_service=FailureRiskService())

    result = orchestrator.compare(
        jobs,
        two_blow_molders,
        machine_risks={"A": 0.1},
        sensor_readings={"A": {"vibration": 5.9}, "B": {}},
        start_time=anchor,
    )

    # B comes from the untrained service heuristic with no readings
    assert result["machine_risks"] == {"A": 0.1, "B": 0.29}
    assert {item.risk_score for item in result["risk_aware"].items} <= {0.1, 0.29}


def test_readings_ignored_without_risk_service(anchor, jobs, two_blow_molders) -> None:
    result = ComparisonOrchestrator().compare(
        jobs, two_blow_molders, sensor_readings={"A": {"vibration": 5.9}}, start_time=anchor
    )

    assert result["machine_risks"] == {}
    assert {item.risk_score for item in result["baseline"].items} == {0.2}


def test_empty_job_list_completes(anchor, two_blow_molders) -> None:
    result = ComparisonOrchestrator().compare([], two_blow_molders, start_time=anchor)

    assert result["success"]
    assert result["baseline"].items == ()
    assert result["machine_share"].empty
