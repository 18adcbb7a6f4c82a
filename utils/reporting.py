"""
Reporting - Side-by-side comparison of schedules

Turns ScheduleResults into pandas tables for the dashboard / export layer.
"""

from typing import Sequence

import pandas as pd

from models.schedule import ScheduleResult

# Direction in which each KPI improves
KPI_HIGHER_IS_BETTER = {
    'makespan': False,
    'total_lateness': False,
    'on_time_rate': True,
    'changeovers': False,
    'utilization': True,
    'risk_cost': False,
    'stability': True,
}


def compare_kpis(baseline: ScheduleResult, risk_aware: ScheduleResult) -> pd.DataFrame:
    """
    Build a KPI comparison table.

    Args:
        baseline: Baseline schedule
        risk_aware: Risk-aware schedule

    Returns:
        DataFrame indexed by KPI with columns baseline, risk_aware, delta
        (risk_aware - baseline) and risk_aware_better
    """
    base = baseline.kpis.to_dict()
    aware = risk_aware.kpis.to_dict()

    rows = []
    for kpi, higher_is_better in KPI_HIGHER_IS_BETTER.items():
        delta = aware[kpi] - base[kpi]
        rows.append({
            'kpi': kpi,
            'baseline': base[kpi],
            'risk_aware': aware[kpi],
            'delta': round(delta, 4),
            'risk_aware_better': delta > 0 if higher_is_better else delta < 0,
        })

    return pd.DataFrame(rows).set_index('kpi')


def machine_share(results: Sequence[ScheduleResult]) -> pd.DataFrame:
    """
    Fraction of each schedule's items assigned to each machine.

    Returns:
        DataFrame indexed by machine_id with one column per schedule mode;
        machines absent from a schedule get 0
    """
    frames = []
    for result in results:
        items = result.to_dataframe()
        if items.empty:
            share = pd.Series(dtype=float, name=result.mode)
        else:
            share = items['machine_id'].value_counts(normalize=True).rename(result.mode)
        frames.append(share)

    table = pd.concat(frames, axis=1).fillna(0.0) if frames else pd.DataFrame()
    table.index.name = 'machine_id'
    return table.sort_index()
