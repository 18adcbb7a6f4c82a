"""
Scheduling Policy - Work calendar and scoring weights

The defaults here reproduce the production behaviour exactly; a policy file
(see utils.config_loader) can override any of them.
"""

from datetime import datetime, timedelta
from typing import Dict, Tuple, Any
from dataclasses import dataclass, field, asdict

from models.exceptions import ConfigError


@dataclass(frozen=True)
class WorkCalendar:
    """
    Single-shift work calendar.

    A job whose end falls at or after ``end_hour`` is pushed to the next day
    at ``start_hour`` and re-timed.
    """

    start_hour: int = 8
    end_hour: int = 22

    def __post_init__(self):
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise ConfigError(
                f"Invalid work calendar {self.start_hour}:00-{self.end_hour}:00",
                {"start_hour": self.start_hour, "end_hour": self.end_hour}
            )

    def day_start(self, moment: datetime) -> datetime:
        """Return ``moment``'s date at the shift start hour."""
        return moment.replace(hour=self.start_hour, minute=0, second=0, microsecond=0)

    def fit(self, start: datetime, duration_min: float) -> Tuple[datetime, datetime]:
        """
        Place a job of ``duration_min`` minutes starting at ``start``.

        Only the end hour is checked: a job that runs past midnight and ends
        before ``end_hour`` on the next day is kept as is.

        Returns:
            (start, end) after applying the day wrap
        """
        duration = timedelta(minutes=duration_min)
        end = start + duration

        if end.hour >= self.end_hour:
            start = self.day_start(start + timedelta(days=1))
            end = start + duration

        return start, end

    def get_shift_duration_minutes(self) -> int:
        return (self.end_hour - self.start_hour) * 60


@dataclass(frozen=True)
class ScoringWeights:
    """Additive machine-scoring terms of the risk-aware scheduler."""

    setup_match_bonus: float = 50.0
    changeover_penalty: float = 20.0
    risk_weight: float = 100.0
    risk_window_penalty: float = 80.0
    lateness_weight: float = 2.0
    slack_cap_min: float = 480.0
    slack_weight: float = 0.1
    urgent_bonus: float = 100.0
    priority_weight: float = 10.0


@dataclass(frozen=True)
class UrgencyWeights:
    """Job ordering terms of the risk-aware scheduler."""

    due_within_24h: float = 100.0
    due_within_48h: float = 50.0
    priority_weight: float = 20.0
    urgent_bonus: float = 150.0


@dataclass(frozen=True)
class SchedulingPolicy:
    """
    All tunable scheduling parameters in one immutable bundle.

    Example:
        >>> policy = SchedulingPolicy(calendar=WorkCalendar(6, 20))
    """

    calendar: WorkCalendar = field(default_factory=WorkCalendar)
    default_machine_risk: float = 0.2
    risk_window_threshold: float = 0.6
    scoring: ScoringWeights = field(default_factory=ScoringWeights)
    urgency: UrgencyWeights = field(default_factory=UrgencyWeights)

    # Placeholder stability per mode; not derived from any schedule
    stability: Dict[str, float] = field(
        default_factory=lambda: {"baseline": 0.65, "risk_aware": 0.88}
    )

    def __post_init__(self):
        if not 0.0 <= self.default_machine_risk <= 1.0:
            raise ConfigError(
                f"default_machine_risk must be in [0, 1], got {self.default_machine_risk}"
            )
        missing = {"baseline", "risk_aware"} - set(self.stability)
        if missing:
            raise ConfigError(f"Stability constants missing for: {', '.join(sorted(missing))}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
