"""
Risk Model Records - Trained logistic-regression model and predictions

These records are plain values. A TrainedModel is owned by whoever trained
or loaded it (see risk.failure_model.FailureRiskService); nothing here is
global.
"""

from datetime import date
from typing import List, Dict, Tuple, Any
from dataclasses import dataclass, field

from models.exceptions import InvalidInputError


@dataclass(frozen=True)
class TrainedModel:
    """
    Weights and training-set metrics of a logistic-regression classifier.

    Metrics are measured on the training set itself (no held-out split).
    """

    weights: Tuple[float, ...]
    bias: float
    feature_names: Tuple[str, ...]
    accuracy: float = 0.0
    precision: float = 0.0
    recall: float = 0.0
    f1: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "weights", tuple(float(w) for w in self.weights))
        object.__setattr__(self, "feature_names", tuple(self.feature_names))

        if len(self.weights) != len(self.feature_names):
            raise InvalidInputError(
                f"Model has {len(self.weights)} weights but "
                f"{len(self.feature_names)} feature names"
            )

    @property
    def n_features(self) -> int:
        return len(self.weights)

    def metrics(self) -> Dict[str, float]:
        return {
            "accuracy": self.accuracy,
            "precision": self.precision,
            "recall": self.recall,
            "f1": self.f1,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weights": list(self.weights),
            "bias": self.bias,
            "feature_names": list(self.feature_names),
            **self.metrics(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TrainedModel':
        return cls(
            weights=tuple(data["weights"]),
            bias=float(data["bias"]),
            feature_names=tuple(data["feature_names"]),
            accuracy=float(data.get("accuracy", 0.0)),
            precision=float(data.get("precision", 0.0)),
            recall=float(data.get("recall", 0.0)),
            f1=float(data.get("f1", 0.0)),
        )


@dataclass(frozen=True)
class PredictionResult:
    """Probability, hard label and explanation for one feature vector."""

    probability: float
    prediction: int
    explanation: str
    contributions: List[Tuple[str, float]] = field(default_factory=list)


@dataclass(frozen=True)
class FailureRiskPrediction:
    """Per-machine failure risk with a 7-day outlook."""

    machine_id: str
    risk_score: float                                    # 0-1, rounded to 2 dp
    next_7_days: List[Tuple[date, float]] = field(default_factory=list)
    top_features: List[Tuple[str, float]] = field(default_factory=list)
    explanation: str = ""
    model_used: bool = False                             # False = heuristic fallback

    def to_dict(self) -> Dict[str, Any]:
        return {
            "machine_id": self.machine_id,
            "risk_score": self.risk_score,
            "next_7_days": [
                {"date": day.isoformat(), "risk": risk} for day, risk in self.next_7_days
            ],
            "top_features": [
                {"feature": name, "contribution": value} for name, value in self.top_features
            ],
            "explanation": self.explanation,
            "model_used": self.model_used,
        }
