"""
Failure Risk Service - Owns a trained failure model and scores machines

This module turns raw sensor readings into per-machine failure risk:

    readings -> min-max normalization -> logistic regression -> risk score

The service instance holds its TrainedModel explicitly. Two services never
share a model, so callers can keep several model versions side by side and
tests stay isolated. Until a model is trained or loaded, predictions come
from a fixed weighted heuristic.
"""

import logging
import math
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from models.exceptions import TrainingDataError
from models.risk import FailureRiskPrediction, TrainedModel
from risk.logistic_regression import feature_importance, predict, train_logistic_regression

logger = logging.getLogger(__name__)


FEATURE_NAMES = (
    "vibration",
    "temperature",
    "power_draw",
    "cycle_time",
    "motor_current",
    "days_since_maintenance",
    "utilization",
)

LABEL_COLUMN = "failure_occurred"

# (min, max) per feature, in sensor units
DEFAULT_BOUNDS: Dict[str, Tuple[float, float]] = {
    "vibration": (1.5, 6.0),
    "temperature": (150.0, 220.0),
    "power_draw": (50.0, 100.0),
    "cycle_time": (20.0, 40.0),
    "motor_current": (10.0, 20.0),
    "days_since_maintenance": (0.0, 14.0),
    "utilization": (0.7, 1.0),
}

# Substituted for missing readings before model prediction
DEFAULT_READINGS: Dict[str, float] = {
    "vibration": 2.5,
    "temperature": 180.0,
    "power_draw": 50.0,
    "cycle_time": 30.0,
    "motor_current": 10.0,
    "days_since_maintenance": 0.0,
    "utilization": 0.8,
}

# Heuristic fallback substitutes these; an absent vibration counts as 0
FALLBACK_READINGS: Dict[str, float] = {**DEFAULT_READINGS, "vibration": 0.0}

# Heuristic used before any model is trained
FALLBACK_WEIGHTS: Dict[str, float] = {
    "vibration": 0.25,
    "temperature": 0.20,
    "power_draw": 0.15,
    "cycle_time": 0.10,
    "motor_current": 0.15,
    "days_since_maintenance": 0.10,
    "utilization": 0.05,
}

OUTLOOK_DAYS = 7
DAILY_RISK_DRIFT = 0.02
TOP_FEATURES = 5

Readings = Union[pd.DataFrame, Iterable[Mapping[str, Any]]]


def _risk_band(score: float) -> str:
    if score < 0.3:
        return "Low"
    if score < 0.6:
        return "Medium"
    return "High"


def _display_name(feature: str) -> str:
    return feature.replace("_", " ").title()


class FailureRiskService:
    """
    Explicit owner of a failure-prediction model.

    Example:
        >>> service = FailureRiskService()
        >>> service.train(history_df)
        >>> service.machine_risks({"BM-01": {"vibration": 4.8}})
        {'BM-01': 0.61}
    """

    def __init__(
        self,
        bounds: Optional[Mapping[str, Tuple[float, float]]] = None,
        learning_rate: float = 0.01,
        iterations: int = 1000,
        model: Optional[TrainedModel] = None,
    ):
        self.bounds = dict(DEFAULT_BOUNDS)
        if bounds:
            self.bounds.update({name: tuple(pair) for name, pair in bounds.items()})
        self.learning_rate = learning_rate
        self.iterations = iterations
        self._model = model

    @property
    def model(self) -> Optional[TrainedModel]:
        return self._model

    @property
    def is_trained(self) -> bool:
        return self._model is not None

    def load_model(self, model: TrainedModel) -> None:
        """Replace the owned model (e.g. one restored from storage)."""
        self._model = model

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def _readings_frame(self, readings: Readings) -> pd.DataFrame:
        frame = readings.copy() if isinstance(readings, pd.DataFrame) else pd.DataFrame(list(readings))
        for name in FEATURE_NAMES:
            if name not in frame.columns:
                frame[name] = DEFAULT_READINGS[name]
            frame[name] = pd.to_numeric(frame[name], errors="coerce").fillna(DEFAULT_READINGS[name])
        return frame

    def normalize(self, readings: Readings) -> np.ndarray:
        """
        Min-max scale readings into model features.

        Values outside the bounds are not clipped, matching how the model
        was trained.

        Returns:
            Matrix with one row per reading, columns in FEATURE_NAMES order
        """
        frame = self._readings_frame(readings)
        columns = []
        for name in FEATURE_NAMES:
            low, high = self.bounds[name]
            columns.append((frame[name].to_numpy(dtype=float) - low) / (high - low))
        return np.column_stack(columns) if len(frame) else np.empty((0, len(FEATURE_NAMES)))

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def train(self, samples: Readings, **train_kwargs) -> TrainedModel:
        """
        Train on labelled sensor history and keep the resulting model.

        Args:
            samples: DataFrame or records with sensor columns and a
                ``failure_occurred`` 0/1 column
            **train_kwargs: Passed to train_logistic_regression
                (``cancel_event``, ``max_seconds``)

        Returns:
            The newly owned TrainedModel
        """
        frame = samples.copy() if isinstance(samples, pd.DataFrame) else pd.DataFrame(list(samples))
        if frame.empty:
            raise TrainingDataError("No training samples supplied")
        if LABEL_COLUMN not in frame.columns:
            raise TrainingDataError(f"Training samples need a '{LABEL_COLUMN}' column")

        labels = pd.to_numeric(frame[LABEL_COLUMN], errors="coerce")
        if labels.isna().any():
            missing = labels.index[labels.isna()].tolist()
            raise TrainingDataError(
                f"{len(missing)} training sample(s) have a missing or non-numeric '{LABEL_COLUMN}'",
                {"rows": missing}
            )
        features = self.normalize(frame)

        model = train_logistic_regression(
            features.tolist(),
            labels.tolist(),
            learning_rate=self.learning_rate,
            iterations=self.iterations,
            feature_names=FEATURE_NAMES,
            **train_kwargs,
        )
        self._model = model
        logger.info("Failure model trained on %d samples (f1=%.3f)", len(frame), model.f1)
        return model

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------

    def _outlook(self, risk: float, days_since_maintenance_norm: float, today: date) -> List[Tuple[date, float]]:
        return [
            (today + timedelta(days=day),
             round(min(1.0, risk + days_since_maintenance_norm * DAILY_RISK_DRIFT * day), 2))
            for day in range(1, OUTLOOK_DAYS + 1)
        ]

    def predict_failure_risk(
        self,
        machine_id: str,
        reading: Optional[Mapping[str, Any]] = None,
        today: Optional[date] = None,
    ) -> FailureRiskPrediction:
        """
        Score one machine from its latest sensor reading.

        Args:
            machine_id: Machine identifier
            reading: Sensor values by feature name; missing ones use defaults
            today: First day of the 7-day outlook is the day after this

        Returns:
            FailureRiskPrediction
        """
        reading = dict(reading or {})
        today = today or date.today()

        if self._model is None:
            return self._predict_fallback(machine_id, reading, today)

        features = self.normalize([reading])[0]
        result = predict(features.tolist(), self._model)
        days_norm = features[FEATURE_NAMES.index("days_since_maintenance")]

        logger.debug("Machine %s failure probability %.3f", machine_id, result.probability)

        return FailureRiskPrediction(
            machine_id=machine_id,
            risk_score=round(result.probability, 2),
            next_7_days=self._outlook(result.probability, days_norm, today),
            top_features=feature_importance(self._model)[:TOP_FEATURES],
            explanation=result.explanation,
            model_used=True,
        )

    def _predict_fallback(self, machine_id: str, reading: Mapping[str, Any], today: date) -> FailureRiskPrediction:
        def value(name: str) -> float:
            raw = reading.get(name)
            return FALLBACK_READINGS[name] if raw is None else float(raw)

        normalized = {
            "vibration": min(1.0, value("vibration") / 6),
            "temperature": min(1.0, max(0.0, (value("temperature") - 150) / 70)),
            "power_draw": min(1.0, value("power_draw") / 100),
            "cycle_time": min(1.0, max(0.0, (value("cycle_time") - 20) / 20)),
            "motor_current": min(1.0, value("motor_current") / 20),
            "days_since_maintenance": min(1.0, value("days_since_maintenance") / 14),
            "utilization": value("utilization"),
        }

        weighted = {name: normalized[name] * FALLBACK_WEIGHTS[name] for name in FEATURE_NAMES}
        raw_score = sum(weighted.values())
        risk = 1 / (1 + math.exp(-5 * (raw_score - 0.5)))

        # Ranked on the reported 2 dp values; equal values keep feature order
        contributions = [(_display_name(name), round(weighted[name], 2)) for name in FEATURE_NAMES]
        contributions.sort(key=lambda item: item[1], reverse=True)
        top_name = contributions[0][0]

        logger.debug("Machine %s scored by heuristic fallback: %.3f", machine_id, risk)

        return FailureRiskPrediction(
            machine_id=machine_id,
            risk_score=round(risk, 2),
            next_7_days=self._outlook(risk, normalized["days_since_maintenance"], today),
            top_features=contributions[:TOP_FEATURES],
            explanation=f"High {top_name} is the primary risk factor. "
                        f"Current risk level: {_risk_band(risk)}",
            model_used=False,
        )

    def machine_risks(
        self,
        readings_by_machine: Mapping[str, Optional[Mapping[str, Any]]],
        today: Optional[date] = None,
    ) -> Dict[str, float]:
        """
        Build the machine-id -> risk score map consumed by the schedulers.
        """
        return {
            machine_id: self.predict_failure_risk(machine_id, reading, today).risk_score
            for machine_id, reading in readings_by_machine.items()
        }
