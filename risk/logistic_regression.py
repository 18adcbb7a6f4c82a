"""
Logistic Regression - Failure classifier trained by batch gradient descent

Features must already be min-max normalized by the caller; no scaling
happens here.

Training runs a fixed number of full-batch gradient-descent iterations on
the cross-entropy loss: no convergence check, no early stopping, no
adaptive learning rate. With a handful of features and bounded training
sets this keeps results exactly reproducible for a given input. Metrics are
computed on the training set.
"""

import logging
import threading
import time as time_module
from typing import List, Optional, Sequence, Tuple

import numpy as np

from models.exceptions import (
    DimensionMismatchError,
    InvalidInputError,
    TrainingCancelledError,
    TrainingDataError,
)
from models.risk import PredictionResult, TrainedModel

logger = logging.getLogger(__name__)

Z_CLIP = 500.0
DECISION_THRESHOLD = 0.5
TOP_CONTRIBUTIONS = 5


def sigmoid(z):
    """Logistic function with ``z`` clipped to [-500, 500] to avoid overflow."""
    return 1.0 / (1.0 + np.exp(-np.clip(z, -Z_CLIP, Z_CLIP)))


def _validate_training_data(
    features: Sequence[Sequence[float]],
    labels: Sequence[int],
    feature_names: Optional[Sequence[str]],
) -> Tuple[np.ndarray, np.ndarray, List[str]]:
    if len(features) == 0:
        raise TrainingDataError("Training features are empty")

    width = len(features[0])
    if width == 0:
        raise TrainingDataError("Training rows have no features")

    for index, row in enumerate(features):
        if len(row) != width:
            raise TrainingDataError(
                f"Row {index} has {len(row)} features, expected {width}",
                {"row": index, "expected": width, "actual": len(row)}
            )

    if len(features) != len(labels):
        raise TrainingDataError(
            f"{len(features)} feature rows but {len(labels)} labels",
            {"features": len(features), "labels": len(labels)}
        )

    y = np.asarray(labels, dtype=float)
    if not np.isin(y, (0.0, 1.0)).all():
        raise TrainingDataError("Labels must be 0 or 1")

    if feature_names:
        names = list(feature_names)
        if len(names) != width:
            raise TrainingDataError(
                f"{len(names)} feature names for {width} features",
                {"names": len(names), "features": width}
            )
    else:
        names = [f"feature_{i}" for i in range(width)]

    return np.asarray(features, dtype=float), y, names


def _binary_metrics(predicted: np.ndarray, actual: np.ndarray) -> Tuple[float, float, float, float]:
    tp = int(np.sum((predicted == 1) & (actual == 1)))
    fp = int(np.sum((predicted == 1) & (actual == 0)))
    fn = int(np.sum((predicted == 0) & (actual == 1)))
    tn = int(np.sum((predicted == 0) & (actual == 0)))

    accuracy = (tp + tn) / len(actual)
    precision = tp / (tp + fp) if tp + fp > 0 else 0.0
    recall = tp / (tp + fn) if tp + fn > 0 else 0.0
    f1 = 2 * precision * recall / (precision + recall) if precision + recall > 0 else 0.0
    return accuracy, precision, recall, f1


def train_logistic_regression(
    features: Sequence[Sequence[float]],
    labels: Sequence[int],
    learning_rate: float = 0.01,
    iterations: int = 1000,
    feature_names: Optional[Sequence[str]] = None,
    *,
    cancel_event: Optional[threading.Event] = None,
    max_seconds: Optional[float] = None,
) -> TrainedModel:
    """
    Fit a logistic-regression classifier.

    Args:
        features: Normalized feature rows, all the same width
        labels: 0/1 label per row
        learning_rate: Gradient-descent step size
        iterations: Exact number of full-batch iterations
        feature_names: Names per feature column (default ``feature_<i>``)
        cancel_event: Stops training between iterations when set
        max_seconds: Wall-clock budget; exceeded budget stops training

    Returns:
        TrainedModel with training-set metrics

    Raises:
        TrainingDataError: empty, ragged or mismatched data
        InvalidInputError: non-positive learning rate or negative iterations
        TrainingCancelledError: cancelled or over budget
    """
    if learning_rate <= 0:
        raise InvalidInputError(f"Learning rate must be positive, got: {learning_rate}")
    if iterations < 0:
        raise InvalidInputError(f"Iterations must be non-negative, got: {iterations}")

    X, y, names = _validate_training_data(features, labels, feature_names)
    n_samples, n_features = X.shape

    logger.info(
        "Training logistic regression: %d samples, %d features, %d iterations, lr=%s",
        n_samples, n_features, iterations, learning_rate
    )

    weights = np.zeros(n_features)
    bias = 0.0
    step = learning_rate / n_samples
    deadline = time_module.monotonic() + max_seconds if max_seconds is not None else None

    for iteration in range(iterations):
        if cancel_event is not None and cancel_event.is_set():
            raise TrainingCancelledError(iteration, "cancelled")
        if deadline is not None and time_module.monotonic() > deadline:
            raise TrainingCancelledError(iteration, f"exceeded {max_seconds}s budget")

        error = sigmoid(X @ weights + bias) - y
        weights -= step * (X.T @ error)
        bias -= step * float(error.sum())

    predicted = (sigmoid(X @ weights + bias) >= DECISION_THRESHOLD).astype(int)
    accuracy, precision, recall, f1 = _binary_metrics(predicted, y.astype(int))

    logger.info(
        "Training finished: accuracy=%.3f precision=%.3f recall=%.3f f1=%.3f",
        accuracy, precision, recall, f1
    )

    return TrainedModel(
        weights=tuple(weights.tolist()),
        bias=bias,
        feature_names=tuple(names),
        accuracy=accuracy,
        precision=precision,
        recall=recall,
        f1=f1,
    )


def predict(features: Sequence[float], model: TrainedModel) -> PredictionResult:
    """
    Predict failure probability for one feature vector and explain it.

    The explanation ranks ``|weight_i * feature_i|`` and reports the top five
    signed contributions.

    Raises:
        DimensionMismatchError: vector width differs from the model
    """
    if len(features) != model.n_features:
        raise DimensionMismatchError(expected=model.n_features, actual=len(features))

    x = np.asarray(features, dtype=float)
    w = np.asarray(model.weights)
    probability = float(sigmoid(float(x @ w) + model.bias))
    prediction = 1 if probability >= DECISION_THRESHOLD else 0

    contributions = [(name, float(value)) for name, value in zip(model.feature_names, x * w)]
    # sorted() is stable, equal magnitudes keep column order
    contributions = sorted(contributions, key=lambda item: abs(item[1]), reverse=True)
    top = contributions[:TOP_CONTRIBUTIONS]

    label = "HIGH RISK" if prediction == 1 else "LOW RISK"
    factors = ", ".join(f"{name} ({value:+.3f})" for name, value in top)
    explanation = (
        f"Prediction: {label} ({probability * 100:.1f}% probability). "
        f"Top contributing factors: {factors}"
    )

    return PredictionResult(
        probability=probability,
        prediction=prediction,
        explanation=explanation,
        contributions=top,
    )


def feature_importance(model: TrainedModel) -> List[Tuple[str, float]]:
    """
    Absolute weights scaled so the largest is 1, sorted descending.

    Returns:
        List of (feature_name, importance)
    """
    magnitudes = [abs(weight) for weight in model.weights]
    largest = max(magnitudes, default=0.0)
    if largest > 0:
        magnitudes = [value / largest for value in magnitudes]

    ranked = list(zip(model.feature_names, magnitudes))
    return sorted(ranked, key=lambda item: item[1], reverse=True)
