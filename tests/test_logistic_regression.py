import threading

import numpy as np
import pytest

from models.exceptions import (
    DimensionMismatchError,
    InvalidInputError,
    TrainingCancelledError,
    TrainingDataError,
)
from models.risk import TrainedModel
from risk.logistic_regression import (
    feature_importance,
    predict,
    sigmoid,
    train_logistic_regression,
)

AND_FEATURES = [[0, 0], [0, 1], [1, 0], [1, 1]]
AND_LABELS = [0, 0, 0, 1]


def test_sigmoid_stays_finite_for_extreme_inputs() -> None:
    values = sigmoid(np.array([-1e6, 0.0, 1e6]))

    assert np.all(np.isfinite(values))
    assert values[1] == 0.5
    assert values[2] == pytest.approx(1.0)
    assert values[0] > 0


def test_learns_and_gate() -> None:
    model = train_logistic_regression(AND_FEATURES, AND_LABELS, learning_rate=0.1, iterations=1000)

    high = predict([1, 1], model)
    low = predict([0, 0], model)

    assert high.probability > low.probability
    assert model.weights[0] > 0 and model.weights[1] > 0
    assert model.bias < 0
    assert model.feature_names == ("feature_0", "feature_1")


def test_training_is_reproducible() -> None:
    first = train_logistic_regression(AND_FEATURES, AND_LABELS, learning_rate=0.1, iterations=200)
    second = train_logistic_regression(AND_FEATURES, AND_LABELS, learning_rate=0.1, iterations=200)

    assert first == second


def test_zero_iterations_predicts_everything_positive() -> None:
    model = train_logistic_regression(AND_FEATURES, AND_LABELS, iterations=0)

    assert model.weights == (0.0, 0.0)
    assert model.metrics() == pytest.approx(
        {"accuracy": 0.25, "precision": 0.25, "recall": 1.0, "f1": 0.4}
    )
    assert predict([0, 0], model).prediction == 1


@pytest.mark.parametrize("features, labels", [
    ([], []),
    ([[0, 1], [1]], [0, 1]),
    ([[0, 1], [1, 0]], [1]),
    ([[0, 1], [1, 0]], [0, 2]),
])
def test_rejects_bad_training_data(features, labels) -> None:
    with pytest.raises(TrainingDataError):
        train_logistic_regression(features, labels)


def test_training_data_error_is_an_invalid_input_error() -> None:
    with pytest.raises(InvalidInputError):
        train_logistic_regression(AND_FEATURES, AND_LABELS, feature_names=["only_one"])


def test_rejects_non_positive_learning_rate() -> None:
    with pytest.raises(InvalidInputError):
        train_logistic_regression(AND_FEATURES, AND_LABELS, learning_rate=0)


def test_cancel_event_stops_training() -> None:
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(TrainingCancelledError) as exc_info:
        train_logistic_regression(AND_FEATURES, AND_LABELS, cancel_event=cancel)

    assert exc_info.value.iterations_completed == 0


def test_exhausted_time_budget_stops_training() -> None:
    with pytest.raises(TrainingCancelledError, match="budget"):
        train_logistic_regression(AND_FEATURES, AND_LABELS, max_seconds=-1.0)


def test_predict_rejects_wrong_width() -> None:
    model = TrainedModel(weights=(1.0, 2.0), bias=0.0, feature_names=("a", "b"))

    with pytest.raises(DimensionMismatchError) as exc_info:
        predict([1.0, 2.0, 3.0], model)

    assert (exc_info.value.expected, exc_info.value.actual) == (2, 3)


def test_explanation_lists_top_five_contributions() -> None:
    model = TrainedModel(
        weights=(1.0, -3.0, 0.5, 2.0, 0.0, 0.0, 0.1),
        bias=0.0,
        feature_names=("a", "b", "c", "d", "e", "f", "g"),
    )

    result = predict([1.0] * 7, model)

    assert [name for name, _ in result.contributions] == ["b", "d", "a", "c", "g"]
    assert result.prediction == 1
    assert result.explanation.startswith("Prediction: HIGH RISK (64.6% probability).")
    assert "b (-3.000), d (+2.000)" in result.explanation
    assert "e (" not in result.explanation


def test_low_risk_label() -> None:
    model = TrainedModel(weights=(-2.0,), bias=0.0, feature_names=("vibration",))

    assert "LOW RISK" in predict([1.0], model).explanation


def test_feature_importance_scaled_to_largest_weight() -> None:
    model = TrainedModel(weights=(2.0, -4.0, 1.0), bias=0.3, feature_names=("a", "b", "c"))

    assert feature_importance(model) == [("b", 1.0), ("a", 0.5), ("c", 0.25)]


def test_model_record_validates_and_serializes() -> None:
    with pytest.raises(InvalidInputError):
        TrainedModel(weights=(1.0, 2.0), bias=0.0, feature_names=("a",))

    model = train_logistic_regression(AND_FEATURES, AND_LABELS, learning_rate=0.1, iterations=50)
    assert TrainedModel.from_dict(model.to_dict()) == model
