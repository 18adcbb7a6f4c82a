"""
Failure-risk modelling package.

- logistic_regression: train / predict / feature importance
- failure_model: FailureRiskService, the explicit owner of a trained model
"""

from risk.logistic_regression import (
    feature_importance,
    predict,
    sigmoid,
    train_logistic_regression,
)
from risk.failure_model import FailureRiskService, FEATURE_NAMES

__all__ = [
    'train_logistic_regression', 'predict', 'feature_importance', 'sigmoid',
    'FailureRiskService', 'FEATURE_NAMES',
]
