"""
Configuration Loader - Load and manage scheduling policies

This module provides functions to load configuration from YAML/JSON files
and validate policy settings.

Key Features:
    - Load default and custom policy configurations
    - Parse the work calendar, scoring and urgency weights
    - Read training defaults and sensor normalization bounds
    - Environment overrides (.env supported) for config path and log level
"""

import os
import json
import logging
from dataclasses import fields
from datetime import time
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

import yaml
from dotenv import load_dotenv

from models.exceptions import ConfigError
from models.policy import SchedulingPolicy, WorkCalendar, ScoringWeights, UrgencyWeights
from risk.failure_model import DEFAULT_BOUNDS, FailureRiskService

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / 'config' / 'default_policy.yaml'
CONFIG_PATH_ENV = 'SCHEDULER_CONFIG'
LOG_LEVEL_ENV = 'SCHEDULER_LOG_LEVEL'


def load_yaml(file_path: str) -> Dict[str, Any]:
    """
    Load YAML configuration file.

    Args:
        file_path: Path to YAML file

    Returns:
        Dictionary with configuration data
    """
    with open(file_path, 'r') as f:
        return yaml.safe_load(f) or {}


def load_json(file_path: str) -> Dict[str, Any]:
    """
    Load JSON configuration file.

    Args:
        file_path: Path to JSON file

    Returns:
        Dictionary with configuration data
    """
    with open(file_path, 'r') as f:
        return json.load(f)


def parse_time(time_str: str) -> time:
    """
    Parse time string in HH:MM format.

    Args:
        time_str: Time string (e.g., "08:00")

    Returns:
        time object
    """
    try:
        hour, minute = map(int, str(time_str).split(':'))
        return time(hour, minute)
    except ValueError as exc:
        raise ConfigError(f"Invalid time {time_str!r}, expected HH:MM") from exc


def _parse_hour(time_str: str) -> int:
    # "24:00" closes the calendar at midnight
    if str(time_str).strip() == "24:00":
        return 24
    parsed = parse_time(time_str)
    if parsed.minute:
        raise ConfigError(f"Calendar boundaries must be whole hours, got {time_str!r}")
    return parsed.hour


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    # "section:" with no value loads as None
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping, got {type(section).__name__}")
    return section


def _weights_from_config(cls, section: Dict[str, Any]):
    known = {f.name for f in fields(cls)}
    unknown = set(section) - known
    if unknown:
        raise ConfigError(f"Unknown {cls.__name__} keys: {', '.join(sorted(unknown))}")
    try:
        return cls(**{key: float(value) for key, value in section.items()})
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {cls.__name__} value: {exc}") from exc


def load_policy_from_config(config: Dict[str, Any]) -> SchedulingPolicy:
    """
    Create SchedulingPolicy object from configuration dictionary.

    Missing sections fall back to the built-in defaults.

    Args:
        config: Configuration dictionary

    Returns:
        SchedulingPolicy object
    """
    calendar_config = _section(config, 'calendar')
    calendar = WorkCalendar(
        start_hour=_parse_hour(calendar_config.get('start', '08:00')),
        end_hour=_parse_hour(calendar_config.get('end', '22:00')),
    )

    risk_config = _section(config, 'risk')
    try:
        stability = {
            mode: float(value) for mode, value in
            (_section(config, 'stability') or {'baseline': 0.65, 'risk_aware': 0.88}).items()
        }
        default_machine_risk = float(risk_config.get('default_machine_risk', 0.2))
        risk_window_threshold = float(risk_config.get('window_threshold', 0.6))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid risk or stability value: {exc}") from exc

    return SchedulingPolicy(
        calendar=calendar,
        default_machine_risk=default_machine_risk,
        risk_window_threshold=risk_window_threshold,
        scoring=_weights_from_config(ScoringWeights, _section(config, 'scoring')),
        urgency=_weights_from_config(UrgencyWeights, _section(config, 'urgency')),
        stability=stability,
    )


def load_bounds_from_config(config: Dict[str, Any]) -> Dict[str, Tuple[float, float]]:
    """
    Read per-feature (min, max) normalization bounds.

    Args:
        config: Configuration dictionary

    Returns:
        Bounds for every failure-model feature
    """
    bounds = dict(DEFAULT_BOUNDS)
    for name, pair in _section(config, 'normalization').items():
        if name not in DEFAULT_BOUNDS:
            raise ConfigError(f"Unknown normalization feature: {name}")
        try:
            low, high = (float(v) for v in pair)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Normalization bounds for {name} must be a [min, max] pair, got {pair!r}") from exc
        if high <= low:
            raise ConfigError(f"Normalization bounds for {name} must satisfy min < max")
        bounds[name] = (low, high)
    return bounds


def build_risk_service(config: Dict[str, Any]) -> FailureRiskService:
    """Create an untrained FailureRiskService from a loaded config."""
    training = config.get('training') or {}
    return FailureRiskService(
        bounds=config.get('normalization_bounds', DEFAULT_BOUNDS),
        learning_rate=float(training.get('learning_rate', 0.01)),
        iterations=int(training.get('iterations', 1000)),
    )


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load complete configuration from file.

    If no path is provided, uses $SCHEDULER_CONFIG (a .env file is read
    first) and then config/default_policy.yaml.

    Args:
        config_path: Optional path to config file

    Returns:
        Dictionary containing policy, training, bounds and logging settings
    """
    load_dotenv()

    if config_path is None:
        config_path = os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH

    # Load config file
    if str(config_path).endswith('.json'):
        config_data = load_json(str(config_path))
    else:
        config_data = load_yaml(str(config_path))

    logging_config = dict(_section(config_data, 'logging'))
    env_level = os.getenv(LOG_LEVEL_ENV)
    if env_level:
        logging_config['level'] = env_level

    logger.debug("Loaded scheduling policy from %s", config_path)

    return {
        'policy': load_policy_from_config(config_data),
        'training': dict(_section(config_data, 'training')),
        'normalization_bounds': load_bounds_from_config(config_data),
        'logging': logging_config,
        'raw_config': config_data,
    }


def save_config(
    policy: SchedulingPolicy,
    output_path: str,
    training: Optional[Dict[str, Any]] = None,
    normalization_bounds: Optional[Dict[str, Tuple[float, float]]] = None,
):
    """
    Save configuration to YAML file.

    Args:
        policy: Policy to save
        output_path: Path to output file
        training: Optional training defaults
        normalization_bounds: Optional sensor bounds
    """
    policy_dict = policy.to_dict()
    calendar = policy.calendar

    config = {
        'calendar': {
            'start': f"{calendar.start_hour:02d}:00",
            'end': f"{calendar.end_hour:02d}:00",
        },
        'risk': {
            'default_machine_risk': policy.default_machine_risk,
            'window_threshold': policy.risk_window_threshold,
        },
        'scoring': policy_dict['scoring'],
        'urgency': policy_dict['urgency'],
        'stability': dict(policy.stability),
    }
    if training:
        config['training'] = dict(training)
    if normalization_bounds:
        config['normalization'] = {
            name: [low, high] for name, (low, high) in normalization_bounds.items()
        }

    with open(output_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False)
