"""
Utility functions package for the Risk-Aware Production Scheduler.

This package contains helper utilities:
- config_loader: Load and parse YAML/JSON scheduling policies
- logging_config: Root logger setup for applications
- reporting: pandas comparison tables for baseline vs risk-aware runs
"""

__all__ = ['config_loader', 'logging_config', 'reporting']
