"""
Workflows package for LangGraph orchestration.

Contains the comparison workflow that runs the baseline and risk-aware
schedulers side by side using LangGraph state management.
"""

__all__ = ['ComparisonOrchestrator']
