"""
Core data models package for the Risk-Aware Production Scheduler.

This package contains all data structures used throughout the system:
- job: Job, a production job to be scheduled
- machine: Machine / RiskWindow, production machines and elevated-risk intervals
- policy: SchedulingPolicy / WorkCalendar, tunable scheduling parameters
- schedule: ScheduleItem / ScheduleKPIs / ScheduleResult, output of a scheduling run
- risk: TrainedModel / PredictionResult, failure-risk model records
- exceptions: Error taxonomy
"""

__all__ = ['job', 'machine', 'policy', 'schedule', 'risk', 'exceptions']
