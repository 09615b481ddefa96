"""Module pipeline.

- runner: module execution engine
- summary: run summary
- orchestrator: logging setup and run lifecycle
"""

from masclab.pipeline.runner import DayState, ModuleRunner
from masclab.pipeline.summary import RunSummary
from masclab.pipeline.orchestrator import ModuleOrchestrator

__all__ = [
    "DayState",
    "ModuleRunner",
    "RunSummary",
    "ModuleOrchestrator",
]
