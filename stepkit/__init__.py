"""Reusable step-selection kernel (outcome value + step capability + ordered registry).

This package is intentionally independent of `wp_starter.*`. Configuration keys,
default steps and user-facing messages belong to the consuming application.
"""

from stepkit.result import Result, ResultState
from stepkit.step_registry import StepRegistry
from stepkit.step_types import Step, StepRef, is_step_class, resolve_step_class

__all__ = [
    "Result",
    "ResultState",
    "Step",
    "StepRef",
    "StepRegistry",
    "is_step_class",
    "resolve_step_class",
]
