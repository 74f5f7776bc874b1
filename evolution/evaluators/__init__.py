"""Objective evaluators: the contract and a few ready-made implementations."""

from .base import FunctionObjectiveEvaluator, ObjectiveEvaluator, SystemObjectiveEvaluator
from .benchmarks import SchafferN1Evaluator, SphereEvaluator

__all__ = [
    "FunctionObjectiveEvaluator",
    "ObjectiveEvaluator",
    "SchafferN1Evaluator",
    "SphereEvaluator",
    "SystemObjectiveEvaluator",
]
