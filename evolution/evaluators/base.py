"""The evaluation contract and general-purpose evaluator wrappers."""
from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Mapping, Optional

from evolution.errors import EvolutionError, TransientEvaluationError
from evolution.objectives import ObjectiveScores

logger = logging.getLogger(__name__)


class ObjectiveEvaluator(ABC):
    """
    Turns a candidate system configuration into objective scores.

    ``evaluate`` may be slow and blocking. Evaluators signal a failure of one
    candidate with ``TransientEvaluationError`` and a broken evaluator with
    ``FatalEvaluationError``. An evaluator that returns True from
    ``is_cloneable`` must implement ``clone`` so that the clone can run
    concurrently with the original and other clones, sharing no mutable state.
    """

    @abstractmethod
    def evaluate(self, configuration: Any) -> ObjectiveScores:
        ...

    def is_cloneable(self) -> bool:
        return False

    def clone(self) -> "ObjectiveEvaluator":
        raise NotImplementedError(f"{type(self).__name__} cannot be cloned.")


class FunctionObjectiveEvaluator(ObjectiveEvaluator):
    """
    Wraps a callable that maps a configuration to ``{objective_name: value}``.

    Args:
        fn: The objective function.
        maximize (dict): Optional ``{objective_name: bool}`` orientation map;
            unlisted objectives are minimised.
        cloneable (bool): Whether ``fn`` may be used from several threads.
            Clones hold ``copy.deepcopy(fn)``: a callable object gets its own
            copy of its state, while plain functions and closures are shared
            as they are and must therefore be stateless.
    """

    def __init__(
        self,
        fn: Callable[[Any], Mapping[str, float]],
        maximize: Optional[Dict[str, bool]] = None,
        cloneable: bool = False,
    ):
        self.fn = fn
        self.maximize = dict(maximize or {})
        self.cloneable = cloneable

    def evaluate(self, configuration):
        values = self.fn(configuration)
        return ObjectiveScores.from_values(values, self.maximize, configuration)

    def is_cloneable(self):
        return self.cloneable

    def clone(self):
        if not self.cloneable:
            return super().clone()
        return FunctionObjectiveEvaluator(copy.deepcopy(self.fn), self.maximize, True)


class SystemObjectiveEvaluator(ObjectiveEvaluator):
    """
    Applies each configuration to a system it owns, runs it and scores the outcome.

    The system is built by ``system_factory``; every clone builds its own, so
    clones never share a handle on the system under test.

    Args:
        system_factory: Zero-argument callable returning a fresh system that
            implements ``ConfigurableSystem``.
        run: Called with the configured system; returns its outputs.
        score: Maps those outputs to ``{objective_name: value}``.
        maximize (dict): Optional ``{objective_name: bool}`` orientation map.
    """

    def __init__(
        self,
        system_factory: Callable[[], Any],
        run: Callable[[Any], Any],
        score: Callable[[Any], Mapping[str, float]],
        maximize: Optional[Dict[str, bool]] = None,
    ):
        self.system_factory = system_factory
        self.run = run
        self.score = score
        self.maximize = dict(maximize or {})
        self.system = system_factory()

    def evaluate(self, configuration):
        configuration.apply_configuration(self.system)
        try:
            outputs = self.run(self.system)
        except EvolutionError:
            raise
        except (ArithmeticError, ValueError) as e:
            logger.warning(f"System run failed for {configuration!r}: {e}")
            raise TransientEvaluationError(str(e)) from e
        return ObjectiveScores.from_values(self.score(outputs), self.maximize, configuration)

    def is_cloneable(self):
        return True

    def clone(self):
        return SystemObjectiveEvaluator(self.system_factory, self.run, self.score, self.maximize)
