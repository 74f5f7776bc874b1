"""Exceptions raised by the optimisation core."""


class EvolutionError(Exception):
    """Base class for every error raised by this package."""


class UnknownDimension(EvolutionError, KeyError):
    """A dimension name that is not defined in the hypercube was accessed."""

    def __init__(self, name):
        super().__init__(name)
        self.name = name

    def __str__(self):
        return f"Unknown dimension: {self.name!r}"


class InvalidBounds(EvolutionError, ValueError):
    """Raised when a dimension would end up with ``min > max``."""


class OutOfBounds(EvolutionError, ValueError):
    """Raised by the reject policy when a value falls outside ``[min, max]``."""


class IncompatibleHypercubes(EvolutionError, ValueError):
    """Hypercubes given to a geometric operator do not share a dimension set."""


class IncompatibleSystem(EvolutionError, TypeError):
    """A configuration cannot be applied to the target system."""


class PopulationShapeError(EvolutionError, ValueError):
    """Members of a population do not share objective or dimension shapes."""


class EvaluationError(EvolutionError):
    """Base class for failures reported by an objective evaluator."""


class TransientEvaluationError(EvaluationError):
    """The evaluation of one candidate failed; the candidate is dropped."""


class FatalEvaluationError(EvaluationError):
    """The evaluator is unusable; the run cannot continue."""
