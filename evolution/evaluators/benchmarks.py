import numpy as np

from evolution.evaluators.base import ObjectiveEvaluator
from evolution.objectives import ObjectiveScore, ObjectiveScores


class SphereEvaluator(ObjectiveEvaluator):
    """
    Negative squared distance to a known optimum, to be maximised.

    Args:
        optimum (dict): ``{dimension_name: optimal_value}``. Every dimension of
            the evaluated hypercube must be listed.
    """

    def __init__(self, optimum):
        self.optimum = dict(optimum)
        self.evaluations = 0

    def evaluate(self, configuration):
        self.evaluations += 1
        x = np.array([configuration.get_value(n) for n in self.optimum], dtype=float)
        target = np.array(list(self.optimum.values()), dtype=float)
        value = -float(np.sum((x - target) ** 2))
        return ObjectiveScores([ObjectiveScore("neg_sq_distance", value, maximize=True)], configuration)

    def is_cloneable(self):
        return True

    def clone(self):
        return SphereEvaluator(self.optimum)


class SchafferN1Evaluator(ObjectiveEvaluator):
    """
    Schaffer function N.1: minimise ``f1 = x^2`` and ``f2 = (x - 2)^2``.

    The Pareto front is ``x`` in ``[0, 2]``.
    """

    def __init__(self, dimension="x"):
        self.dimension = dimension

    def evaluate(self, configuration):
        x = configuration.get_value(self.dimension)
        return ObjectiveScores(
            [ObjectiveScore("f1", x ** 2), ObjectiveScore("f2", (x - 2) ** 2)],
            configuration,
        )

    def is_cloneable(self):
        return True

    def clone(self):
        return SchafferN1Evaluator(self.dimension)
