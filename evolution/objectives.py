"""Objective scores produced by evaluating a system configuration."""
from __future__ import annotations

import weakref
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence, Tuple, Union


@dataclass(frozen=True)
class ObjectiveScore:
    """A single named objective value and whether higher is better."""

    name: str
    value: float
    maximize: bool = False

    @property
    def text(self) -> str:
        return f"{self.name}={self.value:.6g}"

    def minimization_value(self) -> float:
        """The value expressed so that lower is better."""
        return -self.value if self.maximize else self.value

    def __str__(self) -> str:
        return self.text


class ObjectiveScores:
    """
    An ordered, fixed set of objective scores for one system configuration.

    The configuration is only weakly referenced: once the population that owns
    it lets it go, ``system_configuration`` returns None.
    """

    def __init__(self, scores: Sequence[ObjectiveScore], configuration: Any = None):
        if len(scores) < 1:
            raise ValueError("ObjectiveScores requires at least one objective score.")
        self._scores: Tuple[ObjectiveScore, ...] = tuple(scores)
        self._configuration = None if configuration is None else weakref.ref(configuration)

    @classmethod
    def from_values(cls, values, maximize=None, configuration=None) -> "ObjectiveScores":
        """Builds scores from ``{name: value}`` and an optional ``{name: maximize}`` map."""
        maximize = maximize or {}
        return cls(
            [ObjectiveScore(name, float(value), bool(maximize.get(name, False)))
             for name, value in values.items()],
            configuration,
        )

    @property
    def system_configuration(self) -> Optional[Any]:
        return None if self._configuration is None else self._configuration()

    def objective_count(self) -> int:
        return len(self._scores)

    def get_objective(self, key: Union[int, str]) -> ObjectiveScore:
        if isinstance(key, int):
            return self._scores[key]
        for score in self._scores:
            if score.name == key:
                return score
        raise KeyError(key)

    def names(self) -> List[str]:
        return [score.name for score in self._scores]

    def orientation(self) -> Tuple[Tuple[str, bool], ...]:
        return tuple((score.name, score.maximize) for score in self._scores)

    def minimization_vector(self) -> List[float]:
        return [score.minimization_value() for score in self._scores]

    def __len__(self) -> int:
        return len(self._scores)

    def __iter__(self) -> Iterator[ObjectiveScore]:
        return iter(self._scores)

    def __getitem__(self, index: int) -> ObjectiveScore:
        return self._scores[index]

    def __str__(self) -> str:
        return ", ".join(score.text for score in self._scores)

    def __repr__(self) -> str:
        return f"ObjectiveScores({self})"
