from types import SimpleNamespace

import pytest

from evolution.termination import (
    AnyTermination,
    MaxEvaluationTermination,
    MaxIterationTermination,
    StagnationTermination,
    TargetFitnessTermination,
    WallClockTermination,
)


def fake_engine(**kwargs):
    """Stands in for an engine: only the attributes the conditions read."""
    state = dict(iteration=0, evaluations=0, elapsed=0.0, population=[])
    state.update(kwargs)
    return SimpleNamespace(**state)


class Member:
    def __init__(self, fitness):
        self.fitness = fitness

    def __lt__(self, other):
        return self.fitness < other.fitness


def test_unbound_condition_raises():
    with pytest.raises(RuntimeError):
        MaxIterationTermination(3).is_finished()


def test_max_iterations():
    engine = fake_engine()
    condition = MaxIterationTermination(3)
    condition.bind(engine)
    assert not condition.is_finished()
    engine.iteration = 3
    assert condition.is_finished()


def test_max_evaluations_and_wall_clock():
    engine = fake_engine(evaluations=99, elapsed=1.5)
    evaluations = MaxEvaluationTermination(100)
    clock = WallClockTermination(2.0)
    evaluations.bind(engine)
    clock.bind(engine)
    assert not evaluations.is_finished()
    assert not clock.is_finished()
    engine.evaluations, engine.elapsed = 100, 2.0
    assert evaluations.is_finished()
    assert clock.is_finished()


def test_target_fitness():
    engine = fake_engine()
    condition = TargetFitnessTermination(0.01)
    condition.bind(engine)
    assert not condition.is_finished()
    engine.population = [Member(1.0), Member(0.5)]
    assert not condition.is_finished()
    engine.population.append(Member(0.01))
    assert condition.is_finished()


def test_stagnation_counts_iterations_without_improvement():
    engine = fake_engine(population=[Member(10.0)])
    condition = StagnationTermination(patience=2, min_improvement=0.1)
    condition.bind(engine)

    assert not condition.is_finished()  # first observation
    engine.population = [Member(9.95)]  # below min_improvement
    assert not condition.is_finished()
    engine.population = [Member(5.0)]  # resets the counter
    assert not condition.is_finished()
    assert not condition.is_finished()
    assert condition.is_finished()


def test_stagnation_resets_when_rebound():
    engine = fake_engine(population=[Member(1.0)])
    condition = StagnationTermination(patience=1)
    condition.bind(engine)
    condition.is_finished()
    assert condition.is_finished()
    condition.bind(engine)
    assert not condition.is_finished()


def test_any_termination_binds_and_consults_every_condition():
    engine = fake_engine(population=[Member(1.0)])
    stagnation = StagnationTermination(patience=2)
    iterations = MaxIterationTermination(1)
    combined = AnyTermination([iterations, stagnation])
    combined.bind(engine)

    assert stagnation.engine is engine
    assert not combined.is_finished()
    engine.iteration = 1
    assert combined.is_finished()
    # The stagnation counter kept running even though the first condition fired.
    assert stagnation._stalled == 1
