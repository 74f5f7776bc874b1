import os

import jsonschema
import pytest
import yaml

from evolution.config import EngineConfig
from evolution.constraints import BoundsPolicy
from evolution.engine import EngineState
from evolution.evaluators import SchafferN1Evaluator, SphereEvaluator
from evolution.fitness import ParetoFitnessAssignment, ScalarFitnessAssignment
from evolution.termination import (
    AnyTermination,
    MaxEvaluationTermination,
    MaxIterationTermination,
    StagnationTermination,
)
from evolution.variation import GeneticGenerator, RandomRestartGenerator, ReflectionContractionGenerator
from utils.factory import EngineFactory
from utils.validate_config import load_and_validate_config, validate_config

EXAMPLE_CONFIG = os.path.join(os.path.dirname(__file__), os.pardir, "config.yaml")


def base_config(**sections):
    config = {
        "engine": {"population_size": 6, "max_workers": 1, "seed": 1},
        "parameters": {"x": {"min": -2.0, "max": 2.0}, "y": {"min": -2.0, "max": 2.0, "value": 1.0}},
    }
    config.update(sections)
    return config


def test_engine_config_defaults_and_validation():
    config = EngineConfig()
    assert (config.population_size, config.max_workers, config.seed) == (20, 1, None)
    with pytest.raises(ValueError):
        EngineConfig(population_size=0)
    with pytest.raises(ValueError):
        EngineConfig(max_workers=0)


def test_engine_config_from_dict_ignores_unknown_keys():
    config = EngineConfig.from_dict({"population_size": 8, "colour": "blue"})
    assert config.population_size == 8
    assert EngineConfig.from_dict(None) == EngineConfig()


def test_load_and_validate_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(base_config(bounds_policy="clamp")))
    config = load_and_validate_config(str(path))
    assert config["bounds_policy"] == "clamp"


def test_repository_example_config_is_valid():
    config = load_and_validate_config(EXAMPLE_CONFIG)
    assert "parameters" in config


def test_invalid_config_raises(tmp_path):
    with pytest.raises(jsonschema.ValidationError):
        validate_config(base_config(bounds_policy="wrap"))
    with pytest.raises(jsonschema.ValidationError):
        validate_config({"engine": {"population_size": 4}})

    path = tmp_path / "bad.yaml"
    path.write_text(yaml.safe_dump(base_config(engine={"population_size": 0})))
    with pytest.raises(jsonschema.ValidationError):
        load_and_validate_config(str(path))


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_and_validate_config(str(tmp_path / "absent.yaml"))


def test_factory_builds_components():
    factory = EngineFactory(base_config(
        bounds_policy="clamp",
        fitness={"method": "pareto"},
        variation={"method": "reflection", "offspring_count": 4, "complex_size": 3},
        termination={"max_iterations": 5, "max_evaluations": 50},
    ))
    template = factory.create_template()
    assert template.bounds_policy is BoundsPolicy.CLAMP
    assert template.get_value("x") == 0.0
    assert template.get_value("y") == 1.0

    assert isinstance(factory.create_fitness_assignment(), ParetoFitnessAssignment)
    generator = factory.create_generator()
    assert isinstance(generator, ReflectionContractionGenerator)
    assert generator.offspring_count == 4

    termination = factory.create_termination()
    assert isinstance(termination, AnyTermination)
    assert [type(c) for c in termination.conditions] == [MaxIterationTermination, MaxEvaluationTermination]


def test_factory_defaults():
    factory = EngineFactory(base_config())
    assert isinstance(factory.create_fitness_assignment(), ScalarFitnessAssignment)
    generator = factory.create_generator()
    assert isinstance(generator, GeneticGenerator)
    assert generator.offspring_count == 6
    termination = factory.create_termination()
    assert isinstance(termination, MaxIterationTermination)
    assert termination.max_iterations == 100
    assert isinstance(EngineFactory(base_config(variation={"method": "random"})).create_generator(),
                      RandomRestartGenerator)


def test_factory_engine_runs():
    factory = EngineFactory(base_config(termination={"max_iterations": 3}))
    engine = factory.create_engine(SphereEvaluator({"x": 0.0, "y": 0.0}))
    assert engine.population_size == 6
    results = engine.evolve()
    assert results.state is EngineState.CONVERGED
    assert results.iterations == 3


def test_factory_loads_from_path(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(base_config()))
    factory = EngineFactory(config_path=str(path))
    assert factory.engine_config.seed == 1


def test_factory_stagnation_with_scalar_fitness_runs():
    factory = EngineFactory(base_config(termination={"max_iterations": 50, "stagnation": {"patience": 2}}))
    termination = factory.create_termination()
    assert isinstance(termination.conditions[1], StagnationTermination)
    engine = factory.create_engine(SphereEvaluator({"x": 0.0, "y": 0.0}))
    assert engine.evolve().state is EngineState.CONVERGED


@pytest.mark.parametrize("termination", [
    {"max_iterations": 5, "stagnation": {"patience": 3}},
    {"max_iterations": 5, "target_fitness": 0.0},
])
def test_factory_rejects_scalar_termination_with_pareto_fitness(termination):
    config = base_config(
        parameters={"x": {"min": -10.0, "max": 10.0}},
        fitness={"method": "pareto"},
        termination=termination,
    )
    # The config itself is well-formed; the conflict is caught when wiring the engine.
    validate_config(config)
    factory = EngineFactory(config)
    with pytest.raises(ValueError, match="pareto"):
        factory.create_engine(SchafferN1Evaluator())


def test_factory_pareto_run_with_iteration_limit():
    factory = EngineFactory(base_config(
        parameters={"x": {"min": -10.0, "max": 10.0}},
        fitness={"method": "pareto"},
        termination={"max_iterations": 5, "max_evaluations": 1000},
    ))
    results = factory.create_engine(SchafferN1Evaluator()).evolve()
    assert results.state is EngineState.CONVERGED
    assert results.iterations == 5
    assert all(member.fitness.rank == 0 for member in results.best)
