import logging

from evolution.candidates import UniformRandomSamplingFactory
from evolution.config import EngineConfig
from evolution.constraints import BoundsPolicy
from evolution.engine import EvolutionEngine
from evolution.fitness import ParetoFitnessAssignment, ScalarFitnessAssignment
from evolution.operators import HyperCubeOperations
from evolution.random_factory import RandomNumberGeneratorFactory
from evolution.search_spaces import hypercube_from_spec
from evolution.termination import (
    AnyTermination,
    MaxEvaluationTermination,
    MaxIterationTermination,
    StagnationTermination,
    TargetFitnessTermination,
    WallClockTermination,
)
from evolution.variation import GeneticGenerator, RandomRestartGenerator, ReflectionContractionGenerator
from ops.telemetry import EvolutionTelemetry
from utils.validate_config import load_and_validate_config, validate_config

logger = logging.getLogger(__name__)


class EngineFactory:
    """
    Builds an evolution engine and its collaborators from a configuration.

    Args:
        config (dict): A configuration dictionary, or None to load ``config_path``.
        config_path (str): YAML file read when ``config`` is not given.
    """

    def __init__(self, config=None, config_path="config.yaml"):
        if config is None:
            self.config = load_and_validate_config(config_path)
        else:
            self.config = validate_config(config)
        self.engine_config = EngineConfig.from_dict(self.config.get('engine'))
        self.rng_factory = RandomNumberGeneratorFactory(self.engine_config.seed)

    def create_template(self):
        policy = BoundsPolicy(self.config.get('bounds_policy', 'reject'))
        return hypercube_from_spec(self.config['parameters'], policy)

    def create_fitness_assignment(self):
        fitness_config = self.config.get('fitness', {})
        method = fitness_config.get('method', 'scalar')
        if method == 'pareto':
            return ParetoFitnessAssignment()
        return ScalarFitnessAssignment(fitness_config.get('objective', 0))

    def create_generator(self):
        variation_config = dict(self.config.get('variation', {}))
        method = variation_config.pop('method', 'genetic')
        offspring_count = variation_config.get('offspring_count', self.engine_config.population_size)
        if method == 'reflection':
            return ReflectionContractionGenerator(
                offspring_count=offspring_count,
                complex_size=variation_config.get('complex_size', 3),
                reflection_factor=variation_config.get('reflection_factor', -1.0),
                contraction_factor=variation_config.get('contraction_factor', 0.5),
            )
        if method == 'random':
            return RandomRestartGenerator(offspring_count)
        return GeneticGenerator(
            offspring_count=offspring_count,
            mutation_rate=variation_config.get('mutation_rate', 0.1),
            mutation_scale=variation_config.get('mutation_scale', 0.1),
        )

    def create_termination(self):
        """
        Builds the termination condition(s) from the ``termination`` section.

        Raises:
            ValueError: If ``target_fitness`` or ``stagnation`` is combined with
                Pareto fitness; both compare fitness as a single number.
        """
        termination_config = self.config.get('termination', {})
        if self.config.get('fitness', {}).get('method') == 'pareto':
            scalar_only = [key for key in ('target_fitness', 'stagnation') if key in termination_config]
            if scalar_only:
                raise ValueError(
                    f"termination.{scalar_only[0]} requires scalar fitness and cannot be "
                    f"used with fitness.method 'pareto'"
                )
        conditions = []
        if 'max_iterations' in termination_config:
            conditions.append(MaxIterationTermination(termination_config['max_iterations']))
        if 'max_evaluations' in termination_config:
            conditions.append(MaxEvaluationTermination(termination_config['max_evaluations']))
        if 'max_seconds' in termination_config:
            conditions.append(WallClockTermination(termination_config['max_seconds']))
        if 'target_fitness' in termination_config:
            conditions.append(TargetFitnessTermination(termination_config['target_fitness']))
        if 'stagnation' in termination_config:
            stagnation = termination_config['stagnation']
            conditions.append(StagnationTermination(
                patience=stagnation['patience'],
                min_improvement=stagnation.get('min_improvement', 0.0),
            ))
        if not conditions:
            logger.warning("No termination configured; defaulting to 100 iterations.")
            conditions.append(MaxIterationTermination(100))
        return conditions[0] if len(conditions) == 1 else AnyTermination(conditions)

    def create_telemetry(self):
        return EvolutionTelemetry(self.config)

    def create_engine(self, evaluator, candidate_factory=None):
        """
        Wires an engine around ``evaluator``.

        When no candidate factory is given, the initial population is sampled
        uniformly within the configured parameter bounds.
        """
        operations = HyperCubeOperations(self.rng_factory.create())
        if candidate_factory is None:
            candidate_factory = UniformRandomSamplingFactory(self.create_template(), operations)
        engine = EvolutionEngine(
            evaluator=evaluator,
            candidate_factory=candidate_factory,
            fitness_assignment=self.create_fitness_assignment(),
            generator=self.create_generator(),
            termination=self.create_termination(),
            population_size=self.engine_config.population_size,
            max_workers=self.engine_config.max_workers,
            operations=operations,
            rng_factory=self.rng_factory,
            telemetry=self.create_telemetry(),
        )
        logger.info(f"Engine created: {engine.get_description()}")
        return engine
