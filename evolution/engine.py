"""
The evolution engine: the iterative search loop.

The control loop runs on the calling thread. Each iteration generates
offspring, evaluates all of them (fanned out over cloned evaluators when the
evaluator allows it), assigns fitness over parents and offspring together,
keeps the best ``population_size`` members and consults the termination
condition. Replacement is elitist (parents compete with their offspring), so
the best fitness found never regresses from one iteration to the next.
"""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple

from evolution.candidates import CandidateFactory
from evolution.errors import (
    EvolutionError,
    FatalEvaluationError,
    PopulationShapeError,
    TransientEvaluationError,
)
from evolution.evaluators.base import ObjectiveEvaluator
from evolution.fitness import (
    FitnessAssignedScores,
    FitnessAssignment,
    ScoredCandidate,
    rank_population,
    select_survivors,
)
from evolution.operators import HyperCubeOperations
from evolution.random_factory import RandomNumberGeneratorFactory
from evolution.termination import TerminationCondition
from evolution.variation import CandidateGenerator

logger = logging.getLogger(__name__)


class EngineState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    CONVERGED = "converged"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class EvolutionResults:
    """Outcome of a run; also produced for cancelled and failed runs."""

    state: EngineState
    population: List[FitnessAssignedScores]
    best: List[FitnessAssignedScores]
    iterations: int
    evaluations: int
    failed_evaluations: int
    elapsed: float
    error: Optional[BaseException] = None

    @property
    def best_fitness(self) -> Any:
        return self.best[0].fitness if self.best else None


class EvolutionEngine:
    """
    Population-based search over hypercube configurations.

    Args:
        evaluator (ObjectiveEvaluator): Scores candidate configurations.
        candidate_factory (CandidateFactory): Creates the initial population.
        fitness_assignment (FitnessAssignment): Ranks scored candidates.
        generator (CandidateGenerator): Proposes offspring every iteration.
        termination (TerminationCondition): Decides when the run has converged.
        population_size (int): Number of members carried between iterations.
        max_workers (int): Evaluation threads. Values above 1 only take effect
            when the evaluator is cloneable; each thread gets its own clone.
        operations (HyperCubeOperations): Geometric operators; built from
            ``rng_factory`` when omitted.
        rng_factory (RandomNumberGeneratorFactory): Source of random generators.
        telemetry: Optional ``EvolutionTelemetry`` receiving run metrics.
        description (str): Human readable description of the configured search.
    """

    def __init__(
        self,
        evaluator: ObjectiveEvaluator,
        candidate_factory: CandidateFactory,
        fitness_assignment: FitnessAssignment,
        generator: CandidateGenerator,
        termination: TerminationCondition,
        population_size: int = 20,
        max_workers: int = 1,
        operations: Optional[HyperCubeOperations] = None,
        rng_factory: Optional[RandomNumberGeneratorFactory] = None,
        telemetry=None,
        description: Optional[str] = None,
    ):
        if population_size < 1:
            raise ValueError("population_size must be at least 1.")
        self.evaluator = evaluator
        self.candidate_factory = candidate_factory
        self.fitness_assignment = fitness_assignment
        self.generator = generator
        self.termination = termination
        self.population_size = population_size
        self.max_workers = max_workers
        self.rng_factory = rng_factory or RandomNumberGeneratorFactory()
        self.operations = operations or HyperCubeOperations(self.rng_factory.create())
        self.telemetry = telemetry
        self.description = description

        self.iteration = 0
        self.evaluations = 0
        self.failed_evaluations = 0
        self.error: Optional[BaseException] = None

        self._state = EngineState.IDLE
        self._cancel_requested = threading.Event()
        self._counter_lock = threading.Lock()
        self._population: List[FitnessAssignedScores] = []
        self._workers: List[ObjectiveEvaluator] = []
        self._started_at: Optional[float] = None
        self._finished_at: Optional[float] = None

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def population(self) -> List[FitnessAssignedScores]:
        """The output of the most recent fitness assignment pass."""
        return list(self._population)

    @property
    def elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        end = self._finished_at if self._finished_at is not None else time.monotonic()
        return end - self._started_at

    def get_description(self) -> str:
        if self.description:
            return self.description
        return (
            f"{type(self.generator).__name__} search with {type(self.fitness_assignment).__name__}, "
            f"population {self.population_size}"
        )

    def cancel(self) -> None:
        """
        Requests cancellation. Safe to call from any thread.

        The request is honoured at the start of the next iteration; evaluations
        already in flight are allowed to finish.
        """
        self._cancel_requested.set()
        logger.info("Cancellation requested.")

    def evolve(self) -> EvolutionResults:
        """
        Runs the search until the termination condition fires, the run is
        cancelled, or evaluation fails.

        Returns:
            EvolutionResults: The final population and terminal state. A run
            that fails on a fatal evaluation error still returns its results.

        Raises:
            IncompatibleSystem: If a configuration cannot be applied to the
                system under evaluation. The engine is left ``FAILED`` with
                its partial results available from :meth:`results`.
            RuntimeError: If the engine has already been run.
        """
        if self._state is not EngineState.IDLE:
            raise RuntimeError(f"evolve() can only be called once; engine is {self._state.value}.")

        self._state = EngineState.RUNNING
        self._started_at = time.monotonic()
        self.termination.bind(self)
        logger.info(f"Starting evolution: {self.get_description()}")

        try:
            self._workers = self._prepare_workers()
            self._run()
        except (FatalEvaluationError, PopulationShapeError) as e:
            self._fail(e)
        except Exception as e:
            self._fail(e)
            raise
        finally:
            self._finished_at = time.monotonic()
            self._workers = []

        logger.info(
            f"Evolution {self._state.value} after {self.iteration} iterations, "
            f"{self.evaluations} evaluations ({self.failed_evaluations} failed), "
            f"{self.elapsed:.2f}s"
        )
        return self.results()

    def results(self) -> EvolutionResults:
        ranked = rank_population(self._population)
        return EvolutionResults(
            state=self._state,
            population=ranked,
            best=self.fitness_assignment.leading(ranked),
            iterations=self.iteration,
            evaluations=self.evaluations,
            failed_evaluations=self.failed_evaluations,
            elapsed=self.elapsed,
            error=self.error,
        )

    def _run(self) -> None:
        seeds = self.candidate_factory.create_many(self.population_size)
        scored = self._evaluate(seeds)
        if not scored:
            raise FatalEvaluationError("No candidate of the initial population could be evaluated.")
        self._population = self.fitness_assignment.assign_fitness(scored)
        self._log_iteration()

        while True:
            if self._cancel_requested.is_set():
                self._state = EngineState.CANCELLED
                logger.info(f"Evolution cancelled before iteration {self.iteration + 1}.")
                return

            offspring = self.generator.generate(self._population, self.operations)
            scored = self._evaluate(offspring)
            self._population = self._replace(scored)
            # Only a completed iteration is counted.
            self.iteration += 1
            self._log_iteration()

            if self.termination.is_finished():
                self._state = EngineState.CONVERGED
                return

    def _replace(self, offspring: Sequence[ScoredCandidate]) -> List[FitnessAssignedScores]:
        """Merges offspring into the population and keeps the best members."""
        merged = [(m.configuration, m.scores) for m in self._population] + list(offspring)
        pool = self.fitness_assignment.assign_fitness(merged)
        survivors = select_survivors(pool, self.population_size)
        # Fitness is re-derived so the population is one consistent assignment pass.
        return self.fitness_assignment.assign_fitness([(m.configuration, m.scores) for m in survivors])

    def _prepare_workers(self) -> List[ObjectiveEvaluator]:
        if self.max_workers <= 1:
            return []
        if not self.evaluator.is_cloneable():
            logger.info("Evaluator is not cloneable; evaluating candidates serially.")
            return []
        return [self.evaluator.clone() for _ in range(self.max_workers)]

    def _evaluate(self, candidates: Sequence[Any]) -> List[ScoredCandidate]:
        if not candidates:
            return []
        attempted_before, failed_before = self.evaluations, self.failed_evaluations
        try:
            if self._workers:
                outcomes = self._evaluate_parallel(candidates)
            else:
                outcomes = self._evaluate_chunk(self.evaluator, list(enumerate(candidates)))
        except EvolutionError:
            raise
        except Exception as e:
            raise FatalEvaluationError(f"Evaluator raised {type(e).__name__}: {e}") from e
        finally:
            if self.telemetry is not None:
                self.telemetry.record_evaluations(
                    self.evaluations - attempted_before, self.failed_evaluations - failed_before
                )

        return [(candidate, scores) for _, candidate, scores in outcomes if scores is not None]

    def _evaluate_parallel(self, candidates: Sequence[Any]) -> List[Tuple[int, Any, Any]]:
        indexed = list(enumerate(candidates))
        n = len(self._workers)
        chunks = [indexed[i::n] for i in range(n)]
        # Leaving the executor block waits for every chunk, failed or not.
        with ThreadPoolExecutor(max_workers=n, thread_name_prefix="evaluator") as pool:
            futures = [
                pool.submit(self._evaluate_chunk, worker, chunk)
                for worker, chunk in zip(self._workers, chunks)
                if chunk
            ]
        outcomes = []
        for future in futures:
            outcomes.extend(future.result())
        outcomes.sort(key=lambda outcome: outcome[0])
        return outcomes

    def _evaluate_chunk(self, evaluator: ObjectiveEvaluator, chunk) -> List[Tuple[int, Any, Any]]:
        results = []
        for index, candidate in chunk:
            try:
                scores = evaluator.evaluate(candidate)
            except TransientEvaluationError as e:
                logger.warning(f"Dropping candidate {candidate!r}: {e}")
                scores = None
            except Exception:
                self._count_evaluation(failed=True)
                raise
            self._count_evaluation(failed=scores is None)
            results.append((index, candidate, scores))
        return results

    def _count_evaluation(self, failed: bool) -> None:
        # Called from evaluation threads.
        with self._counter_lock:
            self.evaluations += 1
            if failed:
                self.failed_evaluations += 1

    def _fail(self, error: BaseException) -> None:
        self._state = EngineState.FAILED
        self.error = error
        logger.error(f"Evolution failed after {self.iteration} completed iterations: {error}")

    def _log_iteration(self) -> None:
        best = min(self._population)
        logger.info(
            f"Iteration {self.iteration}: best fitness {best.fitness} "
            f"[{best.scores}] with {len(self._population)} members"
        )
        if self.telemetry is not None:
            self.telemetry.update_on_iteration(self.iteration, self._population)
