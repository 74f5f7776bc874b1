import logging
import numbers

from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

logger = logging.getLogger(__name__)


class EvolutionTelemetry:
    """
    Manages and exposes operational metrics of an evolution run for Prometheus.

    Metrics live in a registry owned by this instance, so several engines can
    run in one process without clashing.
    """
    def __init__(self, config, registry=None):
        """
        Initializes the telemetry and defines Prometheus metrics.

        Args:
            config (dict): Full configuration; only the ``telemetry`` section is read.
            registry (CollectorRegistry): Registry to publish to. A private one
                is created when omitted.
        """
        self.config = config.get('telemetry', {}) if config else {}
        self.enabled = self.config.get('enabled', False)
        self.port = self.config.get('port', 8000)
        self.registry = registry if registry is not None else CollectorRegistry()
        if not self.enabled:
            return

        # Gauges (value can go up or down)
        self.iteration_gauge = Gauge('evolution_iteration', 'Index of the last completed iteration.', registry=self.registry)
        self.population_size_gauge = Gauge('evolution_population_size', 'Number of members in the current population.', registry=self.registry)
        self.best_fitness_gauge = Gauge('evolution_best_fitness', 'Best (lowest) scalar fitness in the current population.', registry=self.registry)

        # Counters (value only goes up)
        self.evaluations_counter = Counter('evolution_evaluations', 'Candidate evaluations attempted.', registry=self.registry)
        self.failed_evaluations_counter = Counter('evolution_failed_evaluations', 'Candidate evaluations that produced no scores.', registry=self.registry)

    def start_server(self):
        """
        Starts the Prometheus HTTP server in a background thread.
        """
        if not self.enabled:
            return
        start_http_server(self.port, registry=self.registry)
        logger.info(f"Prometheus metrics server started on port {self.port}")

    def record_evaluations(self, attempted, failed):
        if not self.enabled:
            return
        self.evaluations_counter.inc(attempted)
        if failed:
            self.failed_evaluations_counter.inc(failed)

    def update_on_iteration(self, iteration, population):
        """
        Updates metrics that describe the population after an iteration.
        The best fitness gauge is only set for scalar fitness values.
        """
        if not self.enabled:
            return
        self.iteration_gauge.set(iteration)
        self.population_size_gauge.set(len(population))
        if population:
            best = min(population).fitness
            if isinstance(best, numbers.Real):
                self.best_fitness_gauge.set(float(best))
