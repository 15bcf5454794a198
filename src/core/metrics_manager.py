import logging
import time

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

from config.logging_config import setup_logging
from contracts.request_outcome import RequestOutcome

setup_logging()
logger = logging.getLogger(__name__)


class MetricsManager:
    """
    Manager for collecting proxy metrics: requests per outcome, in-flight requests and latency.
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """
        Initialize the MetricsManager and set up Prometheus metrics.

        Args:
            registry: Collector registry to register the metrics with. Each manager
                gets its own registry by default so several proxies (or tests) can
                live in one process.
        """
        self.registry = registry or CollectorRegistry()
        self.REQUESTS = Counter(
            "faultproxy_requests_total",
            "Requests handled by the proxy, by outcome",
            ["outcome"],
            registry=self.registry,
        )
        self.IN_FLIGHT = Gauge(
            "faultproxy_in_flight_requests",
            "Number of requests in flight",
            registry=self.registry,
        )
        self.REQ_LATENCY = Histogram(
            "faultproxy_request_latency_seconds",
            "Request latency in seconds, including body streaming",
            registry=self.registry,
        )
        logger.info("MetricsManager initialized.")

    def record_outcome(self, outcome: RequestOutcome):
        self.REQUESTS.labels(outcome=outcome.value).inc()

    def get_outcome_count(self, outcome: RequestOutcome) -> float:
        value = self.registry.get_sample_value(
            "faultproxy_requests_total", {"outcome": outcome.value}
        )
        return value or 0.0

    def get_in_flight(self):
        """
        Get the current number of in-flight requests.

        Returns:
            float: Number of in-flight requests.
        """
        return self.registry.get_sample_value("faultproxy_in_flight_requests") or 0.0

    def request_started(self) -> float:
        self.IN_FLIGHT.inc()
        return time.time()

    def request_finished(self, start: float):
        elapsed = time.time() - start
        self.IN_FLIGHT.dec()
        self.REQ_LATENCY.observe(elapsed)
        logger.debug(
            f"Request processed in {elapsed:.4f}s. In-flight: {self.get_in_flight()}"
        )
