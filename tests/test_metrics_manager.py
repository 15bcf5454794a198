import unittest
from unittest.mock import AsyncMock

from prometheus_client import CollectorRegistry

from contracts.request_outcome import RequestOutcome
from core.metrics_manager import MetricsManager
from core.metrics_middleware import MetricsMiddleware


class TestMetricsManager(unittest.TestCase):
    def test_managers_do_not_share_registries(self):
        first = MetricsManager()
        second = MetricsManager()
        first.record_outcome(RequestOutcome.ERROR_INJECTED)

        self.assertEqual(first.get_outcome_count(RequestOutcome.ERROR_INJECTED), 1)
        self.assertEqual(second.get_outcome_count(RequestOutcome.ERROR_INJECTED), 0)

    def test_uses_given_registry(self):
        registry = CollectorRegistry()
        manager = MetricsManager(registry=registry)
        manager.record_outcome(RequestOutcome.FORWARDED_OK)

        self.assertEqual(
            registry.get_sample_value(
                "faultproxy_requests_total", {"outcome": "forwarded_ok"}
            ),
            1.0,
        )

    def test_in_flight_and_latency(self):
        manager = MetricsManager()
        start = manager.request_started()
        self.assertEqual(manager.get_in_flight(), 1)
        manager.request_finished(start)

        self.assertEqual(manager.get_in_flight(), 0)
        self.assertEqual(
            manager.registry.get_sample_value("faultproxy_request_latency_seconds_count"),
            1.0,
        )


class TestMetricsMiddleware(unittest.IsolatedAsyncioTestCase):
    async def test_tracks_http_requests(self):
        manager = MetricsManager()
        seen_in_flight = []

        async def app(scope, receive, send):
            seen_in_flight.append(manager.get_in_flight())

        middleware = MetricsMiddleware(app, metrics_manager=manager)
        await middleware({"type": "http"}, AsyncMock(), AsyncMock())

        self.assertEqual(seen_in_flight, [1])
        self.assertEqual(manager.get_in_flight(), 0)

    async def test_in_flight_released_when_app_fails(self):
        manager = MetricsManager()

        async def app(scope, receive, send):
            raise RuntimeError("boom")

        middleware = MetricsMiddleware(app, metrics_manager=manager)
        with self.assertRaises(RuntimeError):
            await middleware({"type": "http"}, AsyncMock(), AsyncMock())
        self.assertEqual(manager.get_in_flight(), 0)

    async def test_ignores_lifespan(self):
        manager = MetricsManager()
        app = AsyncMock()
        middleware = MetricsMiddleware(app, metrics_manager=manager)
        await middleware({"type": "lifespan"}, AsyncMock(), AsyncMock())

        app.assert_awaited_once()
        self.assertEqual(
            manager.registry.get_sample_value("faultproxy_request_latency_seconds_count"),
            0.0,
        )


if __name__ == "__main__":
    unittest.main()
