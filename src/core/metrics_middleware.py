from starlette.types import ASGIApp, Receive, Scope, Send

from core.metrics_manager import MetricsManager


class MetricsMiddleware:
    """
    Pure ASGI middleware tracking in-flight requests and latency. Latency covers
    the whole response, streamed body included.
    """

    def __init__(self, app: ASGIApp, metrics_manager: MetricsManager):
        self.app = app
        self.metrics_manager = metrics_manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        start = self.metrics_manager.request_started()
        try:
            await self.app(scope, receive, send)
        finally:
            self.metrics_manager.request_finished(start)
