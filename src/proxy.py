import logging
from contextlib import asynccontextmanager
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Optional

import httpx
from fastapi import FastAPI, Request, Response
from starlette.types import Receive, Scope, Send

from abstractions.error_gate import ErrorGate
from algorithms.modulus_error_gate import ModulusErrorGate
from config.logging_config import setup_logging
from contracts.http_status import HttpStatus
from contracts.proxy_config import ProxyConfig
from contracts.request_outcome import RequestOutcome
from core.forwarding_relay import STATUS_DESCRIPTION_HEADER, ForwardingRelay
from core.metrics_manager import MetricsManager
from core.metrics_middleware import MetricsMiddleware

setup_logging()
logger = logging.getLogger(__name__)

INJECTED_ERROR_BODY = "dummy error"
# Statuses that must not carry a body
BODYLESS_STATUSES = {204, 304}


def build_client(
    proxy_config: ProxyConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> httpx.AsyncClient:
    """Create the shared backend client. It keeps no cookies between requests."""
    return httpx.AsyncClient(
        transport=transport,
        timeout=httpx.Timeout(proxy_config.backend_timeout),
        cookies=CookieJar(policy=DefaultCookiePolicy(allowed_domains=[])),
        follow_redirects=False,
    )


def injected_error_response(error_status: HttpStatus) -> Response:
    bodyless = error_status.code in BODYLESS_STATUSES
    return Response(
        content=b"" if bodyless else INJECTED_ERROR_BODY,
        status_code=error_status.code,
        media_type=None if bodyless else "text/plain",
        headers={STATUS_DESCRIPTION_HEADER: error_status.description},
    )


class ProxyEndpoint:
    """
    ASGI endpoint wrapping a request handler. Routes to it accept any method.
    """

    def __init__(self, handler):
        self.handler = handler

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        response = await self.handler(Request(scope, receive))
        await response(scope, receive, send)


def create_app(
    proxy_config: ProxyConfig,
    client: Optional[httpx.AsyncClient] = None,
    metrics_manager: Optional[MetricsManager] = None,
    gate: Optional[ErrorGate] = None,
) -> FastAPI:
    """
    Build the proxy application.

    Args:
        proxy_config (ProxyConfig): The proxy configuration.
        client (httpx.AsyncClient, optional): Backend client. When omitted one is
            created from the config and closed on shutdown.
        metrics_manager (MetricsManager, optional): Metrics sink; a private one is
            created when omitted.
        gate (ErrorGate, optional): Error gate; defaults to a ModulusErrorGate
            using the configured error modulus.

    Returns:
        FastAPI: The application, with the gate, relay and metrics on ``app.state``.
    """
    owns_client = client is None
    client = client or build_client(proxy_config)
    metrics_manager = metrics_manager or MetricsManager()
    gate = gate or ModulusErrorGate(proxy_config.error_mod)
    relay = ForwardingRelay(
        client, proxy_config.backend_root, metrics_manager=metrics_manager
    )

    @asynccontextmanager
    async def lifespan(app):
        yield
        if owns_client:
            await client.aclose()

    app = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.proxy_config = proxy_config
    app.state.gate = gate
    app.state.relay = relay
    app.state.metrics_manager = metrics_manager
    app.add_middleware(MetricsMiddleware, metrics_manager=metrics_manager)

    async def proxy(request: Request):
        logger.debug(f"Serving {request.method} {request.url.path}")
        if gate.should_inject_error():
            error_status = proxy_config.error_status
            logger.debug(f"Returning an {error_status}")
            metrics_manager.record_outcome(RequestOutcome.ERROR_INJECTED)
            return injected_error_response(error_status)
        return await relay.handle(
            request.method, request.url.path, request.query_params.multi_items()
        )

    # A plain ASGI endpoint leaves the route open to every method, so each
    # request is counted by the gate
    app.add_route("/{path:path}", ProxyEndpoint(proxy))
    return app
