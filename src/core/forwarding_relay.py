import logging
from typing import Iterable, Optional

import anyio
import httpx
from fastapi import Response
from fastapi.responses import StreamingResponse
from starlette.types import Receive, Scope, Send

from config.logging_config import setup_logging
from contracts.http_status import HttpStatus
from contracts.request_outcome import RequestOutcome
from core.exceptions import (
    BackendCommunicationError,
    ProxyError,
    UnsupportedMethodError,
    UriConstructionError,
)
from core.metrics_manager import MetricsManager

setup_logging()
logger = logging.getLogger(__name__)

# ASGI servers pick the reason phrase of the status line themselves, so the
# description travels in this header
STATUS_DESCRIPTION_HEADER = "X-Status-Description"


def _build_get(client: httpx.AsyncClient, uri: httpx.URL) -> httpx.Request:
    return client.build_request("GET", uri)


# Add entries here to support more methods
REQUEST_BUILDERS = {
    "GET": _build_get,
}


class RelayedResponse(StreamingResponse):
    """
    Streams a backend response to the client without buffering it.

    The body is relayed as the client decodes it, so Content-Encoding is not
    passed on. The backend response is owned by this object and closed exactly
    once, when streaming finishes, fails, or the client goes away.
    """

    def __init__(self, backend_response: httpx.Response):
        self.backend_response = backend_response
        status = HttpStatus.from_response(backend_response)
        super().__init__(
            content=backend_response.aiter_bytes(),
            status_code=status.code,
            headers={STATUS_DESCRIPTION_HEADER: status.description},
        )
        # Pass the content type through byte-for-byte
        for name, value in backend_response.headers.raw:
            if name.lower() == b"content-type":
                self.raw_headers.append((b"content-type", value))
                break

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            with anyio.CancelScope(shield=True):
                await self.backend_response.aclose()
            logger.debug("Released backend response.")


def plain_text_error(message: str, status_code: int = 500) -> Response:
    return Response(content=message, status_code=status_code, media_type="text/plain")


class ForwardingRelay:
    """
    Relays a request to the backend and streams the backend's response back.
    Only the method, path and query parameters are forwarded; headers, cookies
    and bodies are not.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        backend_root: str,
        metrics_manager: Optional[MetricsManager] = None,
    ):
        self.client = client
        self.backend_root = backend_root
        self.metrics_manager = metrics_manager

    def build_uri(self, path: str, query_params: Iterable[tuple[str, str]]) -> httpx.URL:
        """
        Build the backend URI for an inbound request.

        Args:
            path (str): The inbound request path.
            query_params: The inbound (key, value) query pairs. Repeated keys are
                kept as separate parameters.

        Returns:
            httpx.URL: backend root + path + query.

        Raises:
            UriConstructionError: If the resulting URI is invalid.
        """
        params = list(query_params)
        try:
            return httpx.URL(self.backend_root, path=path or "/", params=params or None)
        except (httpx.InvalidURL, ValueError, TypeError) as e:
            raise UriConstructionError(str(e)) from e

    def build_request(self, method: str, uri: httpx.URL) -> httpx.Request:
        """
        Build the outbound request for the given method.

        Raises:
            UnsupportedMethodError: If there is no builder for the method.
        """
        builder = REQUEST_BUILDERS.get(method.upper())
        if builder is None:
            raise UnsupportedMethodError(method)
        return builder(self.client, uri)

    async def execute(self, request: httpx.Request) -> httpx.Response:
        """
        Send the request and return the backend response with its body still unread.

        Raises:
            BackendCommunicationError: If the backend can't be reached or times out.
        """
        try:
            return await self.client.send(request, stream=True)
        except httpx.RequestError as e:
            raise BackendCommunicationError(str(e) or repr(e)) from e

    async def handle(
        self, method: str, path: str, query_params: Iterable[tuple[str, str]]
    ) -> Response:
        """
        Forward a request to the backend and relay its response.

        Args:
            method (str): The inbound HTTP method.
            path (str): The inbound request path.
            query_params: The inbound (key, value) query pairs.

        Returns:
            Response: The streamed backend response, or a 500 plain-text response
            describing why the request could not be forwarded.
        """
        try:
            uri = self.build_uri(path, query_params)
            logger.debug(f"Proxying to {uri}")
            request = self.build_request(method, uri)
            backend_response = await self.execute(request)
        except UriConstructionError as e:
            logger.warning(f"Invalid URI for {method} {path}: {e.message}")
            return self._failed(f"Invalid URI:  {e.message}")
        except BackendCommunicationError as e:
            logger.error("Error communicating with backend", exc_info=e)
            return self._failed(
                f"Error communicating with other side of proxy:  {e.message}"
            )
        except ProxyError as e:
            logger.warning(f"Rejecting {method} {path}: {e.message}")
            return self._failed(e.message)

        logger.debug(
            f"Backend answered {backend_response.status_code} "
            f"{backend_response.reason_phrase} for {uri}"
        )
        self._record(RequestOutcome.FORWARDED_OK)
        return RelayedResponse(backend_response)

    def _failed(self, message: str) -> Response:
        self._record(RequestOutcome.FORWARD_FAILED)
        return plain_text_error(message)

    def _record(self, outcome: RequestOutcome):
        if self.metrics_manager:
            self.metrics_manager.record_outcome(outcome)
