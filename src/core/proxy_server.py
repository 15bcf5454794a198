import logging
import threading
import time

import uvicorn
from fastapi import FastAPI

from config.logging_config import setup_logging
from contracts.proxy_config import ProxyConfig

setup_logging()
logger = logging.getLogger(__name__)


class ProxyServer:
    """
    Runs the proxy application under uvicorn in a background thread.
    """

    def __init__(self, app: FastAPI, proxy_config: ProxyConfig, startup_timeout: float = 10.0):
        self.app = app
        self.proxy_config = proxy_config
        self.startup_timeout = startup_timeout
        self._server = uvicorn.Server(
            uvicorn.Config(
                app,
                host=proxy_config.host,
                port=proxy_config.port,
                log_config=None,
                lifespan="on",
            )
        )
        self._thread = None

    @property
    def started(self) -> bool:
        return self._server.started

    @property
    def listening_port(self) -> int:
        """
        The port the server is bound to. Differs from the configured port when that is 0.
        """
        for server in self._server.servers:
            for sock in server.sockets:
                return sock.getsockname()[1]
        return self.proxy_config.port

    def start(self):
        """
        Start serving in a background thread and wait until the server is listening.

        Raises:
            RuntimeError: If the server does not come up within the startup timeout.
        """
        self._thread = threading.Thread(
            target=self._server.run, name="faultproxy-server"
        )
        self._thread.start()
        deadline = time.monotonic() + self.startup_timeout
        while not self._server.started:
            if not self._thread.is_alive() or time.monotonic() > deadline:
                self.stop()
                raise RuntimeError(
                    f"Proxy failed to start on {self.proxy_config.host}:{self.proxy_config.port}"
                )
            time.sleep(0.05)
        logger.info(
            f"Started proxy to {self.proxy_config.backend_host} on {self.listening_port}"
        )

    def stop(self):
        """
        Ask uvicorn to exit and wait for the server thread to finish.
        """
        self._server.should_exit = True
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        logger.info("Proxy stopped.")
