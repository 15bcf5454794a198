"""Command-line entry point for the error-injecting proxy."""

import argparse
import logging
import sys
import time

from prometheus_client import start_http_server
from pydantic import ValidationError

from config.config import Config
from config.logging_config import setup_logging
from contracts.proxy_config import ProxyConfig
from core.error_status import resolve_error_status
from core.exceptions import ConfigurationError
from core.metrics_manager import MetricsManager
from core.proxy_server import ProxyServer
from proxy import create_app

setup_logging()
logger = logging.getLogger(__name__)

SLEEP_SECONDS = 60


def positive_int(value):
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="HTTP proxy that returns a preprogrammed error every few requests."
    )
    parser.add_argument("-p", "--port", type=int, default=Config.PROXY_PORT, help="Port")
    parser.add_argument("--host", default=Config.PROXY_HOST, help="Interface to listen on")
    parser.add_argument("-e", "--error", type=int, default=Config.ERROR_CODE, help="Error")
    parser.add_argument(
        "-m",
        "--error-mod",
        type=positive_int,
        # argparse only runs type= on string defaults
        default=str(Config.ERROR_MOD),
        help="Error thrown every m requests",
    )
    parser.add_argument(
        "--backend-scheme", default=Config.BACKEND_SCHEME, help="Backend url scheme"
    )
    parser.add_argument(
        "--backend-host",
        default=Config.BACKEND_HOST,
        required=Config.BACKEND_HOST is None,
        help="Backend host, optionally with a port",
    )
    parser.add_argument(
        "--backend-timeout",
        type=float,
        default=Config.BACKEND_TIMEOUT,
        help="Timeout in seconds for backend calls",
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=Config.METRICS_PORT,
        help="Serve prometheus metrics on this port",
    )
    parser.add_argument(
        "--embedded",
        action="store_true",
        help="Immediately return and leave the server running in a thread",
    )
    return parser


def build_proxy_config(args) -> ProxyConfig:
    """
    Turn parsed arguments into a ProxyConfig.

    Raises:
        ConfigurationError: If the error code is unknown or the settings are invalid.
    """
    error_status = resolve_error_status(args.error)
    try:
        return ProxyConfig(
            port=args.port,
            host=args.host,
            backend_scheme=args.backend_scheme,
            backend_host=args.backend_host,
            error_status=error_status,
            error_mod=args.error_mod,
            backend_timeout=args.backend_timeout,
            embedded=args.embedded,
        )
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e


def main(argv=None):
    """
    Run the proxy.

    Returns the running ProxyServer when started with --embedded; otherwise blocks
    until interrupted and then stops the server.
    """
    args = build_parser().parse_args(argv)
    try:
        proxy_config = build_proxy_config(args)
    except ConfigurationError as e:
        print(e.message, file=sys.stderr)
        sys.exit(1)

    metrics_manager = MetricsManager()
    if args.metrics_port is not None:
        start_http_server(args.metrics_port, registry=metrics_manager.registry)
        logger.info(f"Serving metrics on {args.metrics_port}")

    server = ProxyServer(
        create_app(proxy_config, metrics_manager=metrics_manager), proxy_config
    )
    server.start()
    if proxy_config.embedded:
        return server
    try:
        while True:
            time.sleep(SLEEP_SECONDS)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down.")
    server.stop()
    return None


if __name__ == "__main__":
    main()
