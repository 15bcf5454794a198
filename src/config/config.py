import os


class Config:
    """
    Configuration class for environment variables and default settings.
    """

    PROXY_HOST = os.environ.get("PROXY_HOST", "0.0.0.0")
    PROXY_PORT = int(os.environ.get("PROXY_PORT", "8812"))

    # Backend root is scheme + host only; the inbound path is appended per request
    BACKEND_SCHEME = os.environ.get("BACKEND_SCHEME", "https")
    BACKEND_HOST = os.environ.get("BACKEND_HOST")
    # Matches the httpx default when unset
    BACKEND_TIMEOUT = float(os.environ.get("BACKEND_TIMEOUT", "5.0"))

    # Injected error status and how often it fires (every ERROR_MOD requests)
    ERROR_CODE = int(os.environ.get("PROXY_ERROR_CODE", "503"))
    ERROR_MOD = int(os.environ.get("PROXY_ERROR_MOD", "10"))

    # Prometheus metrics are served on their own port so no proxied path is shadowed
    METRICS_PORT = (
        int(os.environ["METRICS_PORT"]) if os.environ.get("METRICS_PORT") else None
    )
