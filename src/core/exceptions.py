"""Exceptions raised by the proxy."""


class ProxyError(Exception):
    """Base exception for proxy errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(ProxyError):
    """Raised at startup when the proxy cannot be configured."""


class UnknownErrorCodeError(ConfigurationError):
    """Raised when the injected error code can't be resolved to a status."""

    def __init__(self, code: int) -> None:
        super().__init__(f"Unknown error code:  {code}")
        self.code = code


class UnservableErrorCodeError(ConfigurationError):
    """Raised when the injected error code can't be sent as a final response."""

    def __init__(self, code: int) -> None:
        super().__init__(f"Error code can't be sent as a response:  {code}")
        self.code = code


class UnsupportedMethodError(ProxyError):
    """Raised when the inbound method has no outbound counterpart."""

    def __init__(self, method: str) -> None:
        super().__init__(f"Unsupported method:  {method}")
        self.method = method


class UriConstructionError(ProxyError):
    """Raised when the backend URI can't be built from the inbound request."""


class BackendCommunicationError(ProxyError):
    """Raised when the backend call fails before a response is received."""
