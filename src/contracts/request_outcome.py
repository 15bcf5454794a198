from enum import Enum


class RequestOutcome(str, Enum):
    """
    Terminal state of a single proxied request.
    """

    ERROR_INJECTED = "error_injected"
    FORWARDED_OK = "forwarded_ok"
    FORWARD_FAILED = "forward_failed"
