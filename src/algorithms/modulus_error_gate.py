import logging
from typing import Optional

from abstractions.error_gate import ErrorGate
from config.logging_config import setup_logging
from core.request_counter import RequestCounter

setup_logging()
logger = logging.getLogger(__name__)


class ModulusErrorGate(ErrorGate):
    """
    Injects the error on requests 1, 1 + error_mod, 1 + 2 * error_mod, ...

    The first request of every run is always an error. An error_mod of 1 makes
    every request an error.
    """

    def __init__(self, error_mod: int, counter: Optional[RequestCounter] = None):
        if error_mod < 1:
            raise ValueError(f"error_mod must be >= 1, got {error_mod}")
        self.error_mod = error_mod
        self.counter = counter or RequestCounter()

    def should_inject_error(self) -> bool:
        current_request = self.counter.increment()
        # 1 % error_mod is 0 when error_mod == 1, so every request matches
        inject = current_request % self.error_mod == 1 % self.error_mod
        logger.debug(f"Request #{current_request}: inject_error={inject}")
        return inject
