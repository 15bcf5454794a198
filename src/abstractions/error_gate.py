from abc import ABC, abstractmethod


class ErrorGate(ABC):
    """
    Abstract base class for error gates. Implementations decide, per inbound
    request, whether the proxy answers with the injected error or forwards.
    """

    @abstractmethod
    def should_inject_error(self) -> bool:
        """
        Count the current request and decide whether it gets the injected error.

        Returns:
            bool: True if the injected error should be returned instead of forwarding.
        """
        pass
