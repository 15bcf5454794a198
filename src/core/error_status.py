from http import HTTPStatus

from contracts.http_status import HttpStatus
from core.exceptions import UnknownErrorCodeError, UnservableErrorCodeError

# Codes whose description we pick ourselves rather than taking the standard phrase
SPECIAL_STATUSES = {
    503: "Internal server error",
}

# Informational codes are not final responses, so the server can't send them
MIN_FINAL_STATUS = 200


def resolve_error_status(code: int) -> HttpStatus:
    """
    Resolve the configured error code into a (code, description) status.

    Args:
        code (int): The numeric HTTP status code to inject.

    Returns:
        HttpStatus: The status to use for every injected error.

    Raises:
        UnknownErrorCodeError: If the code is neither special-cased nor a standard status.
        UnservableErrorCodeError: If the code is a standard 1xx status.
    """
    if code in SPECIAL_STATUSES:
        return HttpStatus(code=code, description=SPECIAL_STATUSES[code])
    try:
        standard = HTTPStatus(code)
    except ValueError:
        raise UnknownErrorCodeError(code) from None
    if code < MIN_FINAL_STATUS:
        raise UnservableErrorCodeError(code)
    return HttpStatus(code=code, description=standard.phrase)
