"""Exception types raised by the IBEX 35 data layer."""


class Ibex35Error(Exception):
    """Base class for all errors raised by this package."""


class RemoteRequestError(Ibex35Error):
    """Remote API call failed: non-2xx status, transport error or unreadable payload.

    status_code/status_text are only set when the server actually answered.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        status_text: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.status_text = status_text


class UnsupportedOperationError(Ibex35Error):
    """Operation is not available through the remote API."""


class NotFoundError(Ibex35Error, LookupError):
    """An analytics operation needs an entity that does not exist."""
