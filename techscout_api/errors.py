"""Error taxonomy shared by the service layer and the HTTP boundary."""


class TechScoutError(Exception):
    """Base exception carrying the HTTP status it maps to."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(TechScoutError):
    """Raised when request input is missing or malformed."""

    status_code = 400


class InvalidActionError(ValidationError):
    """Raised when a refinement action is not one of refine/simplify/expand."""

    pass


class NotFoundError(TechScoutError):
    """Raised when a share key is unknown or has expired."""

    status_code = 404


class UpstreamError(TechScoutError):
    """Raised when an external call (completion service, URL fetch) fails."""

    status_code = 500


class FetchError(UpstreamError):
    """Raised when the target URL cannot be fetched.

    Surfaced as a client error since the URL is user supplied.
    """

    status_code = 400
