import logging

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# HTTP errors raised directly from routes and dependencies


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ServiceUnavailableError(HTTPException):
    def __init__(self, detail: str = "Service unavailable"):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


# Gateway error taxonomy. These are raised by the validator and sinks and are
# independent of HTTP; `gateway_error_handler` maps them onto responses.


class GatewayError(Exception):
    """Base class for every failure the event gateway reports to its caller."""

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    @property
    def public_detail(self) -> str:
        return "Internal error"


class EventValidationError(GatewayError):
    """Caller-supplied event violates a bound. Fix the input and resend."""

    http_status = 422  # Unprocessable Content

    def __init__(self, message: str = "Invalid event"):
        super().__init__(message)
        self.message = message

    @property
    def public_detail(self) -> str:
        return self.message


class ConfigurationError(GatewayError):
    """A required setting (the shared ingest secret) is missing."""

    @property
    def public_detail(self) -> str:
        return "Gateway is not configured"


class RelayError(GatewayError):
    http_status = status.HTTP_502_BAD_GATEWAY


class TransportFailure(RelayError):
    """The relay request could not be completed at the network layer."""

    def __init__(self, message: str):
        super().__init__(f"Corewatch request failed: {message}")
        self.message = message

    @property
    def public_detail(self) -> str:
        return "Collector unreachable"


class RejectedByCollector(RelayError):
    """The collector answered with a non-2xx status. Only the status is kept."""

    def __init__(self, status_code: int):
        super().__init__(f"Corewatch ingest failed: {status_code}")
        self.collector_status = status_code

    @property
    def public_detail(self) -> str:
        return f"Collector rejected event (status {self.collector_status})"


class StorageFailure(GatewayError):
    """The persistence write failed. The store's own error is the __cause__."""

    http_status = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = "storage failure"):
        super().__init__(message)

    @property
    def public_detail(self) -> str:
        return "Storage unavailable"


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Translate a GatewayError into a JSON response without leaking internals."""
    if exc.http_status >= 500:
        logger.warning(
            "%s %s failed: %s (cause: %r)",
            request.method,
            request.url.path,
            exc,
            exc.__cause__,
        )
    return JSONResponse(status_code=exc.http_status, content={"detail": exc.public_detail})
