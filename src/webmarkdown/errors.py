"""Error code registry and exception types for consistent API responses."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ErrorCodeSpec:
    code: str
    category: str
    message: str
    http_status: int


class ErrorRegistry:
    def __init__(self) -> None:
        self._codes: Dict[str, ErrorCodeSpec] = {}

    def register(self, spec: ErrorCodeSpec) -> None:
        if spec.code in self._codes:
            raise ValueError(f"Error code {spec.code} already registered")
        self._codes[spec.code] = spec

    def get(self, code: str) -> ErrorCodeSpec:
        if code not in self._codes:
            raise KeyError(f"Unknown error code: {code}")
        return self._codes[code]

    def to_dict(self) -> Dict[str, ErrorCodeSpec]:
        return dict(self._codes)


ERRORS = ErrorRegistry()


def register_default_errors() -> None:
    ERRORS.register(
        ErrorCodeSpec(
            code="ERR_URL_MISSING",
            category="URL is required",
            message="Please provide a valid URL to convert",
            http_status=status.HTTP_400_BAD_REQUEST,
        )
    )
    ERRORS.register(
        ErrorCodeSpec(
            code="ERR_URL_INVALID",
            category="Invalid URL format",
            message="Please provide a valid URL (e.g., https://example.com)",
            http_status=status.HTTP_400_BAD_REQUEST,
        )
    )
    ERRORS.register(
        ErrorCodeSpec(
            code="ERR_REQUEST_INVALID",
            category="Invalid request",
            message="Request body must be a JSON object with a string 'url' field",
            http_status=status.HTTP_400_BAD_REQUEST,
        )
    )
    ERRORS.register(
        ErrorCodeSpec(
            code="ERR_UPSTREAM_STATUS",
            category="Failed to fetch URL",
            message="The URL responded with an error status",
            http_status=status.HTTP_502_BAD_GATEWAY,
        )
    )
    ERRORS.register(
        ErrorCodeSpec(
            code="ERR_CONTENT_TYPE",
            category="Unsupported content type",
            message="HTML content is required",
            http_status=status.HTTP_400_BAD_REQUEST,
        )
    )
    ERRORS.register(
        ErrorCodeSpec(
            code="ERR_EMPTY_BODY",
            category="No content received",
            message="The URL did not return any content",
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    )
    ERRORS.register(
        ErrorCodeSpec(
            code="ERR_CONVERSION",
            category="Conversion failed",
            message="Failed to convert HTML to Markdown",
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    )
    ERRORS.register(
        ErrorCodeSpec(
            code="ERR_SERVER",
            category="Server error",
            message="An unexpected error occurred",
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    )


register_default_errors()


class ServiceError(Exception):
    """Base class for failures that map onto a registered error code."""

    code = "ERR_SERVER"

    def __init__(self, message: Optional[str] = None, *, http_status: Optional[int] = None) -> None:
        self.spec = ERRORS.get(self.code)
        self.message = message or self.spec.message
        self.http_status = http_status or self.spec.http_status
        super().__init__(self.message)

    @property
    def category(self) -> str:
        return self.spec.category

    def to_payload(self) -> Dict[str, str]:
        return {"error": self.category, "message": self.message}


class MissingUrlError(ServiceError):
    code = "ERR_URL_MISSING"


class InvalidUrlError(ServiceError):
    code = "ERR_URL_INVALID"


class InvalidRequestError(ServiceError):
    code = "ERR_REQUEST_INVALID"


class UpstreamStatusError(ServiceError):
    code = "ERR_UPSTREAM_STATUS"

    def __init__(self, status_code: int, status_text: str) -> None:
        self.status_code = status_code
        self.status_text = status_text
        super().__init__(f"HTTP {status_code}: {status_text}", http_status=status_code)


class UnsupportedContentTypeError(ServiceError):
    code = "ERR_CONTENT_TYPE"

    def __init__(self, content_type: str) -> None:
        self.content_type = content_type
        super().__init__(f"The URL returned {content_type}, but HTML content is required")


class EmptyUpstreamBodyError(ServiceError):
    code = "ERR_EMPTY_BODY"


class ConversionError(ServiceError):
    code = "ERR_CONVERSION"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Failed to convert HTML to Markdown: {detail}")


class UnexpectedError(ServiceError):
    code = "ERR_SERVER"

    def __init__(self, detail: str) -> None:
        super().__init__(f"An unexpected error occurred: {detail}")


class FetchTransportError(UnexpectedError):
    """Network-level failure talking to the upstream (DNS, refused, timeout)."""


class StreamAbortedError(RuntimeError):
    """A streamed response failed after its status line was sent.

    No exception handler is registered for it; the server drops the
    connection and the client sees a truncated body.
    """


def error_response(exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content=exc.to_payload())


@contextmanager
def error_boundary(operation: str) -> Iterator[None]:
    """Re-raise anything that is not a ServiceError as a generic server error."""

    try:
        yield
    except ServiceError:
        raise
    except Exception as exc:
        logger.exception("unexpected_error", operation=operation)
        raise UnexpectedError(str(exc)) from exc


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(str(err.get("msg", "")) for err in exc.errors())
    message = ERRORS.get(InvalidRequestError.code).message
    if problems:
        message = f"{message} ({problems})"
    return error_response(InvalidRequestError(message))
