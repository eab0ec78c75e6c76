"""API error types and exception handlers.

Route handlers raise `MissingParameter` for absent identifiers and wrap
their single database call in `failure_message(...)`, which turns any
exception into an `UnhandledFailure` carrying only a generic message.
The registered handlers render both as `{"error": message}`; the original
exception is logged server-side and never returned to the client.
"""

import json
import logging
from contextlib import contextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("schoolsurvey.api")


class APIError(Exception):
    """Error with a client-safe message and an HTTP status."""
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MissingParameter(APIError):
    """A required identifier was not supplied (caller-correctable)."""
    status_code = 400


class UnhandledFailure(APIError):
    """The delegated database call failed; the cause stays server-side."""
    status_code = 500


@contextmanager
def failure_message(message: str):
    """Re-raise any exception from the block as `UnhandledFailure(message)`."""
    try:
        yield
    except APIError:
        raise
    except Exception as exc:
        raise UnhandledFailure(message) from exc


def _request_id(request: Request) -> str:
    return str(getattr(request.state, "request_id", "unknown"))


def register_error_handlers(app: FastAPI) -> None:
    """Register the JSON error renderers on `app`."""

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        if isinstance(exc, UnhandledFailure):
            cause = exc.__cause__ or exc
            logger.error(
                "operation_failed %s",
                json.dumps(
                    {
                        "request_id": _request_id(request),
                        "path": request.url.path,
                        "method": request.method,
                        "error": exc.message,
                    },
                    ensure_ascii=True,
                ),
                exc_info=(type(cause), cause, cause.__traceback__),
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
