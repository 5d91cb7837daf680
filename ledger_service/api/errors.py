"""Map ledger error kinds to HTTP responses"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ledger_service.api.dependencies import get_request_id
from ledger_service.domain.exceptions import ErrorKind, LedgerError

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_body(kind: str, message: str) -> dict:
    return {"error": {"kind": kind, "message": message}}


def register_error_handlers(app: FastAPI) -> None:
    """Register ledger, validation and catch-all handlers"""

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        request_id = get_request_id(request)
        if exc.kind is ErrorKind.INTERNAL:
            logging.error(f"Internal error: {exc.message}", extra={"request_id": request_id})
        else:
            logging.warning(f"Request refused: {exc.message}", extra={"request_id": request_id})
        return JSONResponse(
            status_code=STATUS_BY_KIND[exc.kind],
            content=error_body(exc.kind.value, exc.message),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logging.warning(
            f"Validation error on {request.url.path}",
            extra={"request_id": get_request_id(request)},
        )
        body = error_body(ErrorKind.INVALID_REQUEST.value, "Invalid request data")
        body["error"]["details"] = [
            {"field": ".".join(str(loc) for loc in e["loc"]), "message": e["msg"]}
            for e in exc.errors()
        ]
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logging.error(
            f"Unexpected error: {exc}",
            extra={"request_id": get_request_id(request)},
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(ErrorKind.INTERNAL.value, "Internal server error"),
        )
