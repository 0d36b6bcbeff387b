from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from market_pulse.exceptions import AppError, NotFoundError, UpstreamError, ValidationError

# Most specific first; anything else is a 500
_STATUS_CODES: list[tuple[type[AppError], int]] = [
    (NotFoundError, 404),
    (ValidationError, 422),
    (UpstreamError, 502),
]


def status_code_for(exc: AppError) -> int:
    for error_type, status_code in _STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code_for(exc),
        content={"error": exc.code, "message": exc.message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
