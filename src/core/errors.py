import structlog

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


log = structlog.get_logger()


class ApiError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(ApiError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT


def _error_body(message: str, **extra) -> dict:
    body = {"success": False, "message": message}
    body.update(extra)
    return body


def _describe_validation_error(error: dict) -> str:
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc)
    if error.get("type") == "missing":
        return f"{field} is required" if field else "Request body is required"
    msg = error.get("msg", "Invalid value").removeprefix("Value error, ")
    return f"{field}: {msg}" if field else msg


async def api_error_handler(request: Request, exc: ApiError):
    log.info("request.rejected", path=request.url.path, status=exc.status_code, reason=exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(_error_body(exc.message), status_code=exc.status_code, headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = _describe_validation_error(errors[0]) if errors else "Invalid request"
    details = [
        {"field": ".".join(str(p) for p in e.get("loc", ())), "message": e.get("msg")}
        for e in errors
    ]
    log.info("request.invalid", path=request.url.path, errors=details)
    return JSONResponse(
        _error_body(message, errors=details),
        status_code=status.HTTP_400_BAD_REQUEST,
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "Route not found"
    else:
        message = str(exc.detail)
    return JSONResponse(_error_body(message), status_code=exc.status_code, headers=exc.headers)


async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception("request.failed", path=request.url.path, error=str(exc))
    return JSONResponse(
        _error_body("Something went wrong, try again later", error=str(exc)),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
