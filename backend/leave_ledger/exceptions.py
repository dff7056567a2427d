from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int
    retryable: bool = False


class AppError(Exception):
    """Base application exception."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    retryable: bool = False

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class NotFoundError(AppError):
    """Unknown employee, leave type, request, event or holiday."""

    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class InvalidInputError(AppError):
    """Malformed input rejected before any ledger access."""

    status_code = 422


class MissingRejectionReasonError(InvalidInputError):
    pass


class InvalidTransitionError(AppError):
    """Status change not permitted from the request's current state."""

    status_code = status.HTTP_409_CONFLICT


class BenefitExhaustedError(AppError):
    """One-time leave already used and not revoked."""

    status_code = status.HTTP_409_CONFLICT


class InsufficientBalanceError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class DuplicateRequestError(AppError):
    """A request for the same employee, leave type and period already exists."""

    status_code = status.HTTP_409_CONFLICT


class ReclassificationError(AppError):
    """Operator tried to change a leave type's accrual behaviour after balances exist."""

    status_code = status.HTTP_409_CONFLICT


class ConcurrencyConflictError(AppError):
    """Optimistic precondition failed; re-read and reapply."""

    status_code = status.HTTP_409_CONFLICT
    retryable = True


class LedgerIntegrityFault(AppError):
    """A balance row the ledger expected is missing or would go negative.

    Never repaired in place: recreating the row would hide data loss.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
            retryable=exc.retryable,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=422,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
