"""FastAPI application exposing expense tracking endpoints.

Every response is wrapped in an envelope: ``{"success": true, "data": ...}``
on success and ``{"success": false, "error": {"code", "message", "details"}}``
on failure. ``details`` is omitted in production.
"""
from __future__ import annotations

import logging
import math
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from expense_tracker import __version__
from expense_tracker.config import Settings, get_settings
from expense_tracker.errors import (
    ApiError,
    EmptyUpdateError,
    EntityNotFoundError,
    NotFound,
    StoreError,
    ValidationFailed,
)
from expense_tracker.validation import VALID_CATEGORIES, sanitize_expense, validate_expense

from . import crud, database, schemas

LOG = logging.getLogger(__name__)

router = APIRouter(prefix="/expenses", tags=["expenses"])


def _ensure_valid(candidate: Dict[str, Any]) -> None:
    result = validate_expense(candidate)
    if not result.is_valid:
        raise ValidationFailed("Validation failed", details=result.to_details())


def _amount_bound(name: str, raw: Optional[str]) -> Optional[float]:
    # Blank bounds count as absent.
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        value = math.nan
    if not math.isfinite(value):
        raise ValidationFailed(
            "Validation failed",
            details={"errors": [{"field": name, "message": f"{name} must be a number"}]},
        )
    return value


def _require_expense(db: Session, expense_id: int):
    expense = crud.get_expense(db, expense_id)
    if expense is None:
        raise NotFound(f"Expense with ID {expense_id} not found")
    return expense


@router.get("", response_model=schemas.ExpenseListResponse)
def list_expenses(
    category: Optional[str] = None,
    min_amount: Optional[str] = Query(None, alias="minAmount"),
    max_amount: Optional[str] = Query(None, alias="maxAmount"),
    db: Session = Depends(database.get_db),
) -> schemas.ExpenseListResponse:
    filters = schemas.ExpenseFilter(
        category=category,
        min_amount=_amount_bound("minAmount", min_amount),
        max_amount=_amount_bound("maxAmount", max_amount),
    )
    expenses = [schemas.ExpenseRead.model_validate(item) for item in crud.list_expenses(db, filters)]
    return schemas.ExpenseListResponse(data=expenses, count=len(expenses))


@router.get("/categories", response_model=schemas.CategoriesResponse)
def list_categories() -> schemas.CategoriesResponse:
    return schemas.CategoriesResponse(data=list(VALID_CATEGORIES))


@router.get("/summary", response_model=schemas.SummaryResponse)
def get_summary(db: Session = Depends(database.get_db)) -> schemas.SummaryResponse:
    return schemas.SummaryResponse(data=crud.expense_summary(db))


@router.get("/{expense_id}", response_model=schemas.ExpenseResponse)
def get_expense(expense_id: int, db: Session = Depends(database.get_db)) -> schemas.ExpenseResponse:
    expense = _require_expense(db, expense_id)
    return schemas.ExpenseResponse(data=schemas.ExpenseRead.model_validate(expense))


@router.post("", response_model=schemas.ExpenseResponse, status_code=status.HTTP_201_CREATED)
def create_expense(
    payload: Optional[Dict[str, Any]] = Body(None),
    db: Session = Depends(database.get_db),
) -> schemas.ExpenseResponse:
    sanitized = sanitize_expense(payload or {})
    _ensure_valid(sanitized)
    expense = crud.create_expense(db, schemas.ExpenseCreate(**sanitized))
    return schemas.ExpenseResponse(
        data=schemas.ExpenseRead.model_validate(expense),
        message="Expense created successfully",
    )


@router.put("/{expense_id}", response_model=schemas.ExpenseResponse)
def update_expense(
    expense_id: int,
    payload: Optional[Dict[str, Any]] = Body(None),
    db: Session = Depends(database.get_db),
) -> schemas.ExpenseResponse:
    existing = _require_expense(db, expense_id)
    # Validate the merged record so a partial update cannot break untouched fields.
    sanitized = sanitize_expense({**existing.to_record(), **(payload or {})})
    _ensure_valid(sanitized)
    updated = crud.update_expense(db, expense_id, schemas.ExpenseUpdate(**sanitized))
    return schemas.ExpenseResponse(
        data=schemas.ExpenseRead.model_validate(updated),
        message="Expense updated successfully",
    )


@router.delete("/{expense_id}", response_model=schemas.DeleteResponse)
def delete_expense(expense_id: int, db: Session = Depends(database.get_db)) -> schemas.DeleteResponse:
    _require_expense(db, expense_id)
    crud.delete_expense(db, expense_id)
    return schemas.DeleteResponse(message="Expense deleted successfully", deleted_id=expense_id)


def _error_response(
    request: Request,
    settings: Settings,
    *,
    status_code: int,
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    level = logging.ERROR if status_code >= 500 else logging.WARNING
    LOG.log(
        level,
        "Error [%s] %s on %s %s: %s",
        status_code,
        code,
        request.method,
        request.url.path,
        message,
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "error_code": code,
        },
    )
    body = schemas.ErrorResponse(
        error=schemas.ErrorBody(
            code=code,
            message=message,
            details=None if settings.is_production else (details or {}),
        )
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", exclude_none=True))


def _install_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        return _error_response(
            request,
            settings,
            status_code=exc.status_code,
            code=exc.code,
            message=exc.message,
            details=exc.details,
        )

    @app.exception_handler(EntityNotFoundError)
    async def handle_missing_entity(request: Request, exc: EntityNotFoundError) -> JSONResponse:
        return _error_response(
            request, settings, status_code=status.HTTP_404_NOT_FOUND, code=NotFound.code, message=str(exc)
        )

    @app.exception_handler(EmptyUpdateError)
    async def handle_empty_update(request: Request, exc: EmptyUpdateError) -> JSONResponse:
        return _error_response(
            request, settings, status_code=status.HTTP_400_BAD_REQUEST, code=ValidationFailed.code, message=str(exc)
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": str(error["loc"][-1]) if error.get("loc") else "request", "message": error["msg"]}
            for error in exc.errors()
        ]
        return _error_response(
            request,
            settings,
            status_code=status.HTTP_400_BAD_REQUEST,
            code=ValidationFailed.code,
            message="Validation failed",
            details={"errors": errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return _error_response(
                request,
                settings,
                status_code=status.HTTP_404_NOT_FOUND,
                code=NotFound.code,
                message="This endpoint does not exist",
            )
        return _error_response(
            request,
            settings,
            status_code=exc.status_code,
            code=ApiError.code,
            message=str(exc.detail),
        )

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError) -> JSONResponse:
        return _error_response(
            request,
            settings,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code=ApiError.code,
            message="An unexpected error occurred",
            details={"operation": exc.operation, "error": exc.message},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        LOG.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(
            request,
            settings,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code=ApiError.code,
            message="An unexpected error occurred",
            details={"error": str(exc)},
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API application for the given settings."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        database.init_db()
        yield

    app = FastAPI(title="Expense Tracker API", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        LOG.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    _install_error_handlers(app, settings)
    app.include_router(router, prefix=settings.api_prefix)

    @app.get("/health", tags=["system"])
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
