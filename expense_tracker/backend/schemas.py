"""Pydantic schemas for serialising expense tracking data."""
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExpenseBase(BaseModel):
    date: dt.date
    amount: float = Field(..., gt=0)
    category: str = Field(..., max_length=50)
    description: Optional[str] = Field(None, max_length=255)


class ExpenseCreate(ExpenseBase):
    pass


class ExpenseUpdate(BaseModel):
    date: Optional[dt.date] = None
    amount: Optional[float] = Field(None, gt=0)
    category: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=255)


class ExpenseRead(ExpenseBase, ORMModel):
    id: int
    created_at: Optional[dt.datetime] = None


class ExpenseFilter(BaseModel):
    category: Optional[str] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None


class CategorySummary(CamelModel):
    category: str
    total_count: int
    category_total: float


class Envelope(BaseModel):
    success: bool = True


class ExpenseListResponse(Envelope):
    data: List[ExpenseRead]
    count: int


class ExpenseResponse(Envelope):
    data: ExpenseRead
    message: Optional[str] = None


class CategoriesResponse(Envelope):
    data: List[str]


class SummaryResponse(Envelope):
    data: List[CategorySummary]


class DeleteResponse(CamelModel, Envelope):
    message: str
    deleted_id: int


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class ErrorResponse(Envelope):
    success: bool = False
    error: ErrorBody
