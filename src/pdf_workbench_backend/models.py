from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel


class PositionOutcome(str, Enum):
    REQUESTED = "requested"
    CLAMPED = "clamped"


class FontChoice(str, Enum):
    HELVETICA = "helvetica"
    TIMES_ROMAN = "timesroman"
    COURIER = "courier"
    SYMBOL = "symbol"
    ZAPF_DINGBATS = "zapfdingbats"


class StatusMessage(BaseModel):
    message: str


class InitResponse(StatusMessage):
    created: bool


class AuthRequest(BaseModel):
    password: Optional[str] = None


class AuthResponse(BaseModel):
    success: bool
    message: str


class AddPageTitleRequest(BaseModel):
    title: Optional[str] = None
    # Any value is accepted for these two; unusable ones fall back to append and Helvetica.
    position: Optional[Any] = None
    font: Optional[Any] = None


class TitlePageResponse(StatusMessage):
    title: str
    position: int
    position_outcome: PositionOutcome
    font: FontChoice
    page_count: int


class InsertResponse(StatusMessage):
    position: int
    position_outcome: PositionOutcome
    inserted_pages: int
    page_count: int


class PageSize(BaseModel):
    width: float
    height: float


class DocumentInfo(BaseModel):
    document_id: str
    exists: bool
    page_count: int
    pages: List[PageSize] = []
