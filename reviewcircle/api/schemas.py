from __future__ import annotations

from typing import Any, Dict, List, Union

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str
    version: str
    diagnostics: Dict[str, Any]


class ValidationResultResponse(BaseModel):
    valid: bool
    errors: List[str]


class ErrorDetail(BaseModel):
    status: str = "error"
    message: str
    errors: List[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    detail: Union[ErrorDetail, str]
