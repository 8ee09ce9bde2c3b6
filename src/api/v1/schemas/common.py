"""Common Pydantic schemas shared across the API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Standardized error response."""

    error_code: str
    error_kind: str
    message: str
    details: Any | None = None


class ItemFailureResponse(BaseModel):
    """One failed item of a batch operation."""

    model_config = ConfigDict(from_attributes=True)

    item_id: str
    error_code: str
    message: str


class BatchResultResponse(BaseModel):
    """Per-item outcome counts of a batch operation."""

    model_config = ConfigDict(from_attributes=True)

    total: int
    succeeded: int
    failed: int
    skipped: int
    errors: list[ItemFailureResponse] = Field(default_factory=list)


class BatchResultEnvelope(BaseModel):
    """Batch result wrapped in the standard envelope."""

    data: BatchResultResponse
    meta: dict[str, Any] = Field(default_factory=dict)


class CountResponse(BaseModel):
    """Number of records touched by a bulk operation."""

    count: int


class CountEnvelope(BaseModel):
    """Count wrapped in the standard envelope."""

    data: CountResponse
    meta: dict[str, Any] = Field(default_factory=dict)
