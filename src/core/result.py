"""Uniform result values returned to in-process callers."""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from core.exceptions import AppException, ErrorCode, ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Success with data, or failure with an error kind and message."""

    ok: bool
    data: T | None = None
    error_kind: ErrorKind | None = None
    error_code: str | None = None
    message: str | None = None
    details: Any | None = None

    @classmethod
    def success(cls, data: T) -> "Result[T]":
        return cls(ok=True, data=data)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        error_code: str | None = None,
        details: Any | None = None,
    ) -> "Result[T]":
        return cls(
            ok=False,
            error_kind=kind,
            error_code=error_code,
            message=message,
            details=details,
        )

    @classmethod
    def from_exception(cls, exc: AppException) -> "Result[T]":
        return cls.failure(
            kind=exc.kind,
            message=exc.message,
            error_code=exc.error_code.value,
            details=exc.details,
        )

    @classmethod
    def internal(cls, message: str) -> "Result[T]":
        return cls.failure(
            kind=ErrorKind.INTERNAL,
            message=message,
            error_code=ErrorCode.INTERNAL_ERROR.value,
        )


@dataclass
class ItemFailure:
    """One failed item inside a batch operation."""

    item_id: str
    error_code: str
    message: str


@dataclass
class BatchResult:
    """Per-item outcome counts of a batch operation."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[ItemFailure] = field(default_factory=list)

    def record_success(self) -> None:
        self.total += 1
        self.succeeded += 1

    def record_skip(self) -> None:
        self.total += 1
        self.skipped += 1

    def record_failure(self, item_id: str, error_code: str, message: str) -> None:
        self.total += 1
        self.failed += 1
        self.errors.append(ItemFailure(item_id=item_id, error_code=error_code, message=message))
