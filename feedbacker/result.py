"""Explicit success/failure values returned across component boundaries.

Components catch their own provider exceptions and hand back ``Ok`` or
``Err`` so the pipeline alone decides what the submitter sees.

Usage:
    result = await store.put(path, "voice.webm")
    if isinstance(result, Err):
        logger.warning("upload failed", kind=result.kind, detail=result.detail)
    else:
        ref = result.value
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome.

    Attributes:
        kind: Short machine-readable failure category.
        detail: Human-readable explanation, safe to log.
        data: Optional structured context (e.g. retry hints).
    """

    kind: str
    detail: str = ""
    data: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return False


Result = Ok[T] | Err
