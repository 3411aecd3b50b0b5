"""Common schemas and enums shared across the application."""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Immutable model serialized with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Status(str, Enum):
    """Overall audit status."""

    SUCCESS = "success"
    PARTIAL = "partial"  # Some providers failed
    FAILED = "failed"


class QualityStatus(str, Enum):
    """Quality verdict for a single finding."""

    GOOD = "good"
    WARNING = "warning"
    ERROR = "error"


class Severity(str, Enum):
    """Severity of a reported issue."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ProviderResult(BaseModel, Generic[T]):
    """
    Outcome of one provider call.

    Either ``ok`` with a ``value`` or not ``ok`` with an ``error_message``,
    never both and never neither.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    value: T | None = None
    error_message: str | None = None

    @model_validator(mode="after")
    def _check_shape(self) -> "ProviderResult[T]":
        if self.ok:
            if self.value is None or self.error_message is not None:
                raise ValueError("successful result must carry a value and no error")
        elif self.value is not None or not self.error_message:
            raise ValueError("failed result must carry an error message and no value")
        return self

    @classmethod
    def success(cls, value: Any) -> "ProviderResult[Any]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error_message: str) -> "ProviderResult[Any]":
        return cls(ok=False, error_message=error_message)
