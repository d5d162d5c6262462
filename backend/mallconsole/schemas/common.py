"""Common Pydantic schemas used across the console."""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from mallconsole.core.exceptions import MallConsoleException

T = TypeVar("T")


class ErrorDetail(BaseModel):
    """Error detail for failed results and error responses."""

    code: str
    message: str
    field: str | None = None


class ServiceResult(BaseModel, Generic[T]):
    """Uniform success/failure envelope returned by services and the gateway.

    Callers must check ``success`` before touching ``data``.
    """

    status: str = "success"
    data: Optional[T] = None
    id: Optional[str] = None
    error: Optional[ErrorDetail] = None

    @property
    def success(self) -> bool:
        return self.status == "success"

    @classmethod
    def ok(cls, data: Any = None, id: Optional[str] = None) -> "ServiceResult":
        return cls(status="success", data=data, id=id)

    @classmethod
    def fail(cls, exc: MallConsoleException) -> "ServiceResult":
        return cls(status="error", error=ErrorDetail(code=exc.code, message=exc.message))


class ApiResponse(BaseModel, Generic[T]):
    """Standard HTTP response envelope."""

    status: str = "success"
    data: T
    notifications: list[str] = []


class ErrorResponse(BaseModel):
    """Standard HTTP error response."""

    status: str = "error"
    error: ErrorDetail
