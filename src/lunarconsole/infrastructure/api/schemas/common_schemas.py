"""Pydantic schemas shared by every backend endpoint.

Every response body is wrapped in an envelope carrying a success flag, the
payload under ``data``, and an error that is either a plain string or an
object with a message and a code.
"""

from typing import Any

from pydantic import BaseModel, Field

from lunarconsole.domain.entities.pagination import Pagination


class ApiErrorDetail(BaseModel):
    """Structured error object returned by the backend."""

    message: str | None = None
    code: str | None = None


class ApiEnvelope(BaseModel):
    """Response envelope wrapping every backend payload."""

    success: bool = True
    data: Any = None
    error: str | ApiErrorDetail | None = None
    message: str | None = None
    validation_errors: list[str] | None = None

    def error_message(self) -> str | None:
        """Best available error message, most specific first."""
        if isinstance(self.error, str) and self.error:
            return self.error
        if isinstance(self.error, ApiErrorDetail):
            if self.error.message:
                return self.error.message
            if self.error.code:
                return self.error.code
        return self.message or None


class PaginationMeta(BaseModel):
    """Pagination block returned with paged lists."""

    current_page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=0)
    total_count: int = Field(0, ge=0)
    total_pages: int = Field(0, ge=0)

    def to_entity(self) -> Pagination:
        return Pagination(
            current_page=self.current_page,
            page_size=self.page_size,
            total_count=self.total_count,
        )
