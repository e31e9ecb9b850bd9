"""Common Pydantic schemas used across the API.

This module provides shared schemas for:
- Error responses (consistent error format)
- Filtering and pagination of list endpoints
- Health checks
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

# Generic type for list responses
T = TypeVar("T")


# =============================================================================
# Base Configuration
# =============================================================================


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,  # Allow ORM model conversion
        populate_by_name=True,  # Allow both alias and field name
        str_strip_whitespace=True,  # Strip whitespace from strings
    )


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorDetail(BaseModel):
    """Details of an error response.

    Attributes:
        code: Machine-readable error code (e.g., "CAR_NOT_FOUND")
        message: Human-readable error description
        request_id: Correlation ID for tracing (optional)
        details: Additional error context (optional)
    """

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    request_id: str | None = Field(
        None, description="Request correlation ID for tracing"
    )
    details: dict[str, Any] | None = Field(
        None, description="Additional error context"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "code": "CAR_NOT_FOUND",
                "message": "Car with ID 42 not found",
                "request_id": "abc-123-def-456",
            }
        }
    )


class ErrorResponse(BaseModel):
    """Standard error response wrapper.

    All API errors return this format for consistency.
    """

    error: ErrorDetail


# =============================================================================
# Listing Schemas
# =============================================================================


class SortOrder(str, Enum):
    """Sort direction for list endpoints."""

    ASC = "ASC"
    DESC = "DESC"


class Pagination(BaseModel):
    """Paging and sorting of a list query.

    Attributes:
        page: Page number (1-indexed)
        per_page: Number of items per page
        sort_field: Column to sort by
        sort_order: Sort direction
    """

    page: int = Field(1, ge=1, description="Page number (1-indexed)")
    per_page: int = Field(1000, ge=1, description="Items per page")
    sort_field: str = Field("id", description="Column to sort by")
    sort_order: SortOrder = Field(SortOrder.ASC, description="Sort direction")

    @property
    def offset(self) -> int:
        """Calculate the offset for database queries."""
        return (self.page - 1) * self.per_page

    @property
    def limit(self) -> int:
        """Get the limit for database queries."""
        return self.per_page


class ListFilter(BaseModel):
    """Filter of a list query.

    A substring ``term`` takes precedence over ``ids``. Without either the
    listing is unfiltered.

    Attributes:
        term: Substring matched against the entity's name (or username)
        ids: Explicit ids to restrict the listing to
    """

    term: str | None = Field(None, description="Substring to match")
    ids: list[int] = Field(default_factory=list, description="Explicit ids")


class ItemList(BaseModel, Generic[T]):
    """One page of items plus the total under the same filter.

    Attributes:
        data: Items for the current page
        total: Number of matching items across all pages
    """

    data: list[T] = Field(..., description="Items for the current page")
    total: int = Field(..., ge=0, description="Total matching items")


# =============================================================================
# Health Check Schemas
# =============================================================================


class HealthCheckResponse(BaseModel):
    """Health check endpoint response.

    Attributes:
        status: Overall health status
        checks: Individual service health checks
    """

    status: str = Field(..., pattern="^(ok|degraded|error)$")
    checks: dict[str, str] = Field(
        default_factory=dict, description="Individual service checks"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "ok",
                "checks": {
                    "database": "ok",
                    "redis": "ok",
                },
            }
        }
    )
