"""
Response models for the monitoring API.

All responses are read-only views of stored operation results.
"""

from datetime import datetime
from typing import List
from pydantic import BaseModel, ConfigDict

from cronlog.models import OperationResult


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    model_config = ConfigDict(extra="forbid")

    status: str = "ok"
    version: str


class OperationResultView(BaseModel):
    """
    One stored operation result.

    Includes the display colour configured for its application.
    """

    model_config = ConfigDict(extra="forbid")

    # Identity
    id: str
    application: str

    # Outcome
    success: bool
    output: str

    # Timestamps
    created: datetime

    # Presentation
    color: str = ""

    @classmethod
    def from_result(cls, result: OperationResult, color: str = "") -> "OperationResultView":
        return cls(
            id=result.id,
            application=result.application,
            success=result.success,
            output=result.output,
            created=result.created,
            color=color,
        )


class ResultPageResponse(BaseModel):
    """
    One page of results plus pagination state.

    total_count counts every result matching the filters.
    next_skip is the skip value that requests the following page.
    Filters are echoed back as submitted (dates as YYYY-MM-DD).
    """

    model_config = ConfigDict(extra="forbid")

    total_count: int
    items: List[OperationResultView]

    # Pagination
    page_size: int
    skip: int
    next_skip: int
    total_pages: int
    current_page: int

    # Filters
    from_date: str = ""
    until_date: str = ""
    application: str = ""


class ApplicationView(BaseModel):
    """An application that has stored results."""

    model_config = ConfigDict(extra="forbid")

    name: str
    color: str = ""


class ApplicationListResponse(BaseModel):
    """Distinct applications, sorted by name."""

    model_config = ConfigDict(extra="forbid")

    applications: List[ApplicationView]
    total_count: int
