"""
Cronlog Data Models - Immutable records of finished job executions.

These models represent WHAT HAPPENED when a scheduled command ran.

Rules:
------
- A record is never updated after creation
- id and created are assigned by the store, never by the caller
- Timestamps are timezone-aware UTC
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class OperationResult:
    """
    Immutable record of one finished command execution.

    Callers construct it with application, success and output only.
    The store returns a copy with id and created populated.
    """

    application: str
    """Name of the job or source that produced this result."""

    success: bool
    """Whether the originating command exited with status zero."""

    output: str = ""
    """Captured combined output. May be empty."""

    id: Optional[str] = None
    """Opaque unique identifier. Assigned by the store on creation."""

    created: Optional[datetime] = None
    """Insertion timestamp (UTC). Assigned by the store on creation."""


@dataclass(frozen=True)
class PagedResults:
    """
    A bounded slice of matching results plus the size of the filtered set.

    total_count ignores page_size and skip; items is the requested slice.
    """

    total_count: int
    items: List[OperationResult] = field(default_factory=list)
