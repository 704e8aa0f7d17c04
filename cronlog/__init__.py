"""
Cronlog - durable history of scheduled command executions.

Cron jobs pipe their output into `cronlog capture`, which stores the
output and exit status as an immutable OperationResult. Operators
browse the history through a read-only, paginated HTTP API.

Cronlog records what happened. It never runs, retries, or schedules jobs.
"""

__version__ = "1.0.0"

from .errors import (  # noqa: E402
    CronlogError,
    InvalidArgumentError,
    NotFoundError,
    StorageError,
)
from .models import OperationResult, PagedResults  # noqa: E402
from .storage import ResultStore  # noqa: E402

__all__ = [
    "__version__",
    "CronlogError",
    "InvalidArgumentError",
    "NotFoundError",
    "StorageError",
    "OperationResult",
    "PagedResults",
    "ResultStore",
]
