"""
Filter clauses for paged result queries.

Each clause is a small typed value that renders one SQL condition with
bound parameters. A ResultFilter composes the clauses that are present
with logical AND. The count pass and the fetch pass of a paged query
render the same ResultFilter, so both always see the same predicate.

No string values are ever interpolated into SQL; only the fixed
condition text of each clause is.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Tuple, Union

from .models import OperationResult
from .utils import as_utc, serialize_timestamp


@dataclass(frozen=True)
class CreatedFrom:
    """Inclusive lower bound on created."""

    bound: datetime

    def sql(self) -> Tuple[str, Tuple[Any, ...]]:
        return "created >= ?", (serialize_timestamp(self.bound),)

    def matches(self, record: OperationResult) -> bool:
        return record.created is not None and record.created >= as_utc(self.bound)


@dataclass(frozen=True)
class CreatedUntil:
    """Inclusive upper bound on created."""

    bound: datetime

    def sql(self) -> Tuple[str, Tuple[Any, ...]]:
        return "created <= ?", (serialize_timestamp(self.bound),)

    def matches(self, record: OperationResult) -> bool:
        return record.created is not None and record.created <= as_utc(self.bound)


@dataclass(frozen=True)
class ApplicationEquals:
    """Exact match on application."""

    name: str

    def sql(self) -> Tuple[str, Tuple[Any, ...]]:
        return "application = ?", (self.name,)

    def matches(self, record: OperationResult) -> bool:
        return record.application == self.name


Clause = Union[CreatedFrom, CreatedUntil, ApplicationEquals]


@dataclass(frozen=True)
class ResultFilter:
    """
    Conjunction of optional filter clauses.

    An empty filter matches every record.
    """

    clauses: Tuple[Clause, ...] = ()

    @classmethod
    def build(
        cls,
        from_: Optional[datetime] = None,
        until: Optional[datetime] = None,
        application: Optional[str] = None,
    ) -> "ResultFilter":
        """
        Build a filter from optional bounds and an application name.

        Absent bounds and an empty application impose no constraint.

        Args:
            from_: Inclusive lower bound on created
            until: Inclusive upper bound on created
            application: Exact application name ("" or None = any)

        Returns:
            ResultFilter holding only the clauses that were supplied
        """
        clauses = []
        if from_ is not None:
            clauses.append(CreatedFrom(from_))
        if until is not None:
            clauses.append(CreatedUntil(until))
        if application:
            clauses.append(ApplicationEquals(application))
        return cls(tuple(clauses))

    def where_clause(self) -> Tuple[str, Tuple[Any, ...]]:
        """
        Render the filter as a WHERE clause.

        Returns:
            (sql, params); ("", ()) when the filter is empty
        """
        if not self.clauses:
            return "", ()

        conditions = []
        params: Tuple[Any, ...] = ()
        for clause in self.clauses:
            condition, clause_params = clause.sql()
            conditions.append(condition)
            params += clause_params
        return "WHERE " + " AND ".join(conditions), params

    def matches(self, record: OperationResult) -> bool:
        """
        Evaluate the filter against a record in memory.

        In-memory counterpart of where_clause(). The store never calls it;
        tests use it as the reference the SQL results are checked against.
        """
        return all(clause.matches(record) for clause in self.clauses)

    def __bool__(self) -> bool:
        return bool(self.clauses)
