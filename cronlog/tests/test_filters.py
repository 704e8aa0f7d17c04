"""
Filter clause tests.

Covers clause rendering, AND composition, and in-memory matching.
"""

from datetime import datetime, timedelta, timezone

from cronlog.filters import ApplicationEquals, CreatedFrom, CreatedUntil, ResultFilter
from cronlog.models import OperationResult

T0 = datetime(2025, 12, 1, 0, 0, 1, tzinfo=timezone.utc)


def record(application="app", created=T0):
    return OperationResult(application=application, success=True, id="x", created=created)


class TestBuild:

    def test_empty_filter(self):
        f = ResultFilter.build()

        assert not f
        assert f.where_clause() == ("", ())
        assert f.matches(record())

    def test_empty_application_is_ignored(self):
        assert ResultFilter.build(application="").clauses == ()
        assert ResultFilter.build(application=None).clauses == ()

    def test_only_present_clauses_are_kept(self):
        f = ResultFilter.build(until=T0, application="backup")

        assert f.clauses == (CreatedUntil(T0), ApplicationEquals("backup"))


class TestWhereClause:

    def test_single_clause(self):
        sql, params = ResultFilter.build(application="backup").where_clause()

        assert sql == "WHERE application = ?"
        assert params == ("backup",)

    def test_all_clauses_joined_with_and(self):
        until = T0 + timedelta(days=1)
        sql, params = ResultFilter.build(T0, until, "backup").where_clause()

        assert sql == "WHERE created >= ? AND created <= ? AND application = ?"
        assert params == (
            "2025-12-01T00:00:01.000000+00:00",
            "2025-12-02T00:00:01.000000+00:00",
            "backup",
        )

    def test_values_are_never_inlined(self):
        sql, params = ResultFilter.build(application="x' OR '1'='1").where_clause()

        assert "OR" not in sql
        assert params == ("x' OR '1'='1",)

    def test_bounds_serialized_as_utc(self):
        cet = timezone(timedelta(hours=1))
        local = datetime(2025, 12, 1, 1, 0, 1, tzinfo=cet)

        _, params = CreatedFrom(local).sql()
        assert params == ("2025-12-01T00:00:01.000000+00:00",)


class TestMatches:

    def test_bounds_inclusive(self):
        assert CreatedFrom(T0).matches(record(created=T0))
        assert CreatedUntil(T0).matches(record(created=T0))
        assert not CreatedFrom(T0).matches(record(created=T0 - timedelta(microseconds=1)))
        assert not CreatedUntil(T0).matches(record(created=T0 + timedelta(microseconds=1)))

    def test_and_semantics(self):
        f = ResultFilter.build(T0, T0 + timedelta(hours=1), "backup")

        assert f.matches(record("backup", T0 + timedelta(minutes=30)))
        assert not f.matches(record("other", T0 + timedelta(minutes=30)))
        assert not f.matches(record("backup", T0 + timedelta(hours=2)))

    def test_unstored_record_never_matches_bounds(self):
        assert not CreatedFrom(T0).matches(record(created=None))
