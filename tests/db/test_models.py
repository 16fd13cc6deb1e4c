"""Tests for request and result descriptors."""

import pytest

from sqlbridge.db.models import (
    AlterTableParams,
    ColumnChangeAction,
    FetchDataParams,
    FilterCondition,
    FilterOperator,
    QueryResult,
    SortColumn,
    SortDirection,
)
from sqlbridge.db.values import Value


class TestFilterCondition:
    @pytest.mark.parametrize("token", ["notEquals", "not_equals", "NOT-EQUALS", "notequals"])
    def test_operator_spellings(self, token):
        assert FilterCondition("a", token, "1").operator is FilterOperator.NOT_EQUALS

    def test_unknown_operator(self):
        with pytest.raises(ValueError):
            FilterCondition("a", "between", "1")

    def test_value_is_stringified(self):
        assert FilterCondition("a", "equals", 5).value == "5"
        assert FilterCondition("a", "isnull", None).value == ""

    def test_operand_flag(self):
        assert FilterOperator.CONTAINS.takes_operand
        assert not FilterOperator.IS_NOT_NULL.takes_operand


class TestFetchDataParams:
    def test_defaults(self):
        params = FetchDataParams(schema="public", table="users")
        assert params.limit == 100
        assert params.offset == 0
        assert params.sort is None and params.filters is None

    @pytest.mark.parametrize("limit, offset", [(-1, 0), (10, -5)])
    def test_negative_paging_rejected(self, limit, offset):
        with pytest.raises(ValueError):
            FetchDataParams(schema="public", table="users", limit=limit, offset=offset)

    def test_from_dict(self):
        params = FetchDataParams.from_dict({
            "schema": "public",
            "table": "users",
            "limit": "25",
            "sort": [{"column": "name", "direction": "descending"}],
            "filters": [{"column": "active", "operator": "isNotNull"}],
        })
        assert params.limit == 25
        assert params.sort == [SortColumn("name", SortDirection.DESC)]
        assert params.filters[0].operator is FilterOperator.IS_NOT_NULL


def test_alter_table_from_dict():
    params = AlterTableParams.from_dict({
        "schema": "public",
        "table": "users",
        "changes": [{"action": "rename", "column": "name", "new_name": "full_name"}],
    })
    assert params.changes[0].action is ColumnChangeAction.RENAME
    assert params.changes[0].new_name == "full_name"


class TestQueryResult:
    def _result(self):
        return QueryResult(
            columns=["id", "score"],
            rows=[
                [Value.integer(1), Value.float_(float("inf"))],
                [Value.integer(2), Value.null()],
            ],
            rows_affected=2,
            execution_time_ms=1.5,
        )

    def test_defaults(self):
        result = QueryResult()
        assert result.columns == []
        assert result.is_empty
        assert result.rows_affected == 0
        assert result.execution_time_ms == 0.0

    def test_to_dict(self):
        data = self._result().to_dict()
        assert data["rows"] == [[1, None], [2, None]]
        assert data["row_count"] == 2
        assert data["is_empty"] is False

    def test_to_dataframe(self):
        frame = self._result().to_dataframe()
        assert list(frame.columns) == ["id", "score"]
        assert frame.shape == (2, 2)
        assert frame.iloc[0]["id"] == 1
