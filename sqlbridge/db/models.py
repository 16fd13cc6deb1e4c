"""Descriptors exchanged between callers and adapters."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from sqlbridge.db.values import Value


def _normalize_token(value: str) -> str:
    return re.sub(r"[\s_\-]", "", value).lower()


class SortDirection(str, Enum):
    """Sort direction for a column."""
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def _missing_(cls, value: object) -> Optional["SortDirection"]:
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in ("ascending", "asc"):
                return cls.ASC
            if normalized in ("descending", "desc"):
                return cls.DESC
        return None


class FilterOperator(str, Enum):
    """Portable filter operators."""
    EQUALS = "equals"
    NOT_EQUALS = "notequals"
    CONTAINS = "contains"
    STARTS_WITH = "startswith"
    ENDS_WITH = "endswith"
    GREATER_THAN = "greaterthan"
    LESS_THAN = "lessthan"
    IS_NULL = "isnull"
    IS_NOT_NULL = "isnotnull"
    RAW = "raw"

    @classmethod
    def _missing_(cls, value: object) -> Optional["FilterOperator"]:
        # Accept not_equals, notEquals, starts-with ...
        if isinstance(value, str):
            normalized = _normalize_token(value)
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @property
    def takes_operand(self) -> bool:
        return self not in (FilterOperator.IS_NULL, FilterOperator.IS_NOT_NULL)


class ColumnChangeAction(str, Enum):
    """Kinds of column change accepted by alter_table."""
    ADD = "add"
    MODIFY = "modify"
    DROP = "drop"
    RENAME = "rename"


@dataclass
class SchemaInfo:
    name: str


@dataclass
class TableInfo:
    schema: str
    name: str
    table_type: str


@dataclass
class ColumnInfo:
    """Column metadata read from the catalog; never cached."""
    name: str
    data_type: str
    is_nullable: bool
    is_primary_key: bool
    default_value: Optional[str] = None


@dataclass
class IndexInfo:
    name: str
    columns: List[str]
    is_unique: bool
    is_primary: bool


@dataclass
class SortColumn:
    column: str
    direction: SortDirection = SortDirection.ASC

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SortColumn":
        return cls(column=data["column"], direction=SortDirection(data.get("direction", "asc")))


@dataclass
class FilterCondition:
    column: str
    operator: FilterOperator
    value: str = ""

    def __post_init__(self) -> None:
        self.operator = FilterOperator(self.operator)
        self.value = "" if self.value is None else str(self.value)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FilterCondition":
        return cls(column=data["column"], operator=data["operator"], value=data.get("value", ""))


@dataclass
class FetchDataParams:
    """A page request against one table."""
    schema: str
    table: str
    limit: int = 100
    offset: int = 0
    sort: Optional[List[SortColumn]] = None
    filters: Optional[List[FilterCondition]] = None

    def __post_init__(self) -> None:
        if self.limit < 0 or self.offset < 0:
            raise ValueError("limit and offset must be non-negative")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FetchDataParams":
        return cls(
            schema=data["schema"],
            table=data["table"],
            limit=int(data.get("limit", 100)),
            offset=int(data.get("offset", 0)),
            sort=[SortColumn.from_dict(s) for s in data["sort"]] if data.get("sort") else None,
            filters=[FilterCondition.from_dict(f) for f in data["filters"]] if data.get("filters") else None,
        )


@dataclass
class RowUpdate:
    schema: str
    table: str
    primary_key_column: str
    primary_key_value: Any
    updates: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RowUpdate":
        return cls(
            schema=data["schema"],
            table=data["table"],
            primary_key_column=data["primary_key_column"],
            primary_key_value=data["primary_key_value"],
            updates=dict(data.get("updates", {})),
        )


@dataclass
class RowInsert:
    schema: str
    table: str
    values: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RowInsert":
        return cls(schema=data["schema"], table=data["table"], values=dict(data.get("values", {})))


@dataclass
class RowDelete:
    schema: str
    table: str
    primary_key_column: str
    primary_key_value: Any

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RowDelete":
        return cls(
            schema=data["schema"],
            table=data["table"],
            primary_key_column=data["primary_key_column"],
            primary_key_value=data["primary_key_value"],
        )


@dataclass
class ColumnChange:
    action: ColumnChangeAction
    column: str
    new_name: Optional[str] = None
    data_type: Optional[str] = None
    is_nullable: Optional[bool] = None
    default_value: Optional[str] = None

    def __post_init__(self) -> None:
        self.action = ColumnChangeAction(self.action)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ColumnChange":
        return cls(
            action=data["action"],
            column=data["column"],
            new_name=data.get("new_name"),
            data_type=data.get("data_type"),
            is_nullable=data.get("is_nullable"),
            default_value=data.get("default_value"),
        )


@dataclass
class AlterTableParams:
    schema: str
    table: str
    changes: List[ColumnChange] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AlterTableParams":
        return cls(
            schema=data["schema"],
            table=data["table"],
            changes=[ColumnChange.from_dict(c) for c in data.get("changes", [])],
        )


@dataclass
class TableData:
    """One page of a table plus the size of the filtered set."""
    columns: List[ColumnInfo]
    rows: List[List[Value]]
    total_count: int


class QueryResult:
    """Container for query results with metadata."""

    def __init__(
        self,
        columns: Optional[List[str]] = None,
        rows: Optional[List[List[Value]]] = None,
        rows_affected: Optional[int] = None,
        execution_time_ms: Optional[float] = None,
    ) -> None:
        """Initialize query result.

        Args:
            columns: Column names, taken from the first row's metadata.
            rows: Result rows as portable values.
            rows_affected: Rows returned (reads) or modified (writes).
            execution_time_ms: Wall-clock execution time in milliseconds.
        """
        self.columns = columns or []
        self.rows = rows or []
        self.rows_affected = rows_affected or 0
        self.execution_time_ms = execution_time_ms or 0.0

    @property
    def is_empty(self) -> bool:
        """Check if result is empty."""
        return not self.rows

    @property
    def row_count(self) -> int:
        """Get number of rows in result."""
        return len(self.rows)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to a JSON-friendly dictionary."""
        return {
            'columns': self.columns,
            'rows': [[value.to_json() for value in row] for row in self.rows],
            'rows_affected': self.rows_affected,
            'execution_time_ms': self.execution_time_ms,
            'row_count': self.row_count,
            'is_empty': self.is_empty,
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Tabular view of the result for export collaborators."""
        data = [[value.to_python() for value in row] for row in self.rows]
        return pd.DataFrame(data, columns=self.columns, dtype=object)

    def __repr__(self) -> str:
        return (
            f"QueryResult(columns={self.columns!r}, row_count={self.row_count}, "
            f"rows_affected={self.rows_affected}, execution_time_ms={self.execution_time_ms:.2f})"
        )
