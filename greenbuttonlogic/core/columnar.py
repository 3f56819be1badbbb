from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, Iterator, List, Optional

import pandas as pd

from ..exceptions import ColumnarError, MissingFieldError, require


class _Required:
    def __repr__(self) -> str:
        return "REQUIRED"


REQUIRED: Any = _Required()


@dataclass(frozen=True)
class Column:
    """
    One field of a struct-of-arrays table.

    Default policy applied when a row is finalized without this field:
      - ``default`` set: the literal value
      - ``default_factory`` set: a fresh zero value (e.g. ``str`` -> "")
      - neither: the field is required, MissingFieldError
    """

    name: str
    default: Any = REQUIRED
    default_factory: Optional[Callable[[], Any]] = None

    @property
    def required(self) -> bool:
        return self.default is REQUIRED and self.default_factory is None

    def fill(self, store: str) -> Any:
        if self.default_factory is not None:
            return self.default_factory()
        if self.default is REQUIRED:
            raise MissingFieldError(self.name, store)
        return self.default


class ColumnarTable:
    """
    Append-only table stored as one list per column.

    Rows are only ever added through ``start_push()`` / ``finalize_push()``,
    so every column has the same length at every observable state.
    """

    COLUMNS: ClassVar[tuple[Column, ...]] = ()

    def __init__(self) -> None:
        self._data: Dict[str, List[Any]] = {c.name: [] for c in self.COLUMNS}

    @classmethod
    def from_columns(cls, **columns: List[Any]):
        """Build a table from whole columns; every column must be given and equal length."""
        table = cls()
        names = set(table._data)
        require(
            set(columns) == names,
            f"{cls.__name__} expects columns {sorted(names)}, got {sorted(columns)}",
            ColumnarError,
        )
        lengths = {len(v) for v in columns.values()}
        require(
            len(lengths) <= 1,
            f"{cls.__name__} columns have unequal lengths: "
            + ", ".join(f"{k}={len(v)}" for k, v in columns.items()),
            ColumnarError,
        )
        for name, values in columns.items():
            table._data[name] = list(values)
        return table

    def __len__(self) -> int:
        if not self.COLUMNS:
            return 0
        return len(self._data[self.COLUMNS[0].name])

    def __getattr__(self, name: str) -> List[Any]:
        data = self.__dict__.get("_data")
        if data is not None and name in data:
            return data[name]
        raise AttributeError(f"{type(self).__name__!s} has no column {name!r}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(rows={len(self)})"

    @classmethod
    def column_names(cls) -> list[str]:
        return [c.name for c in cls.COLUMNS]

    def column(self, name: str) -> List[Any]:
        try:
            return self._data[name]
        except KeyError:
            raise ColumnarError(f"{type(self).__name__} has no column {name!r}") from None

    def row(self, index: int) -> dict[str, Any]:
        return {name: values[index] for name, values in self._data.items()}

    def rows(self) -> Iterator[dict[str, Any]]:
        for i in range(len(self)):
            yield self.row(i)

    def is_balanced(self) -> bool:
        return len({len(v) for v in self._data.values()}) <= 1

    def start_push(self) -> "RowBuilder":
        return RowBuilder(self)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({name: list(values) for name, values in self._data.items()})

    def _commit(self, row: dict[str, Any]) -> None:
        for name, value in row.items():
            self._data[name].append(value)


class RowBuilder:
    """
    Stages one row for a ColumnarTable.

    Nothing reaches the table until ``finalize_push()``; a builder that is
    abandoned (e.g. because parsing raised) leaves the table untouched.
    """

    def __init__(self, table: ColumnarTable):
        self._table = table
        self._target_len = len(table) + 1
        self._values: Dict[str, Any] = {}
        self._done = False

    @property
    def target_len(self) -> int:
        return self._target_len

    def set(self, name: str, value: Any) -> None:
        if name not in self._table._data:
            raise ColumnarError(f"{type(self._table).__name__} has no column {name!r}")
        self._values[name] = value

    __setitem__ = set

    def update(self, **values: Any) -> None:
        for name, value in values.items():
            self.set(name, value)

    def finalize_push(self):
        require(not self._done, "Row was already finalized.", ColumnarError)
        table = self._table
        store = type(table).__name__
        require(
            len(table) + 1 == self._target_len,
            f"{store} changed while a row was being built.",
            ColumnarError,
        )

        row: dict[str, Any] = {}
        for column in table.COLUMNS:
            if column.name in self._values:
                row[column.name] = self._values[column.name]
            else:
                row[column.name] = column.fill(store)

        table._commit(row)
        self._done = True
        return table
