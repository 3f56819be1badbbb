from __future__ import annotations
import pandas as pd

from . import canon, exceptions
from .core.columnar import ColumnarTable
from .stores import Entries, IntervalReadings, ReadingTypes


def assert_timeseries(df: pd.DataFrame) -> None:
    if list(df.columns) != canon.TIMESERIES_COLS:
        raise exceptions.ColumnarError(
            f"TimeSeries columns must be {canon.TIMESERIES_COLS}, got {list(df.columns)}."
        )
    for col, dtype in canon.TIMESERIES_DTYPES.items():
        if str(df[col].dtype) != dtype:
            raise exceptions.ColumnarError(
                f"Column '{col}' must be {dtype}, got {df[col].dtype}."
            )
    if not isinstance(df.index, pd.RangeIndex):
        raise exceptions.ColumnarError("TimeSeries index must be a RangeIndex.")


def assert_balanced(table: ColumnarTable) -> None:
    """Every column of a struct-of-arrays table has the same length."""
    if not table.is_balanced():
        lengths = {name: len(table.column(name)) for name in table.column_names()}
        raise exceptions.ColumnarError(
            f"{type(table).__name__} is unbalanced: {lengths}"
        )


def assert_back_references(
    entries: Entries, *tables: IntervalReadings | ReadingTypes
) -> None:
    """entry_index values must point at existing Entries rows."""
    n = len(entries)
    for table in tables:
        bad = [i for i in table.entry_index if not 0 <= i < n]
        if bad:
            raise exceptions.LinkageError(
                f"{type(table).__name__} references missing entries {bad[:5]} (Entries has {n} rows)."
            )
