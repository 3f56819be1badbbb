from __future__ import annotations
from typing import Any, Iterable

import pandas as pd

from .. import canon
from ..exceptions import ColumnarError, require


class TimeSeries(pd.DataFrame):
    """
    Denormalized interval readings, one row per reading.

    Expected:
      - default RangeIndex (row order is meaningful)
      - Columns, in order: canon.TIMESERIES_COLS with canon.TIMESERIES_DTYPES
    """

    @property
    def _constructor(self):
        return TimeSeries

    @classmethod
    def from_columns(cls, **columns: Iterable[Any]) -> "TimeSeries":
        missing = [c for c in canon.TIMESERIES_COLS if c not in columns]
        extra = [c for c in columns if c not in canon.TIMESERIES_DTYPES]
        require(
            not missing and not extra,
            f"TimeSeries columns mismatch; missing={missing}, unexpected={extra}",
            ColumnarError,
        )
        data = {
            c: pd.Series(list(columns[c]), dtype=canon.TIMESERIES_DTYPES[c])
            for c in canon.TIMESERIES_COLS
        }
        lengths = {len(s) for s in data.values()}
        require(len(lengths) <= 1, "TimeSeries columns have unequal lengths.", ColumnarError)
        return cls(pd.DataFrame(data))

    @classmethod
    def empty_frame(cls) -> "TimeSeries":
        return cls.from_columns(**{c: [] for c in canon.TIMESERIES_COLS})

    # Convenience typed accessors
    @property
    def title(self) -> pd.Series:
        return self["title"]

    @property
    def cost(self) -> pd.Series:
        return self["cost"]

    @property
    def value(self) -> pd.Series:
        return self["value"]

    @property
    def time_period_start_unix_ms(self) -> pd.Series:
        return self["time_period_start_unix_ms"]
