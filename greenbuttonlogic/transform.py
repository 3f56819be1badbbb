from __future__ import annotations
import numpy as np
import pandas as pd
from typing import Optional

from .core.types import TimeSeries


def extend(*series: TimeSeries) -> TimeSeries:
    """
    Ordered concatenation of every column (append, never interleave).

    Returns a new frame. Accumulating into one shared frame from several
    threads must be serialized by the caller.
    """
    frames = [s for s in series if s is not None and len(s)]
    if not frames:
        return TimeSeries.empty_frame()
    out = pd.concat(frames, axis=0, ignore_index=True)
    return TimeSeries(out)


def sort_permutation(ts: TimeSeries) -> np.ndarray:
    """Stable row order by (title, time_period_start_unix_ms)."""
    title_codes, _ = pd.factorize(ts["title"], sort=True)
    # lexsort sorts by the last key first and is stable
    return np.lexsort((ts["time_period_start_unix_ms"].to_numpy(), title_codes))


def sort(ts: TimeSeries) -> TimeSeries:
    """Apply one shared permutation to every column."""
    order = sort_permutation(ts)
    return TimeSeries(ts.take(order).reset_index(drop=True))


def take_first_title_chunk(ts: TimeSeries) -> tuple[Optional[TimeSeries], TimeSeries]:
    """
    Split off the maximal prefix sharing the first row's title.

    Returns (chunk, rest); chunk is None once ``ts`` is empty.
    """
    if ts.empty:
        return None, ts
    titles = ts["title"].to_numpy()
    differs = np.flatnonzero(titles != titles[0])
    split = int(differs[0]) if len(differs) else len(titles)
    chunk = TimeSeries(ts.iloc[:split].reset_index(drop=True))
    rest = TimeSeries(ts.iloc[split:].reset_index(drop=True))
    return chunk, rest


def chunk_sorted(ts: TimeSeries) -> list[TimeSeries]:
    """
    Repeatedly take the first-title prefix.

    The input must already be grouped by title (e.g. via ``sort``); this is
    not re-checked, and ungrouped input yields one chunk per run of equal
    titles rather than one chunk per title.
    """
    chunks: list[TimeSeries] = []
    chunk, rest = take_first_title_chunk(ts)
    while chunk is not None:
        chunks.append(chunk)
        chunk, rest = take_first_title_chunk(rest)
    return chunks


def sort_and_chunk(ts: TimeSeries) -> list[TimeSeries]:
    """One TimeSeries per title, each in time order."""
    return chunk_sorted(sort(ts))
