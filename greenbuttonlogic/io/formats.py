from __future__ import annotations

import math
import re
from typing import Optional, Union

import numpy as np
import pyarrow as pa
import pyarrow.parquet as pq

from .. import canon, validate
from ..config import ParseConfig, default_config
from ..core.types import TimeSeries
from ..exceptions import EncodingError

_MEASUREMENT_STRIP = re.compile(r"[^A-Za-z0-9_]")

ARROW_SCHEMA = pa.schema(
    [
        pa.field("title", pa.string()),
        pa.field("cost", pa.float32()),
        pa.field("quality", pa.string()),
        pa.field("value", pa.float32()),
        pa.field("tou", pa.int32()),
        pa.field("time_period_start_unix_ms", pa.timestamp("ms")),
        pa.field("time_period_duration_seconds", pa.int32()),
        pa.field("accumulation_behaviour", pa.string()),
        pa.field("commodity", pa.string()),
        pa.field("currency", pa.string()),
        pa.field("data_qualifier", pa.string()),
        pa.field("flow_direction", pa.string()),
        pa.field("kind", pa.string()),
        pa.field("phase", pa.string()),
        pa.field("uom", pa.string()),
    ],
    metadata={canon.SCHEMA_VERSION_KEY: canon.SCHEMA_VERSION},
)


def has_cost(ts: TimeSeries) -> bool:
    """True if any row has a finite, non-zero cost."""
    cost = ts["cost"].to_numpy(dtype="float64")
    return bool((np.isfinite(cost) & (cost != 0)).any())


def to_csv(ts: TimeSeries) -> str:
    """Header of the TimeSeries columns, then one line per row."""
    validate.assert_timeseries(ts)
    return ts.to_csv(index=False, lineterminator="\n", na_rep="NaN")


def measurement_name(title: str) -> str:
    return _MEASUREMENT_STRIP.sub("", title.replace(" ", "_"))


def _escape_tag(value: str) -> str:
    return value.replace(",", "\\,").replace("=", "\\=").replace(" ", "\\ ")


def _quote_field(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def to_line_protocol(ts: TimeSeries, database: Optional[str] = None) -> str:
    """
    InfluxDB line protocol, one line per row.

    ``cost`` is written for every row when any row in the table has a cost,
    so all points share one field set. Line protocol has no NaN; a missing
    cost is written as 0.0.
    """
    validate.assert_timeseries(ts)
    database = database or default_config().database_tag
    with_cost = has_cost(ts)
    tag_columns = [(tag, ts[col].tolist()) for tag, col in canon.LINE_PROTOCOL_TAGS]

    lines: list[str] = []
    rows = zip(
        ts["title"].tolist(),
        ts["quality"].tolist(),
        ts["value"].tolist(),
        ts["tou"].tolist(),
        ts["time_period_duration_seconds"].tolist(),
        ts["cost"].tolist(),
        ts["time_period_start_unix_ms"].tolist(),
    )
    for i, (title, quality, value, tou, duration, cost, start_ms) in enumerate(rows):
        tags = [f"db={_escape_tag(database)}"]
        tags += [f"{tag}={_escape_tag(str(values[i]))}" for tag, values in tag_columns]

        fields = [
            f"quality={_quote_field(str(quality))}",
            f"value={float(value)!r}",
            f"tou={int(tou)}",
            f"time_period_duration_seconds={int(duration)}",
        ]
        if with_cost:
            cost = float(cost) if math.isfinite(cost) else 0.0
            fields.append(f"cost={cost!r}")

        time_ns = int(start_ms) * 1_000_000
        lines.append(f"{measurement_name(str(title))},{','.join(tags)} {','.join(fields)} {time_ns}\n")
    return "".join(lines)


def to_arrow(ts: TimeSeries) -> pa.Table:
    validate.assert_timeseries(ts)
    arrays = []
    for field in ARROW_SCHEMA:
        col = ts[field.name]
        if pa.types.is_string(field.type):
            arrays.append(pa.array(col.astype(str).tolist(), type=field.type))
        elif pa.types.is_timestamp(field.type):
            arrays.append(pa.array(col.to_numpy(dtype="int64")).cast(field.type))
        else:
            arrays.append(pa.array(col.to_numpy(dtype=field.type.to_pandas_dtype()), type=field.type))
    return pa.Table.from_arrays(arrays, schema=ARROW_SCHEMA)


def to_parquet(ts: TimeSeries, compression: Optional[str] = None) -> bytes:
    compression = compression or default_config().parquet_compression
    sink = pa.BufferOutputStream()
    pq.write_table(to_arrow(ts), sink, compression=compression)
    return sink.getvalue().to_pybytes()


def encode(
    ts: TimeSeries, filetype: str, config: Optional[ParseConfig] = None
) -> Union[str, bytes]:
    config = config or default_config()
    if filetype == "csv":
        return to_csv(ts)
    if filetype == "influxdb":
        return to_line_protocol(ts, database=config.database_tag)
    if filetype == "parquet":
        return to_parquet(ts, compression=config.parquet_compression)
    raise EncodingError(f"Unknown filetype {filetype!r}; expected one of {canon.FILETYPES}")
