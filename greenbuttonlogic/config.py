from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass
class ParseConfig:
    # ESPI cost is in hundred-thousandths of the currency unit
    cost_divisor: float = 100000.0

    # Providers known to publish cost 100x too small; matched against the
    # first entry's href.
    cost_fix_provider_tokens: Tuple[str, ...] = ("enova",)
    cost_fix_factor: float = 100.0

    # Shift interval starts by the feed's DST and timezone offsets
    apply_local_time: bool = True

    # IntervalReading children accepted but not stored
    ignored_reading_tags: Tuple[str, ...] = ("cpp", "consumptionTier")

    # Output
    database_tag: str = "greenbutton"
    parquet_compression: str = "snappy"


def default_config() -> ParseConfig:
    return ParseConfig()
