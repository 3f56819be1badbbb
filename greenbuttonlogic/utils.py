from __future__ import annotations

from typing import Callable, TypeVar

import pandas as pd
from lxml import etree

from .exceptions import SchemaError

T = TypeVar("T")


def localname(node: etree._Element) -> str:
    """Tag name without its namespace; '' for comments and processing instructions."""
    if not isinstance(node.tag, str):
        return ""
    return etree.QName(node).localname


def element_children(node: etree._Element) -> list[etree._Element]:
    return [child for child in node if isinstance(child.tag, str)]


def all_text(node: etree._Element) -> str:
    """Concatenate every descendant text node, each stripped."""
    return "".join(t.strip() for t in node.itertext())


def parse_text_of(node: etree._Element, parse: Callable[[str], T]) -> T:
    """
    Parse the text content of an element.

    Empty text yields the zero value of the target type; some providers emit
    empty cost tags.
    """
    text = all_text(node)
    if not text:
        return parse("0")
    try:
        return parse(text)
    except ValueError as err:
        raise SchemaError(
            f"Malformed {localname(node)!r} value {text!r}: {err}"
        ) from err


def parse_hex(text: str) -> int:
    return int(text, 16)


def rfc3339_to_unix_ms(text: str) -> int:
    """RFC 3339 timestamp -> milliseconds since the epoch. Naive input is taken as UTC."""
    try:
        ts = pd.Timestamp(text.strip())
    except ValueError as err:
        raise SchemaError(f"Malformed timestamp {text!r}: {err}") from err
    if ts is pd.NaT:
        raise SchemaError(f"Malformed timestamp {text!r}")
    if ts.tz is None:
        ts = ts.tz_localize("UTC")
    return int(ts.value // 1_000_000)
