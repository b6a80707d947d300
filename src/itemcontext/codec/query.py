"""
Query String Codec
==================
Parses and constructs form-encoded query strings for the item context codec.

Grammar:
- Pairs are `name=value` joined by `&`; segments without `=` are ignored
- Repeated names accumulate into an ordered list of values
- `_charset_` (or `_CHARSET_`) overrides the decode charset for every pair;
  it may appear at most once
- `packedargs` holds a nested query string with the same grammar

Usage:
    params = parse_query_string("a=1&a=2&packedargs=item-alias%3Dlogo")
    # {'a': ['1', '2'], 'packedargs': ['item-alias=logo']}

    construct_query_string({'a': ['1', '2']})
    # 'a=1&a=2'
"""
from __future__ import annotations

import codecs
import logging
from typing import Collection, Dict, Iterable, List, Mapping, Optional, Sequence
from urllib.parse import quote_plus, unquote_plus

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"
CHARSET_PARAMS = ("_charset_", "_CHARSET_")
PACKED_ARGS = "packedargs"


class QueryStringError(ValueError):
    """Raised when a query string cannot be decoded."""


def _split_pairs(qs: str) -> Dict[str, List[str]]:
    """Split into raw (still encoded) name -> values, preserving first-seen order."""
    raw: Dict[str, List[str]] = {}
    for segment in qs.split("&"):
        if "=" not in segment:
            continue
        name, value = segment.split("=", 1)
        name = name.strip()
        raw.setdefault(name, []).append(value.strip())
    return raw


def _charset_for(raw: Mapping[str, List[str]]) -> str:
    values = raw.get(CHARSET_PARAMS[0])
    if values is None:
        values = raw.get(CHARSET_PARAMS[1])
    if values is None:
        return DEFAULT_ENCODING
    if len(values) > 1:
        raise QueryStringError(f"Too many values of _charset_ found in the URL: {values}")

    charset = values[0]
    try:
        codecs.lookup(charset)
    except LookupError as e:
        raise QueryStringError(f"Unsupported _charset_ in the URL: {charset}") from e
    return charset


def decode(value: str, encoding: str = DEFAULT_ENCODING) -> str:
    """Form-decode a single name or value."""
    try:
        return unquote_plus(value, encoding=encoding, errors="strict")
    except UnicodeDecodeError as e:
        raise QueryStringError(
            f"Failure decoding string '{value}' using encoding '{encoding}': {e}"
        ) from e


def encode(value: str, encoding: str = DEFAULT_ENCODING) -> str:
    """Form-encode a single name or value."""
    return quote_plus(value, encoding=encoding)


def parse_query_string(qs: Optional[str]) -> Dict[str, List[str]]:
    """
    Parse a raw query string into decoded name -> values.

    Args:
        qs: Raw query string (without the leading `?`), may be None

    Returns:
        Ordered mapping of decoded names to decoded values

    Raises:
        QueryStringError: If _charset_ is repeated or unknown, or a value
            cannot be decoded with the selected charset
    """
    if not qs:
        return {}

    logger.debug("Parsing query string: %s", qs)
    raw = _split_pairs(qs)
    encoding = _charset_for(raw)

    result: Dict[str, List[str]] = {}
    for raw_name, raw_values in raw.items():
        name = decode(raw_name, encoding)
        values = [decode(v, encoding) for v in raw_values]
        result.setdefault(name, []).extend(values)
    return result


def construct_query_string(params: Mapping[str, Sequence[str]]) -> Optional[str]:
    """
    Build an encoded query string from name -> values.

    Args:
        params: Mapping of names to value lists (insertion order is kept)

    Returns:
        Encoded query string, or None if there is nothing to encode
    """
    pairs = []
    for name, values in params.items():
        for value in values:
            pairs.append(f"{encode(name)}={encode(value)}")
    return "&".join(pairs) if pairs else None


def strip_names(params: Mapping[str, Sequence[str]], exclude: Collection[str]) -> Dict[str, List[str]]:
    """Return a copy of params without the excluded names."""
    return {name: list(values) for name, values in params.items() if name not in exclude}


def exclude_from_packed_args(values: Iterable[str], exclude: Collection[str]) -> List[str]:
    """
    Re-encode packedargs values with the excluded names removed.

    Args:
        values: Packed argument strings (each itself a query string)
        exclude: Names to drop from every packed string

    Returns:
        Re-encoded packed strings; values that end up empty are dropped
    """
    result = []
    for value in values:
        remaining = strip_names(parse_query_string(value), exclude)
        packed = construct_query_string(remaining)
        if packed:
            result.append(packed)
    return result
