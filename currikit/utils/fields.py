"""Normalisation helpers for list-valued content fields."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Hashable, Iterable, List, TypeVar

DEFAULT_DELIMITERS = r"[;,]"

H = TypeVar("H", bound=Hashable)


def split_fields(value: object, *, delimiters: str = DEFAULT_DELIMITERS) -> List[str]:
    """Turn a tag/identifier field into a list of trimmed strings.

    Authored content is inconsistent: the same field shows up as a list, a
    ``"a; b"`` string or a bare scalar. Nested sequences are flattened and
    numeric identifiers are stringified. Falsy input yields ``[]``.
    """

    if value is None or value == "" or value == []:
        return []
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        tokens: List[str] = []
        for item in value:
            if isinstance(item, str) or (isinstance(item, Sequence) and not isinstance(item, bytes)):
                tokens.extend(split_fields(item, delimiters=delimiters))
            elif item is not None:
                tokens.append(str(item))
        return tokens
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return [str(value)]
    raw_tokens = re.split(delimiters, str(value))
    return [token.strip() for token in raw_tokens if token.strip()]


def unique_in_order(values: Iterable[H]) -> List[H]:
    """Drop repeated values, keeping the first occurrence."""
    seen: set = set()
    unique: List[H] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        unique.append(value)
    return unique


def list_field(value: object, *, delimiters: str = DEFAULT_DELIMITERS) -> List[str]:
    """Normalise a field whose authored form is normally a list.

    List entries are kept whole (trimmed, empty ones dropped), so a tag such
    as ``"Promise.all, Promise.race"`` stays one tag. Only a bare string is
    split on ``delimiters``.
    """

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        tokens: List[str] = []
        for item in value:
            if isinstance(item, Sequence) and not isinstance(item, (str, bytes)):
                tokens.extend(list_field(item, delimiters=delimiters))
            elif item is not None:
                text = str(item).strip()
                if text:
                    tokens.append(text)
        return tokens
    return split_fields(value, delimiters=delimiters)
