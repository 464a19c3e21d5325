"""Translate OData-style query parameters into IGDB Apicalypse queries.

Supported parameters (request arguments carry a ``$`` prefix):

* ``select``: comma-separated field list, e.g. ``id,name,summary``
* ``filter``: an Apicalypse ``where`` snippet, e.g. ``rating >= 90 & rating_count >= 100``.
  The words ``and``/``or`` are accepted and converted to ``&``/``|``.
* ``search``: free text search
* ``sort``: ``<field> [asc|desc]``
* ``limit``: 1..500
* ``offset``: >= 0
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, fields
from typing import Any, Mapping

__all__ = [
    "DEFAULT_FIELDS",
    "MAX_LIMIT",
    "QueryParams",
    "build_query",
    "coerce_limit",
    "coerce_offset",
    "escape_search",
    "normalize_filter",
    "parse_select",
    "sanitize_sort",
]

DEFAULT_FIELDS = "id,name,summary,rating,cover.url"
MAX_LIMIT = 500

_SORT_RE = re.compile(r"^([A-Za-z0-9_.]+)(?:\s+(asc|desc))?$", re.IGNORECASE)
_QUOTED_RE = re.compile(r"(\"[^\"]*\"|'[^']*')")
_AND_RE = re.compile(r"\band\b", re.IGNORECASE)
_OR_RE = re.compile(r"\bor\b", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class QueryParams:
    """Raw, unvalidated query options as supplied by the caller."""

    select: str | None = None
    filter: str | None = None
    search: str | None = None
    sort: str | None = None
    limit: Any = None
    offset: Any = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any], *, prefix: str = "$") -> "QueryParams":
        """Build parameters from a request argument mapping (``$select`` etc.)."""

        values = {}
        for field in fields(cls):
            value = _first(args.get(f"{prefix}{field.name}"))
            if value is not None:
                values[field.name] = value
        return cls(**values)


def _first(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _to_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = _text(value)
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def parse_select(value: Any) -> str | None:
    """Return the trimmed field list, or ``None`` when no field survives."""

    text = _text(_first(value))
    if not text:
        return None
    selected = ",".join(part.strip() for part in text.split(",") if part.strip())
    return selected or None


def escape_search(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def normalize_filter(raw: str) -> str:
    """Replace standalone ``and``/``or`` with ``&``/``|`` outside quoted strings.

    Whitespace runs outside quotes collapse to a single space; quoted text and
    the characters directly next to it are kept as written.
    """

    parts: list[str] = []
    for index, segment in enumerate(_QUOTED_RE.split(raw)):
        # re.split puts the captured quoted strings at odd positions.
        if index % 2:
            parts.append(segment)
            continue
        segment = _AND_RE.sub("&", segment)
        segment = _OR_RE.sub("|", segment)
        parts.append(_WHITESPACE_RE.sub(" ", segment))
    return "".join(parts).strip()


def sanitize_sort(value: Any) -> str | None:
    """Return ``"<field> <asc|desc>"`` or ``None`` when ``value`` is not a valid sort."""

    text = _text(_first(value))
    if not text:
        return None
    match = _SORT_RE.match(text)
    if not match:
        return None
    direction = (match.group(2) or "asc").lower()
    return f"{match.group(1)} {direction}"


def coerce_limit(value: Any, default: int = 20) -> int:
    number = _to_number(_first(value))
    if number is None:
        return default
    return min(max(1, int(number)), MAX_LIMIT)


def coerce_offset(value: Any, default: int = 0) -> int:
    number = _to_number(_first(value))
    if number is None or number < 0:
        return default
    return int(number)


def build_query(
    params: QueryParams | Mapping[str, Any] | None = None,
    *,
    default_fields: str = DEFAULT_FIELDS,
    default_limit: int = 20,
    default_offset: int = 0,
    normalize_logic: bool = True,
) -> str:
    """Return the Apicalypse body for ``params``.

    Clauses are emitted in the order ``fields``, ``search``, ``where``,
    ``sort``, ``limit``, ``offset``; a zero offset is left out.
    """

    if params is None:
        params = QueryParams()
    elif not isinstance(params, QueryParams):
        params = QueryParams.from_args(params, prefix="")

    selected = parse_select(params.select) or default_fields
    limit = coerce_limit(params.limit, default_limit)
    offset = coerce_offset(params.offset, default_offset)
    sort = sanitize_sort(params.sort)

    clauses = [f"fields {selected};"]

    search = _text(_first(params.search))
    if search:
        clauses.append(f'search "{escape_search(search)}";')

    where = _text(_first(params.filter))
    if where and normalize_logic:
        where = normalize_filter(where)
    if where:
        # The where snippet is trusted as-is beyond the logical-word rewrite.
        clauses.append(f"where {where};")

    if sort:
        clauses.append(f"sort {sort};")
    clauses.append(f"limit {limit};")
    if offset:
        clauses.append(f"offset {offset};")
    return "\n".join(clauses)
