"""
Helpers for building parameterized SQL fragments.

Placeholders are positional and 1-based (``$1``, ``$2``, ...). Values are
never interpolated into SQL text; only column names are, and those are
always quoted.
"""

from typing import Any, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple, Union

from .errors import InvalidArgumentError

UpdatePayload = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


class SetClause(NamedTuple):
    set_cols: str
    values: List[Any]


def quote_identifier(name: str) -> str:
    """Quote a column name, doubling any embedded double quotes."""
    return '"' + name.replace('"', '""') + '"'


def placeholder(position: int) -> str:
    return f"${position}"


def next_placeholder(values: Sequence[Any]) -> str:
    """Placeholder for the value that will follow ``values``."""
    return placeholder(len(values) + 1)


def payload_items(payload: UpdatePayload) -> List[Tuple[str, Any]]:
    """
    Normalize a payload into an explicit list of (key, value) pairs.

    Mappings keep their insertion order. A pair sequence may not repeat a key.
    """
    if isinstance(payload, Mapping):
        return list(payload.items())

    items: List[Tuple[str, Any]] = []
    seen = set()
    for key, value in payload:
        if key in seen:
            raise InvalidArgumentError(f"Duplicate field: {key}")
        seen.add(key)
        items.append((key, value))
    return items


def build_set_clause(
    payload: UpdatePayload,
    column_map: Optional[Mapping[str, str]] = None,
) -> SetClause:
    """
    Build the SET clause of a partial UPDATE.

    Args:
        payload: Fields to change, in the order they should be bound
        column_map: External field name -> storage column name. Fields
            missing from the map are used verbatim.

    Returns:
        SetClause, e.g. ('"first_name"=$1, "age"=$2', ['Aliya', 32])

    Raises:
        InvalidArgumentError: If the payload has no fields
    """
    items = payload_items(payload)
    if not items:
        raise InvalidArgumentError("No data")

    columns = column_map or {}
    fragments = [
        f"{quote_identifier(columns.get(key, key))}={placeholder(idx)}"
        for idx, (key, _) in enumerate(items, start=1)
    ]
    return SetClause(", ".join(fragments), [value for _, value in items])
