"""
Conjunctive filters for listing queries.

Two forms of the same contract:
- apply_filters() narrows rows that were already fetched, keeping their order.
- build_predicates() emits WHERE fragments and bound values so the database
  does the narrowing.

Neither form checks that numeric_min <= numeric_max; callers validate first
(see jobboard.schema.validate_criteria).
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .sql import placeholder, quote_identifier

Record = Dict[str, Any]


@dataclass(frozen=True)
class FilterCriteria:
    """Optional filters; None means the filter is not applied."""

    text_contains: Optional[str] = None
    numeric_min: Optional[float] = None
    numeric_max: Optional[float] = None
    flag_required: Optional[bool] = None


@dataclass(frozen=True)
class FilterFields:
    """Record fields (or columns) each criterion is checked against."""

    text: Optional[str] = None
    numeric: Optional[str] = None
    flag: Optional[str] = None


def as_decimal(value: Any) -> Decimal:
    """Parse a stored numeric value; NULL counts as zero."""
    if value is None:
        return Decimal(0)
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Not a numeric value: {value!r}")


def _require(field: Optional[str], criterion: str) -> str:
    if field is None:
        raise ValueError(f"No field configured for {criterion} filter")
    return field


def apply_filters(
    records: Iterable[Record],
    criteria: FilterCriteria,
    fields: FilterFields,
) -> List[Record]:
    """
    Keep the records matching every active criterion.

    Args:
        records: Rows in display order
        criteria: Active filters
        fields: Field names the filters read from each row

    Returns:
        New list with the matching rows, in input order
    """
    checks = []

    if criteria.text_contains is not None:
        text_field = _require(fields.text, "text")
        needle = criteria.text_contains.lower()
        checks.append(lambda r: needle in str(r.get(text_field) or "").lower())

    if criteria.numeric_min is not None:
        num_field = _require(fields.numeric, "numeric")
        low = criteria.numeric_min
        checks.append(lambda r: r.get(num_field) is not None and r[num_field] >= low)

    if criteria.numeric_max is not None:
        num_field = _require(fields.numeric, "numeric")
        high = criteria.numeric_max
        checks.append(lambda r: r.get(num_field) is not None and r[num_field] <= high)

    if criteria.flag_required:
        flag_field = _require(fields.flag, "flag")
        checks.append(lambda r: as_decimal(r.get(flag_field)) != 0)

    return [r for r in records if all(check(r) for check in checks)]


def escape_like(text: str, escape: str = "\\") -> str:
    """Escape LIKE wildcards so the text matches literally."""
    return (
        text.replace(escape, escape + escape)
        .replace("%", escape + "%")
        .replace("_", escape + "_")
    )


def build_predicates(
    criteria: FilterCriteria,
    fields: FilterFields,
    start: int = 1,
) -> Tuple[List[str], List[Any]]:
    """
    Build WHERE predicates for the active criteria.

    Args:
        criteria: Active filters
        fields: Column names the filters apply to
        start: Position of the first placeholder to emit

    Returns:
        (predicates, values); placeholders run from ``start`` in order
    """
    predicates: List[str] = []
    values: List[Any] = []

    def bind(value: Any) -> str:
        values.append(value)
        return placeholder(start + len(values) - 1)

    if criteria.text_contains is not None:
        column = quote_identifier(_require(fields.text, "text"))
        pattern = f"%{escape_like(criteria.text_contains.lower())}%"
        predicates.append(f"lower({column}) LIKE {bind(pattern)} ESCAPE '\\'")

    if criteria.numeric_min is not None:
        column = quote_identifier(_require(fields.numeric, "numeric"))
        predicates.append(f"{column} >= {bind(criteria.numeric_min)}")

    if criteria.numeric_max is not None:
        column = quote_identifier(_require(fields.numeric, "numeric"))
        predicates.append(f"{column} <= {bind(criteria.numeric_max)}")

    if criteria.flag_required:
        column = quote_identifier(_require(fields.flag, "flag"))
        predicates.append(f"CAST({column} AS NUMERIC) <> 0")

    return predicates, values


def where_clause(predicates: List[str]) -> str:
    if not predicates:
        return ""
    return "WHERE " + " AND ".join(predicates)
