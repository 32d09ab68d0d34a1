import math
from typing import Any, List, Mapping, Optional, Tuple

from .errors import InvalidArgumentError
from .filters import FilterCriteria

TRUE_STRINGS = {"true", "1", "yes", "on"}
FALSE_STRINGS = {"false", "0", "no", "off"}


def _is_blank(v: Any) -> bool:
    return v is None or (isinstance(v, str) and v.strip() == "")


def _parse_number(name: str, v: Any, errors: List[str]) -> Optional[float]:
    if _is_blank(v):
        return None
    if isinstance(v, bool):
        errors.append(f"Field '{name}' must be a number")
        return None
    if isinstance(v, (int, float)):
        number = v
    else:
        try:
            number = float(str(v).strip())
        except ValueError:
            errors.append(f"Field '{name}' must be a number")
            return None
    if isinstance(number, float) and not math.isfinite(number):
        errors.append(f"Field '{name}' must be a finite number")
        return None
    if number < 0:
        errors.append(f"Field '{name}' must not be negative")
        return None
    # Keep integers exact so they compare cleanly against INTEGER columns
    return int(number) if float(number).is_integer() else number


def _parse_flag(name: str, v: Any, errors: List[str]) -> Optional[bool]:
    if _is_blank(v):
        return None
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in TRUE_STRINGS:
        return True
    if s in FALSE_STRINGS:
        return False
    errors.append(f"Field '{name}' must be true or false")
    return None


def validate_criteria(criteria: FilterCriteria) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    errors: List[str] = []
    low, high = criteria.numeric_min, criteria.numeric_max
    if low is not None and high is not None and low > high:
        errors.append("Minimum cannot be greater than maximum")
    return errors


def _raise_if_invalid(criteria: FilterCriteria, errors: List[str]) -> FilterCriteria:
    errors = errors + validate_criteria(criteria)
    if errors:
        raise InvalidArgumentError("Invalid query string", errors)
    return criteria


def _unknown_keys(args: Mapping[str, Any], allowed: Tuple[str, ...]) -> List[str]:
    return [f"Unknown filter: {k}" for k in args if k not in allowed]


COMPANY_FILTER_KEYS = ("nameLike", "minEmployees", "maxEmployees")
JOB_FILTER_KEYS = ("title", "minSalary", "hasEquity")


def parse_company_filters(args: Mapping[str, Any]) -> FilterCriteria:
    """
    Build company criteria from query-string style arguments.

    Raises:
        InvalidArgumentError: "Invalid query string", with the problems found
    """
    errors = _unknown_keys(args, COMPANY_FILTER_KEYS)
    name_like = args.get("nameLike")
    criteria = FilterCriteria(
        text_contains=None if name_like is None else str(name_like),
        numeric_min=_parse_number("minEmployees", args.get("minEmployees"), errors),
        numeric_max=_parse_number("maxEmployees", args.get("maxEmployees"), errors),
    )
    return _raise_if_invalid(criteria, errors)


def parse_job_filters(args: Mapping[str, Any]) -> FilterCriteria:
    """
    Build job criteria from query-string style arguments.

    Raises:
        InvalidArgumentError: "Invalid query string", with the problems found
    """
    errors = _unknown_keys(args, JOB_FILTER_KEYS)
    title = args.get("title")
    criteria = FilterCriteria(
        text_contains=None if title is None else str(title),
        numeric_min=_parse_number("minSalary", args.get("minSalary"), errors),
        flag_required=_parse_flag("hasEquity", args.get("hasEquity"), errors),
    )
    return _raise_if_invalid(criteria, errors)
