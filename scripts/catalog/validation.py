"""
Product payload validation.

All field rules run independently and every violation is collected,
so a single 400 response lists everything wrong with the payload.
"""

import math
from typing import Any, Callable, List, Mapping, Tuple

from api.errors import AppError, ErrorKind


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value != ''


def _is_finite_number(value: Any) -> bool:
    # bool is an int subclass but is not a price
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints beyond float range
        return False


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


# (field, check, expected type wording)
FIELD_RULES: Tuple[Tuple[str, Callable[[Any], bool], str], ...] = (
    ('name', _is_non_empty_string, 'string'),
    ('description', _is_non_empty_string, 'string'),
    ('price', _is_finite_number, 'finite number'),
    ('category', _is_non_empty_string, 'string'),
    ('inStock', _is_bool, 'boolean'),
)


def collect_violations(payload: Mapping[str, Any], require_all: bool = True) -> List[str]:
    """
    Check a product payload against every field rule.

    Args:
        payload: Candidate fields keyed by wire name
        require_all: Check every field; when False, fields absent from
            the payload are skipped

    Returns:
        One message per violated field, in field order (empty when valid)
    """
    violations = []
    for field_name, check, expected in FIELD_RULES:
        if not require_all and field_name not in payload:
            continue
        if not check(payload.get(field_name)):
            violations.append(f"{field_name} is required and must be a {expected}")
    return violations


def validate_product(payload: Any, require_all: bool = True) -> None:
    """
    Validate a product payload, raising on any violation.

    Raises:
        AppError: VALIDATION with all violations joined by "; "
    """
    if not isinstance(payload, Mapping):
        raise AppError(ErrorKind.VALIDATION, "Request body must be a JSON object")

    violations = collect_violations(payload, require_all=require_all)
    if violations:
        raise AppError(ErrorKind.VALIDATION, '; '.join(violations))
