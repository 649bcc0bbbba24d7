from enum import Enum
from typing import Any, Optional, Union

from emgdx.schemas.pattern import (
    CategoricalCondition,
    NumericCondition,
    WithinNormalCondition,
    parse_condition,
)
from emgdx.schemas.reference import ReferenceRange

ParsedCondition = Union[NumericCondition, WithinNormalCondition, CategoricalCondition]

INCREASED_GRADES = frozenset({"increased", "+2", "+3", "+4"})


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _to_float(text: str) -> Optional[float]:
    try:
        number = float(text)
    except ValueError:
        return None
    return None if number != number else number


def compare_value(
    value: Any,
    condition: Union[str, ParsedCondition],
    reference: Optional[ReferenceRange] = None,
) -> bool:
    """
    Tests one observed value against a key-finding condition.

    Numeric conditions ('>10', '<5', '=3') need a numeric value; anything else
    fails. '=normal' needs a reference range. Categorical tokens match by
    equality, plus the aliases 'present' (anything but 'absent') and
    'increased' ('+2' to '+4').
    """
    if isinstance(condition, str):
        try:
            condition = parse_condition(condition)
        except ValueError:
            return False

    text = _to_text(value)
    if text is None:
        return False

    if isinstance(condition, NumericCondition):
        actual = _to_float(text)
        if actual is None:
            return False
        if condition.op == ">":
            return actual > condition.threshold
        if condition.op == "<":
            return actual < condition.threshold
        return actual == condition.threshold

    if isinstance(condition, WithinNormalCondition):
        actual = _to_float(text)
        if actual is None or reference is None:
            return False
        return reference.contains(actual)

    token = condition.token
    if text == token:
        return True
    if token == "present":
        return text != "absent"
    if token == "increased":
        return text in INCREASED_GRADES
    return False
