import math
import re
from typing import Union

from .errors import NumericParseError


RenderedValue = Union[int, float, str]


# Plain integers render as int, everything else numeric as float.
INTEGER_RE = re.compile(r"^[+-]?\d+$")


def parse_number(text: str) -> float:
    """
    Parse an event value that a rule wants to compare numerically.

    Accepts anything Python's float() accepts.
    Raises NumericParseError otherwise; callers must not swallow it.
    """
    try:
        return float(text)
    except (TypeError, ValueError) as e:
        raise NumericParseError(text) from e


def coerce_value(text: str) -> RenderedValue:
    """
    Decide at render time whether a raw event value is a number or text.

    This function must be:
    - deterministic
    - side-effect free

    It should NEVER throw. Non-finite values (nan, inf) stay text so the
    rendered JSON remains valid.
    """
    if INTEGER_RE.match(text):
        try:
            return int(text)
        except ValueError:
            # over the interpreter's int string conversion limit
            return text

    try:
        number = float(text)
    except ValueError:
        return text

    if not math.isfinite(number):
        return text

    return number
