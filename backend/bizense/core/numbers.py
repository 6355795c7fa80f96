import math
import re

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def parse_number(value) -> float:
    """
    Coerce a loosely formatted figure ("$1,234.56", "12 %", "") to float.
    Anything that does not parse after stripping is 0.0; never raises.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        # "True" and "False" carry no digits; bool is an int subclass
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    cleaned = _NON_NUMERIC.sub("", str(value))
    if not cleaned:
        return 0.0
    try:
        parsed = float(cleaned)
    except ValueError:
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0
