from typing import Any, Optional


def to_int(v) -> Optional[int]:
    try:
        if v is None or v == "" or str(v).lower() == "null":
            return None
        return int(float(v))
    except (TypeError, ValueError):
        return None


def to_float(v) -> Optional[float]:
    try:
        if v is None or v == "" or str(v).lower() == "null":
            return None
        return float(v)
    except (TypeError, ValueError):
        return None


def to_str(v) -> str:
    return "" if v is None else str(v).strip()


def first_present(*values: Any) -> Any:
    """Return the first value that is neither None nor an empty string."""
    for value in values:
        if value is not None and value != "":
            return value
    return None