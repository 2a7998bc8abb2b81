# gvg_tracker/utils/misc_utils.py
import math
from typing import Optional

from gvg_tracker.config.settings import settings


def format_percent(value: float, digits: Optional[int] = None) -> str:
    """Formats a 0..1 ratio as a percentage string, e.g. 0.5 -> '50.0%'."""
    digits = settings.percent_digits if digits is None else digits
    if value is None or not math.isfinite(value):
        return "0%"
    return f"{value * 100:.{digits}f}%"
