# hwstats/utils/metrics.py
"""
Derived metrics computed from already-normalized inputs.
"""

import math
import re
from decimal import Decimal, InvalidOperation

from ..models import UNKNOWN
from .units import round_half_away

MM_PER_INCH = Decimal('25.4')

HEALTH_GOOD = "Good"
HEALTH_FAIR = "Fair"
HEALTH_POOR = "Poor"
HEALTH_CHOICES = (HEALTH_GOOD, HEALTH_FAIR, HEALTH_POOR)

_POSITIVE_INT = re.compile(r'^[1-9][0-9]*$')


def _positive_int(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and _POSITIVE_INT.match(value.strip()):
        return int(value.strip())
    return None


def diagonal_inches(width_mm, height_mm):
    """
    Physical diagonal in inches from width and height in millimetres.

    Both inputs must be positive integers; geometry tools report 0mm x 0mm
    for outputs without a known size, so zero is rejected as well.
    """
    width = _positive_int(width_mm)
    height = _positive_int(height_mm)
    if width is None or height is None:
        return UNKNOWN

    diagonal_mm = round_half_away(math.sqrt(width ** 2 + height ** 2), 0)
    return round_half_away(Decimal(diagonal_mm) / MM_PER_INCH, 1)


def _to_decimal(value):
    if value is None or isinstance(value, bool):
        return None
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        return None


def health_bucket(percent) -> str:
    if percent >= 80:
        return HEALTH_GOOD
    if percent >= 60:
        return HEALTH_FAIR
    return HEALTH_POOR


def battery_health(current_full, design_full):
    """Health category from full-charge capacity against design capacity"""
    current = _to_decimal(current_full)
    design = _to_decimal(design_full)
    if current is None or design is None or design <= 0:
        return UNKNOWN

    ratio = round_half_away(current / design * 100, 0)
    return health_bucket(ratio)


def battery_health_from_percent(percent):
    """Health category for sources that already report the capacity ratio"""
    value = _to_decimal(str(percent).rstrip('%')) if percent is not None else None
    if value is None or value < 0:
        return UNKNOWN
    return health_bucket(round_half_away(value, 0))
