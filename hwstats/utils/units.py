# hwstats/utils/units.py
"""
Unit normalization for magnitudes reported in mixed units.

Binary (Ki/Mi/Gi/Ti) and decimal (K/M/G/T) prefixes are told apart by the
unit annotation only, never guessed from the magnitude. Battery charge is
the one exception: some sources omit the unit, see CHARGE_AUTO.
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from ..exceptions import UnitConversionError

Number = Union[int, float]

# Bytes per unit
BYTE_UNITS = {
    'B': 1,
    'K': 10 ** 3, 'KB': 10 ** 3, 'kB': 10 ** 3,
    'M': 10 ** 6, 'MB': 10 ** 6,
    'G': 10 ** 9, 'GB': 10 ** 9,
    'T': 10 ** 12, 'TB': 10 ** 12,
    'Ki': 2 ** 10, 'KiB': 2 ** 10,
    'Mi': 2 ** 20, 'MiB': 2 ** 20,
    'Gi': 2 ** 30, 'GiB': 2 ** 30,
    'Ti': 2 ** 40, 'TiB': 2 ** 40,
    'sector': 512,
}

# mAh per unit
CHARGE_UNITS = {
    'uAh': Decimal('0.001'),
    'mAh': Decimal(1),
    'Ah': Decimal(1000),
}

# Millimetres per unit
LENGTH_UNITS = {
    'mm': Decimal(1),
    'cm': Decimal(10),
    'in': Decimal('25.4'),
}

# Raw charge readings without unit metadata: above this they are taken as
# micro-units, otherwise as milli-units. Best effort only: a battery with a
# real capacity above 10 Ah reported in mAh would be misread.
CHARGE_AUTO = 'charge-auto'
CHARGE_AUTO_THRESHOLD = 10000

_QUANTITY = re.compile(r'^\s*(-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)\s*([A-Za-z]*)\s*$')


def round_half_away(value: Union[Number, Decimal], precision: int) -> Number:
    """Round half away from zero; returns int when precision is 0"""
    try:
        quantum = Decimal(1).scaleb(-precision)
        rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise UnitConversionError(f"Cannot round {value!r}: {e}")
    if precision <= 0:
        return int(rounded)
    return float(rounded)


def parse_quantity(value) -> tuple:
    """
    Split a raw magnitude into (Decimal, unit suffix or None).

    Accepts numbers and strings such as "16Gi", "8192 MB" or "476.9G".
    """
    if isinstance(value, bool):
        raise UnitConversionError(f"Not a magnitude: {value!r}")
    if isinstance(value, (int, float, Decimal)):
        return Decimal(str(value)), None
    if not isinstance(value, str):
        raise UnitConversionError(f"Not a magnitude: {value!r}")

    match = _QUANTITY.match(value)
    if not match:
        raise UnitConversionError(f"Cannot parse magnitude: {value!r}")
    return Decimal(match.group(1)), (match.group(2) or None)


def _factor(unit: str, target: str) -> Decimal:
    for table in (BYTE_UNITS, CHARGE_UNITS, LENGTH_UNITS):
        if unit in table and target in table:
            return Decimal(table[unit]) / Decimal(table[target])
    raise UnitConversionError(f"No conversion from '{unit}' to '{target}'")


def normalize(value, source_unit: Optional[str], target_unit: str, precision: int = 1) -> Number:
    """
    Convert a magnitude into target_unit, rounded to precision decimals.

    A unit suffix attached to the value overrides source_unit. With no unit
    at all the value is taken to already be in target_unit.

    Raises:
        UnitConversionError: unparseable value or unknown unit pair
    """
    magnitude, attached_unit = parse_quantity(value)
    unit = attached_unit or source_unit or target_unit

    if unit == CHARGE_AUTO:
        unit = 'uAh' if magnitude > CHARGE_AUTO_THRESHOLD else 'mAh'

    if unit == target_unit:
        return round_half_away(magnitude, precision)
    return round_half_away(magnitude * _factor(unit, target_unit), precision)


def energy_to_charge(energy_uwh, voltage_uv) -> Optional[float]:
    """
    Convert an energy reading (uWh) to charge (mAh) via a voltage (uV).

    Returns None when the voltage is missing or non-positive.
    """
    try:
        energy = Decimal(str(energy_uwh))
        voltage = Decimal(str(voltage_uv)) if voltage_uv is not None else None
    except InvalidOperation:
        return None
    if voltage is None or voltage <= 0:
        return None
    return float(energy / (voltage / Decimal(10 ** 6)) / Decimal(1000))
