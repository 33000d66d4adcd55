# hwstats/collectors/sources/battery_sources.py
"""
Battery accessors: upower and /sys/class/power_supply.
Only the first battery is reported.
"""

from typing import Dict, Optional

from ...models import UNKNOWN
from ...utils.metrics import battery_health, battery_health_from_percent
from ...utils.units import energy_to_charge
from .base_source import leading_number, source

BATTERY_GLOB = '/sys/class/power_supply/BAT*'


def parse_upower_info(text: str) -> Dict[str, str]:
    """Key/value pairs from `upower -i <device>` output"""
    info = {}
    for line in text.splitlines():
        if ':' not in line:
            continue
        key, value = line.split(':', 1)
        key = key.strip()
        if key and key not in info:
            info[key] = value.strip()
    return info


def _upower_battery(context) -> Optional[Dict[str, str]]:
    devices = context.run_output(['upower', '-e'])
    if devices is None:
        return None
    battery_paths = [line.strip() for line in devices.splitlines() if 'battery' in line]
    if not battery_paths:
        return None
    output = context.run_output(['upower', '-i', battery_paths[0]])
    if output is None:
        return None
    return parse_upower_info(output)


def _known(value):
    return None if value is UNKNOWN else value


@source('upower_battery_capacity')
def upower_battery_capacity(context):
    """Full-charge capacity in mAh from energy (Wh) and voltage (V)"""
    info = _upower_battery(context)
    if info is None:
        return None
    energy_wh = leading_number(info.get('energy-full'))
    voltage_v = leading_number(info.get('voltage'))
    if energy_wh is None or voltage_v is None:
        return None
    return energy_to_charge(energy_wh * 10 ** 6, voltage_v * 10 ** 6)


@source('upower_battery_health_percent')
def upower_battery_health_percent(context):
    info = _upower_battery(context)
    if info is None or not info.get('capacity'):
        return None
    return _known(battery_health_from_percent(info['capacity']))


@source('upower_battery_health_energy')
def upower_battery_health_energy(context):
    info = _upower_battery(context)
    if info is None:
        return None
    return _known(battery_health(
        leading_number(info.get('energy-full')),
        leading_number(info.get('energy-full-design'))
    ))


@source('upower_battery_state')
def upower_battery_state(context):
    info = _upower_battery(context)
    if info is None:
        return None
    state = info.get('state')
    if not state or state == 'unknown':
        return None
    return state


@source('upower_battery_charge')
def upower_battery_charge(context):
    """Charge level in percent"""
    info = _upower_battery(context)
    if info is None:
        return None
    return leading_number(info.get('percentage'))


def battery_dir(context) -> Optional[str]:
    """The first BAT* supply; every sysfs battery value is read from it alone"""
    batteries = context.glob(BATTERY_GLOB)
    return batteries[0] if batteries else None


def _sysfs_battery_value(context, name: str) -> Optional[str]:
    directory = battery_dir(context)
    if directory is None:
        return None
    return context.read_text(f"{directory}/{name}")


@source('sysfs_battery_charge_full')
def sysfs_battery_charge_full(context):
    return _sysfs_battery_value(context, 'charge_full')


@source('sysfs_battery_status')
def sysfs_battery_status(context):
    return _sysfs_battery_value(context, 'status')


@source('sysfs_battery_capacity')
def sysfs_battery_capacity(context):
    """Charge level in percent"""
    return _sysfs_battery_value(context, 'capacity')


@source('sysfs_battery_energy_capacity')
def sysfs_battery_energy_capacity(context):
    """Full-charge capacity in mAh from energy_full (uWh) and voltage_now (uV)"""
    energy = _sysfs_battery_value(context, 'energy_full')
    if energy is None:
        return None
    return energy_to_charge(energy, _sysfs_battery_value(context, 'voltage_now'))


@source('sysfs_battery_health_charge')
def sysfs_battery_health_charge(context):
    return _known(battery_health(
        _sysfs_battery_value(context, 'charge_full'),
        _sysfs_battery_value(context, 'charge_full_design')
    ))


@source('sysfs_battery_health_energy')
def sysfs_battery_health_energy(context):
    return _known(battery_health(
        _sysfs_battery_value(context, 'energy_full'),
        _sysfs_battery_value(context, 'energy_full_design')
    ))
