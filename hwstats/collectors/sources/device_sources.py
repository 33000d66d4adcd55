# hwstats/collectors/sources/device_sources.py
"""
Device identity and memory accessors: dmidecode and free.
"""

import re
from typing import Optional

from .base_source import source

_MODULE_SIZE = re.compile(r'^\s*Size:\s*(\d+)\s*(MB|GB|TB)\s*$', re.MULTILINE)
_MB_PER = {'MB': 1, 'GB': 1000, 'TB': 1000 ** 2}


def _dmidecode_string(context, keyword: str) -> Optional[str]:
    output = context.run_output(['dmidecode', '-s', keyword])
    if output is None:
        return None
    for line in output.splitlines():
        line = line.strip()
        if line and not line.startswith('#'):
            return line
    return None


@source('dmidecode_product_name')
def dmidecode_product_name(context):
    return _dmidecode_string(context, 'system-product-name')


@source('dmidecode_serial')
def dmidecode_serial(context):
    return _dmidecode_string(context, 'system-serial-number')


def sum_memory_modules(text: str) -> Optional[int]:
    """
    Total size in MB of the populated modules in `dmidecode -t memory` output.

    Empty slots ("No Module Installed") and other *Size lines are skipped.
    """
    total = 0
    for size, unit in _MODULE_SIZE.findall(text):
        total += int(size) * _MB_PER[unit]
    return total or None


@source('dmidecode_memory_total')
def dmidecode_memory_total(context):
    output = context.run_output(['dmidecode', '-t', 'memory'])
    if output is None:
        return None
    total_mb = sum_memory_modules(output)
    if total_mb is None:
        return None
    return f"{total_mb} MB"


@source('free_memory_total')
def free_memory_total(context):
    """Total memory in bytes from `free -b`"""
    output = context.run_output(['free', '-b'])
    if output is None:
        return None
    for line in output.splitlines():
        if line.startswith('Mem:'):
            parts = line.split()
            if len(parts) >= 2 and parts[1].isdigit():
                return parts[1]
    return None
