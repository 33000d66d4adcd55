# hwstats/collectors/sources/storage_sources.py
"""
Storage accessors: lsblk and /sys/block.
Only the primary disk is reported: the first non-removable whole disk
that is not a loop, RAM, optical or device-mapper node.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from .base_source import source

logger = logging.getLogger('source.storage')

NVME_SSD = "NVMe SSD"
SSD = "SSD"
HDD = "HDD"
STORAGE_TYPES = (NVME_SSD, SSD, HDD)

VIRTUAL_PREFIXES = ('loop', 'ram', 'zram', 'dm-', 'sr', 'fd', 'md', 'nbd')

LSBLK_ARGS = ['lsblk', '-J', '-b', '-d', '-o', 'NAME,SIZE,TYPE,ROTA,TRAN,RM']


def _flag(value: Any) -> Optional[bool]:
    """lsblk prints booleans as true/false or, in older releases, "0"/"1" """
    if isinstance(value, bool):
        return value
    if value in ('0', 0):
        return False
    if value in ('1', 1):
        return True
    return None


def storage_type(name: str, rotational: Optional[bool], transport: Optional[str] = None) -> Optional[str]:
    if transport == 'nvme' or name.startswith('nvme'):
        return NVME_SSD
    if rotational is None:
        return None
    return HDD if rotational else SSD


def primary_lsblk_disk(text: str) -> Optional[Dict[str, Any]]:
    """First physical disk in `lsblk -J` output"""
    try:
        data = json.loads(text)
    except ValueError as e:
        logger.debug(f"lsblk output is not valid JSON: {e}")
        return None
    if not isinstance(data, dict):
        return None

    for device in data.get('blockdevices', []):
        name = str(device.get('name', ''))
        if device.get('type') != 'disk' or name.startswith(VIRTUAL_PREFIXES):
            continue
        if _flag(device.get('rm')):
            continue
        return device
    return None


def _lsblk_disk(context) -> Optional[Dict[str, Any]]:
    output = context.run_output(LSBLK_ARGS)
    if output is None:
        return None
    return primary_lsblk_disk(output)


@source('lsblk_storage_type')
def lsblk_storage_type(context):
    disk = _lsblk_disk(context)
    if disk is None:
        return None
    return storage_type(str(disk.get('name', '')), _flag(disk.get('rota')), disk.get('tran'))


@source('lsblk_storage_size')
def lsblk_storage_size(context):
    """Disk size in bytes"""
    disk = _lsblk_disk(context)
    if disk is None or disk.get('size') in (None, ''):
        return None
    return str(disk['size'])


def _sysfs_disk(context) -> Optional[str]:
    for path in context.glob('/sys/block/*'):
        name = os.path.basename(path)
        if name.startswith(VIRTUAL_PREFIXES):
            continue
        if context.read_text(f"{path}/removable") == '1':
            continue
        return path
    return None


@source('sysfs_storage_type')
def sysfs_storage_type(context):
    path = _sysfs_disk(context)
    if path is None:
        return None
    rotational = _flag(context.read_text(f"{path}/queue/rotational"))
    return storage_type(os.path.basename(path), rotational)


@source('sysfs_storage_size')
def sysfs_storage_size(context):
    """Disk size in 512-byte sectors"""
    path = _sysfs_disk(context)
    if path is None:
        return None
    return context.read_text(f"{path}/size")
