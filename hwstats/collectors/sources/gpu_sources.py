# hwstats/collectors/sources/gpu_sources.py
"""
GPU accessors: lspci and the DRM device's PCI vendor id.
"""

import os
import re
from typing import List, Optional

from .base_source import source

_GPU_CLASS = re.compile(r'^(\S+)\s+(?:VGA compatible controller|3D controller|Display controller)[^:]*:\s*(.+)$',
                        re.IGNORECASE)
_REVISION = re.compile(r'\s*\(rev [0-9a-f]+\)\s*$', re.IGNORECASE)
_DRIVER = re.compile(r'^\s+Kernel driver in use:\s*(\S+)')

PCI_VENDORS = {
    '0x8086': 'Intel',
    '0x10de': 'NVIDIA',
    '0x1002': 'AMD',
    '0x1022': 'AMD',
    '0x1a03': 'ASPEED',
    '0x15ad': 'VMware',
    '0x1af4': 'Red Hat',
    '0x1234': 'QEMU',
}


def gpu_descriptions(text: str) -> List[str]:
    """Device descriptions of the display controllers in lspci output"""
    descriptions = []
    for line in text.splitlines():
        match = _GPU_CLASS.match(line)
        if match:
            descriptions.append(_REVISION.sub('', match.group(2)).strip())
    return descriptions


def vendor_from_description(description: str) -> Optional[str]:
    lowered = description.lower()
    if 'nvidia' in lowered:
        return 'NVIDIA'
    if 'advanced micro devices' in lowered or re.search(r'\b(amd|ati)\b', lowered):
        return 'AMD'
    if 'intel' in lowered:
        return 'Intel'
    words = description.split()
    return words[0] if words else None


@source('lspci_gpu_model')
def lspci_gpu_model(context):
    output = context.run_output(['lspci'])
    if output is None:
        return None
    descriptions = gpu_descriptions(output)
    return descriptions[0] if descriptions else None


@source('lspci_gpu_vendor')
def lspci_gpu_vendor(context):
    model = lspci_gpu_model(context)
    if model is None:
        return None
    return vendor_from_description(model)


def kernel_driver(text: str) -> Optional[str]:
    """Driver bound to the first display controller in `lspci -k` output"""
    in_gpu = False
    for line in text.splitlines():
        if line and not line[0].isspace():
            if in_gpu:
                return None
            in_gpu = bool(_GPU_CLASS.match(line))
            continue
        if in_gpu:
            match = _DRIVER.match(line)
            if match:
                return match.group(1)
    return None


@source('lspci_gpu_driver')
def lspci_gpu_driver(context):
    output = context.run_output(['lspci', '-k'])
    if output is None:
        return None
    return kernel_driver(output)


@source('drm_gpu_vendor')
def drm_gpu_vendor(context):
    for path in context.glob('/sys/class/drm/card*'):
        if not re.match(r'card\d+$', os.path.basename(path)):
            continue
        vendor_id = context.read_text(f"{path}/device/vendor")
        if vendor_id is not None:
            return PCI_VENDORS.get(vendor_id.lower())
    return None
