# hwstats/collectors/sources/display_sources.py
"""
Display accessors: screen diagonal and resolution.

Each source keeps its own first-match-wins order: xrandr walks connected
outputs top to bottom, edid-decode prefers the preferred mode and the
detailed timing size over the coarse image size, and raw EDID blobs are
tried connector by connector.
"""

import re
from typing import Dict, List, Optional

from ...models import UNKNOWN
from ...utils.metrics import diagonal_inches
from .base_source import source

_XRANDR_OUTPUT = re.compile(
    r'^(\S+)\s+connected\s+(?:primary\s+)?(\d+x\d+)\+\d+\+\d+(?:.*\s(\d+)mm\s+x\s+(\d+)mm)?'
)
_RESOLUTION = re.compile(r'(\d+x\d+)')
_DTD_SIZE = re.compile(r'(\d+)\s*mm\s*x\s*(\d+)\s*mm')
_IMAGE_SIZE = re.compile(r'image size:\s*(\d+)\s*(?:cm\s*)?x\s*(\d+)\s*cm', re.IGNORECASE)

EDID_HEADER = b'\x00\xff\xff\xff\xff\xff\xff\x00'
EDID_GLOB = '/sys/class/drm/card*-*/edid'
MODES_GLOB = '/sys/class/drm/card*-*/modes'


def parse_xrandr(text: str) -> List[Dict[str, Optional[int]]]:
    """Connected outputs from `xrandr --current`, in listed order"""
    outputs = []
    for line in text.splitlines():
        match = _XRANDR_OUTPUT.match(line)
        if not match:
            continue
        name, resolution, width_mm, height_mm = match.groups()
        outputs.append({
            'name': name,
            'resolution': resolution,
            'width_mm': int(width_mm) if width_mm else None,
            'height_mm': int(height_mm) if height_mm else None,
        })
    return outputs


def parse_edid_decode(text: str) -> Dict[str, Optional[object]]:
    """Preferred resolution and physical size (mm) from edid-decode output"""
    resolution = None
    for marker in ('preferred mode', 'dtd 1:', 'mode:'):
        for line in text.splitlines():
            if marker in line.lower():
                match = _RESOLUTION.search(line)
                if match:
                    resolution = match.group(1)
                    break
        if resolution:
            break

    width_mm = height_mm = None
    match = _DTD_SIZE.search(text)
    if match and int(match.group(1)) > 0 and int(match.group(2)) > 0:
        width_mm, height_mm = int(match.group(1)), int(match.group(2))
    else:
        match = _IMAGE_SIZE.search(text)
        if match:
            width_mm, height_mm = int(match.group(1)) * 10, int(match.group(2)) * 10

    return {'resolution': resolution, 'width_mm': width_mm, 'height_mm': height_mm}


def decode_edid(data: bytes) -> Optional[Dict[str, Optional[object]]]:
    """
    Preferred resolution and physical size (mm) from a raw EDID 1.x blob.

    The first detailed timing descriptor carries both in full resolution;
    the basic display parameters (whole centimetres) are the fallback size.
    """
    if not data or len(data) < 128 or data[:8] != EDID_HEADER:
        return None

    resolution = None
    width_mm = height_mm = None

    dtd = data[54:72]
    pixel_clock = dtd[0] | (dtd[1] << 8)
    if pixel_clock:
        h_active = dtd[2] | ((dtd[4] & 0xF0) << 4)
        v_active = dtd[5] | ((dtd[7] & 0xF0) << 4)
        if h_active and v_active:
            resolution = f"{h_active}x{v_active}"
        h_mm = dtd[12] | ((dtd[14] & 0xF0) << 4)
        v_mm = dtd[13] | ((dtd[14] & 0x0F) << 8)
        if h_mm and v_mm:
            width_mm, height_mm = h_mm, v_mm

    if width_mm is None and data[21] and data[22]:
        width_mm, height_mm = data[21] * 10, data[22] * 10

    return {'resolution': resolution, 'width_mm': width_mm, 'height_mm': height_mm}


def _diagonal(width_mm, height_mm):
    diagonal = diagonal_inches(width_mm, height_mm)
    return None if diagonal is UNKNOWN else diagonal


@source('report_screen_size')
def report_screen_size(context):
    width = context.report('Display[0].physical.width')
    height = context.report('Display[0].physical.height')
    return _diagonal(width, height)


@source('report_resolution')
def report_resolution(context):
    width = context.report('Display[0].output.width')
    height = context.report('Display[0].output.height')
    if not width or not height or not width.isdigit() or not height.isdigit():
        return None
    if int(width) <= 0 or int(height) <= 0:
        return None
    return f"{width}x{height}"


def _xrandr_outputs(context) -> List[Dict[str, Optional[int]]]:
    output = context.run_output(['xrandr', '--current'])
    return parse_xrandr(output) if output else []


@source('xrandr_screen_size')
def xrandr_screen_size(context):
    for display in _xrandr_outputs(context):
        diagonal = _diagonal(display['width_mm'], display['height_mm'])
        if diagonal is not None:
            return diagonal
    return None


@source('xrandr_resolution')
def xrandr_resolution(context):
    for display in _xrandr_outputs(context):
        if display['resolution']:
            return display['resolution']
    return None


def edid_hex(data: bytes) -> str:
    """EDID bytes as the 16-bytes-per-line hex dump edid-decode accepts on stdin"""
    return ''.join(data[offset:offset + 16].hex() + '\n' for offset in range(0, len(data), 16))


def _edid_blobs(context) -> List[bytes]:
    """Non-empty EDID blobs; disconnected connectors expose an empty file"""
    blobs = []
    for path in context.glob(EDID_GLOB):
        data = context.read_bytes(path)
        if data:
            blobs.append(data)
    return blobs


def _edid_decode_results(context):
    for data in _edid_blobs(context):
        output = context.run_output(['edid-decode'], input_text=edid_hex(data))
        if output:
            yield parse_edid_decode(output)


@source('edid_decode_screen_size')
def edid_decode_screen_size(context):
    for info in _edid_decode_results(context):
        diagonal = _diagonal(info['width_mm'], info['height_mm'])
        if diagonal is not None:
            return diagonal
    return None


@source('edid_decode_resolution')
def edid_decode_resolution(context):
    for info in _edid_decode_results(context):
        if info['resolution']:
            return info['resolution']
    return None


def _raw_edid_results(context):
    for data in _edid_blobs(context):
        info = decode_edid(data)
        if info is not None:
            yield info


@source('sysfs_edid_screen_size')
def sysfs_edid_screen_size(context):
    for info in _raw_edid_results(context):
        diagonal = _diagonal(info['width_mm'], info['height_mm'])
        if diagonal is not None:
            return diagonal
    return None


@source('sysfs_edid_resolution')
def sysfs_edid_resolution(context):
    for info in _raw_edid_results(context):
        if info['resolution']:
            return info['resolution']
    return None


@source('drm_modes_resolution')
def drm_modes_resolution(context):
    for path in context.glob(MODES_GLOB):
        text = context.read_text(path)
        if text:
            match = _RESOLUTION.match(text)
            if match:
                return match.group(1)
    return None
