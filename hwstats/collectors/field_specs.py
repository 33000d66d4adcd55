# hwstats/collectors/field_specs.py
"""
The field table: one FieldSpec per reported field, each with its fallback
chain ordered from most to least reliable source. Every chain ends on a
kernel pseudo-file where one exists; past that the field is UNKNOWN.
"""

from typing import Dict, List, Tuple

from ..models import (
    FieldSpec, ProbeStep,
    KIND_ENUM, KIND_NUMBER,
    SOURCE_COMMAND, SOURCE_DERIVED, SOURCE_FILE, SOURCE_REPORT,
)
from ..utils.metrics import HEALTH_CHOICES
from ..utils.units import CHARGE_AUTO
from .capability_detector import (
    DMIDECODE, FREE, LSBLK, LSPCI, REPORT, UPOWER, XRANDR, EDID_DECODE,
    PROC_CPUINFO, PROC_MEMINFO, SYSFS_BLOCK, SYSFS_DMI, SYSFS_DRM, SYSFS_POWER_SUPPLY,
)
from .sources.storage_sources import STORAGE_TYPES

SECTION_DEVICE = "Device Info"
SECTION_CPU = "CPU"
SECTION_RAM = "RAM"
SECTION_STORAGE = "Storage"
SECTION_GPU = "GPU"
SECTION_SCREEN = "Screen"
SECTION_BATTERY = "Battery"


def report(path: str, unit: str = None) -> ProbeStep:
    return ProbeStep(REPORT, SOURCE_REPORT, path, unit=unit)


def pseudo_file(capability: str, path: str, pattern: str = None, unit: str = None) -> ProbeStep:
    return ProbeStep(capability, SOURCE_FILE, path, pattern=pattern, unit=unit)


def command(capability: str, name: str, unit: str = None) -> ProbeStep:
    return ProbeStep(capability, SOURCE_COMMAND, name, unit=unit)


def derived(capability: str, name: str, unit: str = None) -> ProbeStep:
    return ProbeStep(capability, SOURCE_DERIVED, name, unit=unit)


FIELD_SPECS: Tuple[FieldSpec, ...] = (
    FieldSpec(
        'model', 'Model',
        steps=(
            report('Host.name'),
            pseudo_file(SYSFS_DMI, '/sys/class/dmi/id/product_name'),
            command(DMIDECODE, 'dmidecode_product_name'),
        ),
        section=SECTION_DEVICE,
    ),
    FieldSpec(
        'serial', 'Serial',
        steps=(
            report('Host.serial'),
            pseudo_file(SYSFS_DMI, '/sys/class/dmi/id/product_serial'),
            command(DMIDECODE, 'dmidecode_serial'),
        ),
        section=SECTION_DEVICE,
    ),
    FieldSpec(
        'cpu', 'CPU',
        steps=(
            report('CPU.cpu'),
            pseudo_file(PROC_CPUINFO, '/proc/cpuinfo', pattern=r'^model name\s*:\s*(.+)$'),
            pseudo_file(PROC_CPUINFO, '/proc/cpuinfo', pattern=r'^(?:Hardware|Model)\s*:\s*(.+)$'),
        ),
        section=SECTION_CPU,
    ),
    FieldSpec(
        'ram_gb', 'RAM',
        steps=(
            report('Memory.total', unit='B'),
            command(DMIDECODE, 'dmidecode_memory_total', unit='MB'),
            command(FREE, 'free_memory_total', unit='B'),
            pseudo_file(PROC_MEMINFO, '/proc/meminfo', pattern=r'^MemTotal:\s*(\d+)', unit='KiB'),
        ),
        kind=KIND_NUMBER, unit='GB', precision=1,
        section=SECTION_RAM,
    ),
    FieldSpec(
        'storage_type', 'Storage Type',
        steps=(
            command(LSBLK, 'lsblk_storage_type'),
            derived(SYSFS_BLOCK, 'sysfs_storage_type'),
        ),
        kind=KIND_ENUM, choices=STORAGE_TYPES,
        section=SECTION_STORAGE,
    ),
    FieldSpec(
        'storage_gb', 'Storage Size',
        steps=(
            command(LSBLK, 'lsblk_storage_size', unit='B'),
            derived(SYSFS_BLOCK, 'sysfs_storage_size', unit='sector'),
        ),
        kind=KIND_NUMBER, unit='GB', precision=1,
        section=SECTION_STORAGE,
    ),
    FieldSpec(
        'gpu_type', 'GPU',
        steps=(
            report('GPU[0].name'),
            command(LSPCI, 'lspci_gpu_model'),
        ),
        section=SECTION_GPU,
    ),
    FieldSpec(
        'gpu_vendor', 'GPU Vendor',
        steps=(
            report('GPU[0].vendor'),
            command(LSPCI, 'lspci_gpu_vendor'),
            derived(SYSFS_DRM, 'drm_gpu_vendor'),
        ),
        section=SECTION_GPU,
    ),
    FieldSpec(
        'gpu_driver', 'GPU Driver',
        steps=(
            report('GPU[0].driver'),
            command(LSPCI, 'lspci_gpu_driver'),
        ),
        section=SECTION_GPU,
    ),
    FieldSpec(
        'screen_size', 'Screen Size',
        steps=(
            derived(REPORT, 'report_screen_size'),
            derived(XRANDR, 'xrandr_screen_size'),
            derived(EDID_DECODE, 'edid_decode_screen_size'),
            derived(SYSFS_DRM, 'sysfs_edid_screen_size'),
        ),
        kind=KIND_NUMBER, unit='in', precision=1,
        section=SECTION_SCREEN,
    ),
    FieldSpec(
        'display_resolution', 'Resolution',
        steps=(
            derived(REPORT, 'report_resolution'),
            command(XRANDR, 'xrandr_resolution'),
            command(EDID_DECODE, 'edid_decode_resolution'),
            derived(SYSFS_DRM, 'sysfs_edid_resolution'),
            derived(SYSFS_DRM, 'drm_modes_resolution'),
        ),
        section=SECTION_SCREEN,
    ),
    FieldSpec(
        'battery_capacity', 'Battery Capacity',
        steps=(
            derived(UPOWER, 'upower_battery_capacity'),
            derived(SYSFS_POWER_SUPPLY, 'sysfs_battery_charge_full', unit=CHARGE_AUTO),
            derived(SYSFS_POWER_SUPPLY, 'sysfs_battery_energy_capacity'),
        ),
        kind=KIND_NUMBER, unit='mAh', precision=0,
        section=SECTION_BATTERY,
    ),
    FieldSpec(
        'battery_health', 'Battery Health',
        steps=(
            derived(UPOWER, 'upower_battery_health_percent'),
            derived(UPOWER, 'upower_battery_health_energy'),
            derived(SYSFS_POWER_SUPPLY, 'sysfs_battery_health_charge'),
            derived(SYSFS_POWER_SUPPLY, 'sysfs_battery_health_energy'),
        ),
        kind=KIND_ENUM, choices=HEALTH_CHOICES,
        section=SECTION_BATTERY,
    ),
    FieldSpec(
        'battery_status', 'Battery State',
        steps=(
            command(UPOWER, 'upower_battery_state'),
            derived(SYSFS_POWER_SUPPLY, 'sysfs_battery_status'),
            report('Battery[0].status'),
        ),
        section=SECTION_BATTERY,
    ),
    FieldSpec(
        'battery_charge', 'Battery Charge',
        steps=(
            command(UPOWER, 'upower_battery_charge'),
            derived(SYSFS_POWER_SUPPLY, 'sysfs_battery_capacity'),
            report('Battery[0].capacity'),
        ),
        kind=KIND_NUMBER, unit='%', precision=0,
        section=SECTION_BATTERY,
    ),
)

FIELDS_BY_ID: Dict[str, FieldSpec] = {spec.field_id: spec for spec in FIELD_SPECS}


def field_ids() -> List[str]:
    return [spec.field_id for spec in FIELD_SPECS]


def select_fields(wanted: List[str] = None) -> List[FieldSpec]:
    """Field specs in table order, optionally limited to the given ids"""
    if not wanted:
        return list(FIELD_SPECS)
    unknown = [field_id for field_id in wanted if field_id not in FIELDS_BY_ID]
    if unknown:
        raise KeyError(f"Unknown field(s): {', '.join(unknown)}")
    return [spec for spec in FIELD_SPECS if spec.field_id in wanted]
