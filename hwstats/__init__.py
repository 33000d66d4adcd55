"""
hwstats - host hardware inventory.

Resolves a fixed set of hardware facts (model, serial, CPU, RAM, storage,
GPU, screen, battery, resolution) from whatever sources the host offers.

Usage:
    from hwstats import collect_inventory

    report = collect_inventory()
    for line in report.render_lines():
        print(line)
"""

from .models import UNKNOWN, FieldSpec, ProbeStep, ResolvedField, SystemCapabilities
from .collectors.inventory_collector import InventoryCollector, InventoryReport, collect_inventory

__version__ = "0.1.0"

__all__ = [
    "UNKNOWN",
    "FieldSpec",
    "ProbeStep",
    "ResolvedField",
    "SystemCapabilities",
    "InventoryCollector",
    "InventoryReport",
    "collect_inventory",
]
