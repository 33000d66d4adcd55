"""
Collectors: capability detection, field resolution and inventory assembly.
"""

from .capability_detector import CapabilityDetector, ALL_SOURCES
from .field_resolver import FieldResolver
from .field_specs import FIELD_SPECS, FIELDS_BY_ID, field_ids, select_fields
from .inventory_collector import InventoryCollector, InventoryReport, collect_inventory

__all__ = [
    'CapabilityDetector',
    'ALL_SOURCES',
    'FieldResolver',
    'FIELD_SPECS',
    'FIELDS_BY_ID',
    'field_ids',
    'select_fields',
    'InventoryCollector',
    'InventoryReport',
    'collect_inventory',
]
