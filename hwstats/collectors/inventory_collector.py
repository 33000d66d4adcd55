# hwstats/collectors/inventory_collector.py
"""
Inventory Collector
Orchestrates capability detection and field resolution, and assembles the
resolved fields into a report.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from ..connectors.local_connector import LocalConnector
from ..models import ResolvedField, SystemCapabilities
from ..report import render_lines
from .capability_detector import CapabilityDetector
from .field_resolver import FieldResolver
from .field_specs import select_fields


class InventoryReport:
    """Resolved fields of one run, in table order"""

    def __init__(self, fields: List[ResolvedField], capabilities: SystemCapabilities):
        self.fields = fields
        self.capabilities = capabilities
        self.timestamp = datetime.now().isoformat()

    def get(self, field_id: str) -> Optional[ResolvedField]:
        for resolved in self.fields:
            if resolved.field_id == field_id:
                return resolved
        return None

    def render_lines(self, sections: bool = False) -> Iterator[str]:
        return render_lines(self.fields, sections)

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dictionary for serialization"""
        return {
            'timestamp': self.timestamp,
            'fields': {resolved.field_id: resolved.to_dict() for resolved in self.fields},
            'capabilities': self.capabilities.to_dict()
        }


class InventoryCollector:
    """
    Runs one inventory pass:
    1. Detect usable sources (once)
    2. Resolve each requested field, one after another
    3. Assemble the report
    """

    def __init__(self, connector=None, sources_config=None):
        timeout = sources_config.command_timeout if sources_config is not None else None
        self.connector = connector or LocalConnector(timeout=timeout)
        self.sources_config = sources_config
        self.logger = logging.getLogger('inventory_collector')

    def detect_capabilities(self) -> SystemCapabilities:
        detector = CapabilityDetector(self.connector, self.sources_config)
        return detector.detect_all()

    def collect(self, field_ids: List[str] = None,
                capabilities: SystemCapabilities = None) -> InventoryReport:
        """
        Collect the inventory

        Args:
            field_ids: Fields to resolve (all if None or empty)
            capabilities: Pre-detected capabilities; detected here if None

        Returns:
            InventoryReport

        Raises:
            KeyError: an unknown field id was requested
        """
        specs = select_fields(field_ids)
        if capabilities is None:
            capabilities = self.detect_capabilities()

        resolver = FieldResolver(self.connector, capabilities)
        fields = resolver.resolve_all(specs)

        known = sum(1 for resolved in fields if resolved.is_known)
        self.logger.info(f"Resolved {known}/{len(fields)} fields")
        return InventoryReport(fields, capabilities)


def collect_inventory(field_ids: List[str] = None, connector=None, sources_config=None) -> InventoryReport:
    """Convenience function to run a full inventory pass"""
    return InventoryCollector(connector, sources_config).collect(field_ids)
