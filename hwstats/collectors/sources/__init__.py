"""
Source accessors referenced by ProbeSteps of kind 'command' or 'derived'.
Importing this package registers every accessor.
"""

from .base_source import SOURCES, SourceContext, get_source, source
from . import device_sources
from . import storage_sources
from . import gpu_sources
from . import display_sources
from . import battery_sources

__all__ = [
    'SOURCES',
    'SourceContext',
    'get_source',
    'source',
]
