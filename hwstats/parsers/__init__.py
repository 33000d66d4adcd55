"""
Report extractors.

Two interchangeable strategies pull scalars out of the report tool's JSON:
- JqExtractor: delegates to the jq query tool
- PatternExtractor: scans the raw text, used when jq is missing

Usage:
    from .parsers import select_extractor

    extractor = select_extractor(capabilities, connector)
    name = extractor.extract(capabilities.report_blob, 'Host.name')
"""

from .base import BaseExtractor, parse_report_path
from .jq_extractor import JqExtractor, build_filter
from .pattern_extractor import PatternExtractor
from .registry import select_extractor

__all__ = [
    'BaseExtractor',
    'parse_report_path',
    'JqExtractor',
    'build_filter',
    'PatternExtractor',
    'select_extractor',
]
