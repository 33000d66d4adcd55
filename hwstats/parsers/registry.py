# hwstats/parsers/registry.py
"""
Extractor selection.
The jq-backed extractor is used when jq is available, the pattern-backed
one otherwise. Both honour the same contract, so callers never need to
know which one they got.
"""

import logging

from .base import BaseExtractor
from .jq_extractor import JqExtractor
from .pattern_extractor import PatternExtractor

JQ_SOURCE = 'jq'

logger = logging.getLogger('extractor_registry')


def select_extractor(capabilities, connector) -> BaseExtractor:
    """
    Pick the extractor for this run.

    Args:
        capabilities: Probed SystemCapabilities
        connector: Connector used to run jq

    Returns:
        BaseExtractor instance
    """
    if capabilities.has(JQ_SOURCE):
        extractor = JqExtractor(connector)
    else:
        extractor = PatternExtractor()
    logger.debug(f"Using {extractor.__class__.__name__} for report extraction")
    return extractor
