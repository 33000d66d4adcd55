# hwstats/parsers/base.py
"""
Base class for report extractors.
An extractor pulls one scalar out of the report tool's JSON output.
"""

import re
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple, Union

Segment = Union[str, int]

_SEGMENT = re.compile(r'([^.\[\]]+)|\[(\d+)\]')


def parse_report_path(path: str) -> Tuple[str, List[Segment]]:
    """
    Split a report path into its module name and the segments below it.

    "Display[0].physical.width" -> ("Display", [0, "physical", "width"])

    Raises:
        ValueError: empty path or stray characters
    """
    segments: List[Segment] = []
    position = 0
    for match in _SEGMENT.finditer(path):
        gap = path[position:match.start()]
        if gap not in ('', '.'):
            raise ValueError(f"Invalid report path: {path!r}")
        key, index = match.groups()
        segments.append(key if key is not None else int(index))
        position = match.end()

    if position != len(path) or not segments or not isinstance(segments[0], str):
        raise ValueError(f"Invalid report path: {path!r}")
    return segments[0], segments[1:]


class BaseExtractor(ABC):
    """
    Extracts a named scalar from a report blob.

    The report is a JSON array of modules, each shaped like
    {"type": "<Module>", "result": ...}. Implementations must never raise:
    any mismatch, malformed input or JSON null yields None.
    """

    name = "base"

    @abstractmethod
    def extract(self, blob: str, path: str) -> Optional[str]:
        """
        Extract the scalar at path.

        Args:
            blob: Raw report text
            path: Report path such as "Host.name" or "GPU[0].vendor"

        Returns:
            Scalar rendered as text, or None when absent
        """
        pass
