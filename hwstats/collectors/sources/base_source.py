# hwstats/collectors/sources/base_source.py
"""
Shared plumbing for source accessors.

Accessors are plain functions registered under a name; ProbeSteps of kind
'command' or 'derived' refer to them by that name. Each takes a
SourceContext and returns a raw value, or None when the source has
nothing to offer.
"""

import logging
import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ...connectors.local_connector import CommandResult

SOURCES: Dict[str, Callable] = {}


def source(name: str):
    """Register an accessor under name"""
    def decorator(func):
        if name in SOURCES:
            raise ValueError(f"Source accessor '{name}' registered twice")
        SOURCES[name] = func
        return func
    return decorator


def get_source(name: str) -> Callable:
    try:
        return SOURCES[name]
    except KeyError:
        raise KeyError(f"No source accessor named '{name}'")


class SourceContext:
    """
    Everything an accessor may touch during one run: the connector, the
    probed capabilities and the run's report extractor.

    Command output and binary file contents are kept for the rest of the
    run, so tools consulted by several fields (lsblk, lspci, upower, xrandr)
    run only once and EDID blobs are read only once.
    """

    def __init__(self, connector, capabilities, extractor):
        self.connector = connector
        self.capabilities = capabilities
        self.extractor = extractor
        self.logger = logging.getLogger('source_context')
        self._command_cache: Dict[Tuple[Tuple[str, ...], Optional[str]], CommandResult] = {}
        self._bytes_cache: Dict[str, Optional[bytes]] = {}

    def run(self, args: Sequence[str], input_text: str = None) -> CommandResult:
        key = (tuple(args), input_text)
        if key not in self._command_cache:
            self._command_cache[key] = self.connector.execute_command(list(args), input_text=input_text)
        return self._command_cache[key]

    def run_output(self, args: Sequence[str], input_text: str = None) -> Optional[str]:
        """stdout of a successful command with output, else None"""
        result = self.run(args, input_text)
        if not result.success or not result.output.strip():
            return None
        return result.output

    def read_text(self, path: str) -> Optional[str]:
        data = self.connector.read_file(path)
        if data is None:
            return None
        text = data.decode('utf-8', errors='replace').strip()
        return text or None

    def read_bytes(self, path: str) -> Optional[bytes]:
        if path not in self._bytes_cache:
            self._bytes_cache[path] = self.connector.read_file(path)
        return self._bytes_cache[path]

    def glob(self, pattern: str) -> List[str]:
        return self.connector.glob(pattern)

    def first_text(self, pattern: str) -> Optional[str]:
        """Contents of the first readable, non-empty file matching pattern"""
        for path in self.glob(pattern):
            text = self.read_text(path)
            if text is not None:
                return text
        return None

    def read_file_value(self, pattern: str, regex: str = None) -> Optional[str]:
        text = self.first_text(pattern)
        if text is None or regex is None:
            return text
        match = re.search(regex, text, re.MULTILINE)
        if not match:
            return None
        return match.group(1) if match.groups() else match.group(0)

    def report(self, path: str) -> Optional[str]:
        blob = self.capabilities.report_blob
        if blob is None:
            return None
        return self.extractor.extract(blob, path)


def leading_number(text: Optional[str]) -> Optional[float]:
    """First number in text ("48.3 Wh" -> 48.3), or None"""
    if text is None:
        return None
    match = re.search(r'-?\d+(?:\.\d+)?', text)
    return float(match.group(0)) if match else None
