# tests/conftest.py
"""
Shared fixtures: a scripted stand-in for the host and a sample report.
"""

import fnmatch
import json
import sys
from pathlib import Path

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from hwstats.connectors.local_connector import CommandResult
from hwstats.models import SystemCapabilities
from hwstats.parsers import parse_report_path


class FakeConnector:
    """
    In-memory host.

    commands: argv tuple -> stdout text, CommandResult, or a callable
        (args, input_text) returning either
    files: path -> text, bytes, or an exception instance raised on read
    tools: executables resolvable on PATH
    """

    def __init__(self, commands=None, files=None, tools=()):
        self.commands = dict(commands or {})
        self.files = dict(files or {})
        self.tools = set(tools)
        self.executed = []
        self.reads = []

    def execute_command(self, args, input_text=None, timeout=None, log_command=True):
        key = tuple(args)
        self.executed.append(key)
        command = ' '.join(args)
        if key not in self.commands:
            return CommandResult(False, error=f"{args[0]}: not scripted", exit_code=127, command=command)

        response = self.commands[key]
        if callable(response):
            response = response(list(args), input_text)
        if isinstance(response, CommandResult):
            return response
        return CommandResult(True, output=response, command=command)

    def read_file(self, path):
        self.reads.append(path)
        data = self.files.get(path)
        if isinstance(data, Exception):
            raise data
        if isinstance(data, str):
            return data.encode('utf-8')
        return data

    def glob(self, pattern):
        """Segment-aware glob over the in-memory files and their parent directories"""
        depth = pattern.count('/')
        candidates = set()
        for path in self.files:
            parts = path.split('/')
            for end in range(2, len(parts) + 1):
                candidates.add('/'.join(parts[:end]))
        return sorted(
            path for path in candidates
            if path.count('/') == depth and fnmatch.fnmatchcase(path, pattern)
        )

    def which(self, name):
        return f"/usr/bin/{name}" if name in self.tools else None

    def ran(self, program):
        """Whether any command starting with program was executed"""
        return any(args[0] == program for args in self.executed)


def failed(exit_code=1, error="failed"):
    return CommandResult(False, error=error, exit_code=exit_code)


def capabilities(*names, blob=None):
    available = set(names)
    if blob is not None:
        available.add('report')
    return SystemCapabilities(available=frozenset(available), report_blob=blob)


SAMPLE_REPORT = [
    {"type": "Host", "result": {
        "family": "ThinkPad X1 Carbon Gen 9",
        "name": "20XW0026US",
        "version": "ThinkPad X1 Carbon Gen 9",
        "sku": "LENOVO_MT_20XW_BU_Think_FM_ThinkPad X1 Carbon Gen 9",
        "serial": "PF2XK9QW",
        "vendor": "LENOVO"
    }},
    {"type": "CPU", "result": {
        "cpu": "11th Gen Intel(R) Core(TM) i7-1165G7 @ 2.80GHz",
        "vendor": "GenuineIntel",
        "cores": {"physical": 4, "logical": 8, "online": 8}
    }},
    {"type": "Memory", "result": {"total": 16497614848, "used": 5308416000}},
    {"type": "GPU", "result": [
        {"vendor": "Intel", "name": "Iris Xe Graphics", "driver": "i915", "type": "Integrated",
         "memory": {"dedicated": {"total": None, "used": None}}}
    ]},
    {"type": "Display", "result": [
        {"id": 1, "name": "eDP-1",
         "output": {"width": 1920, "height": 1200, "refreshRate": 60},
         "scaled": {"width": 1536, "height": 960},
         "physical": {"width": 344, "height": 193},
         "primary": True}
    ]},
    {"type": "Battery", "result": [
        {"manufacturer": "SMP", "modelName": "5B10W13930", "capacity": 87.0, "status": "Discharging"}
    ]},
]


@pytest.fixture
def report_blob():
    """Report tool output for a laptop, pretty-printed as the tool emits it"""
    return json.dumps(SAMPLE_REPORT, indent=2)


@pytest.fixture
def make_connector():
    return FakeConnector


def jq_compact(blob, path):
    """
    What `jq -c` prints for the filter built from path: one compact JSON
    line per matching module, null where a key or index is missing.
    """
    module, segments = parse_report_path(path)
    lines = []
    for entry in json.loads(blob):
        if entry.get('type') != module:
            continue
        value = entry.get('result')
        for segment in segments:
            if isinstance(segment, int):
                value = value[segment] if isinstance(value, list) and segment < len(value) else None
            else:
                value = value.get(segment) if isinstance(value, dict) else None
        lines.append(json.dumps(value, separators=(',', ':'), ensure_ascii=False))
    return ''.join(line + '\n' for line in lines)
