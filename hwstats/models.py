# hwstats/models.py
"""
Data model for field resolution: capabilities, field specs, probe steps
and resolved fields.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple, Union


class Sentinel(Enum):
    """Marker for a field no source could supply"""
    UNKNOWN = "unknown"

    def __bool__(self):
        return False

    def __repr__(self):
        return "UNKNOWN"


UNKNOWN = Sentinel.UNKNOWN

# Source kinds a ProbeStep can reference
SOURCE_REPORT = "report"
SOURCE_FILE = "file"
SOURCE_COMMAND = "command"
SOURCE_DERIVED = "derived"

SOURCE_KINDS = (SOURCE_REPORT, SOURCE_FILE, SOURCE_COMMAND, SOURCE_DERIVED)

# Value kinds a FieldSpec can declare
KIND_STRING = "string"
KIND_NUMBER = "number"
KIND_ENUM = "enum"


@dataclass(frozen=True)
class SystemCapabilities:
    """
    Sources usable on this host, probed once per run.

    The report tool's JSON output is fetched during probing and kept here
    so every field chain reads the same blob.
    """

    available: FrozenSet[str] = frozenset()
    report_blob: Optional[str] = None

    def has(self, name: str) -> bool:
        return name in self.available

    def to_dict(self) -> Dict[str, Any]:
        return {
            'available': sorted(self.available),
            'report_cached': self.report_blob is not None
        }


@dataclass(frozen=True)
class ProbeStep:
    """
    One link in a field's fallback chain.

    Args:
        capability: Source name that must be available for the step to run
        source: One of 'report', 'file', 'command', 'derived'
        query: Report path, file path/glob, scraper name or computation name
        pattern: Regex applied to file contents (first capture group wins)
        unit: Unit of the raw value, if the field converts units
    """

    capability: str
    source: str
    query: str
    pattern: Optional[str] = None
    unit: Optional[str] = None

    def __post_init__(self):
        if self.source not in SOURCE_KINDS:
            raise ValueError(f"Unknown source kind '{self.source}' for {self.capability}")

    def describe(self) -> str:
        return f"{self.source}:{self.capability}:{self.query}"


@dataclass(frozen=True)
class FieldSpec:
    """Declarative description of one reported field"""

    field_id: str
    label: str
    steps: Tuple[ProbeStep, ...]
    kind: str = KIND_STRING
    unit: Optional[str] = None
    precision: int = 0
    choices: Tuple[str, ...] = ()
    section: str = ""


@dataclass(frozen=True)
class ResolvedField:
    """Outcome of resolving one FieldSpec"""

    field_id: str
    label: str
    raw: str = ""
    value: Union[str, int, float, Sentinel] = UNKNOWN
    unit: Optional[str] = None
    step_index: Optional[int] = None
    section: str = field(default="", compare=False)

    @property
    def is_known(self) -> bool:
        return self.value is not UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['value'] = None if self.value is UNKNOWN else self.value
        return data
