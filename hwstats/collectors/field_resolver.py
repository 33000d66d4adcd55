# hwstats/collectors/field_resolver.py
"""
Field Resolver
Runs a field's ProbeStep chain in order and keeps the first valid value.
"""

import logging
import re
from typing import Any, Iterable, List, Optional

from ..exceptions import MalformedValueError
from ..models import (
    UNKNOWN, FieldSpec, ProbeStep, ResolvedField,
    KIND_ENUM, KIND_NUMBER,
    SOURCE_COMMAND, SOURCE_DERIVED, SOURCE_FILE, SOURCE_REPORT,
)
from ..parsers import select_extractor
from ..utils.units import normalize, round_half_away
from .sources import SourceContext, get_source

# Vendor firmware fillers that mean "no value"
PLACEHOLDER_VALUES = frozenset({
    'to be filled by o.e.m.',
    'default string',
    'not specified',
    'not applicable',
    'none',
    'system product name',
    'system serial number',
    '0123456789',
})

# Units of quantities that only exist with a positive magnitude
POSITIVE_UNITS = frozenset({'GB', 'mAh', 'in'})


class FieldResolver:
    """
    Resolves FieldSpecs against the sources probed for this run.

    Steps whose capability is absent are skipped without being touched.
    A step that returns nothing, or something that fails validation, is
    passed over; an exception inside a step never escapes resolve().
    """

    def __init__(self, connector, capabilities, extractor=None):
        """
        Args:
            connector: LocalConnector (or compatible) instance
            capabilities: SystemCapabilities from CapabilityDetector
            extractor: Report extractor; chosen from capabilities if None
        """
        self.capabilities = capabilities
        if extractor is None:
            extractor = select_extractor(capabilities, connector)
        self.context = SourceContext(connector, capabilities, extractor)
        self.logger = logging.getLogger('field_resolver')

    def resolve(self, spec: FieldSpec) -> ResolvedField:
        """
        Resolve one field

        Returns:
            ResolvedField carrying the first valid value, or UNKNOWN
        """
        for index, step in enumerate(spec.steps):
            if not self.capabilities.has(step.capability):
                self.logger.debug(f"[{spec.field_id}] step {index} skipped: {step.capability} unavailable")
                continue

            try:
                raw = self._read(step)
                if raw is None or raw is UNKNOWN:
                    self.logger.debug(f"[{spec.field_id}] step {index} ({step.describe()}) absent")
                    continue
                raw_text = str(raw).strip()
                value = self._validate(spec, step, raw_text)
            except Exception as e:
                self.logger.debug(f"[{spec.field_id}] step {index} ({step.describe()}) malformed: {e}")
                continue

            if value is None:
                self.logger.debug(f"[{spec.field_id}] step {index} ({step.describe()}) empty")
                continue

            self.logger.debug(f"[{spec.field_id}] resolved by step {index} ({step.describe()}): {value!r}")
            return ResolvedField(
                field_id=spec.field_id,
                label=spec.label,
                raw=raw_text,
                value=value,
                unit=spec.unit,
                step_index=index,
                section=spec.section
            )

        self.logger.debug(f"[{spec.field_id}] no source available")
        return ResolvedField(
            field_id=spec.field_id,
            label=spec.label,
            unit=spec.unit,
            section=spec.section
        )

    def resolve_all(self, specs: Iterable[FieldSpec]) -> List[ResolvedField]:
        return [self.resolve(spec) for spec in specs]

    def _read(self, step: ProbeStep) -> Any:
        if step.source == SOURCE_REPORT:
            return self.context.report(step.query)
        if step.source == SOURCE_FILE:
            return self.context.read_file_value(step.query, step.pattern)
        if step.source in (SOURCE_COMMAND, SOURCE_DERIVED):
            return get_source(step.query)(self.context)
        raise MalformedValueError(f"Unsupported source kind: {step.source}")

    def _validate(self, spec: FieldSpec, step: ProbeStep, raw_text: str) -> Optional[Any]:
        """Typed value in the field's canonical unit, or None if empty"""
        if not raw_text:
            return None

        if spec.kind == KIND_NUMBER:
            if spec.unit is None:
                return round_half_away(raw_text, spec.precision)
            value = normalize(raw_text, step.unit, spec.unit, spec.precision)
            if value < 0 or (value == 0 and spec.unit in POSITIVE_UNITS):
                raise MalformedValueError(f"{value} {spec.unit} is not a plausible {spec.field_id}")
            return value

        if spec.kind == KIND_ENUM:
            if raw_text not in spec.choices:
                raise MalformedValueError(f"'{raw_text}' is not one of {', '.join(spec.choices)}")
            return raw_text

        value = re.sub(r'\s+', ' ', raw_text)
        if value.lower() in PLACEHOLDER_VALUES:
            return None
        return value
