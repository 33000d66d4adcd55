# hwstats/report.py
"""
Output boundary: turns resolved fields into printable text.
UNKNOWN becomes "N/A" here and nowhere else.
"""

from typing import Iterable, Iterator, List

from .models import ResolvedField

NOT_AVAILABLE = "N/A"

# Unit -> format template for the rendered value
UNIT_FORMATS = {
    'GB': "{value} GB",
    'mAh': "{value} mAh",
    'in': "{value}in",
    '%': "{value}%",
}


def format_value(resolved: ResolvedField) -> str:
    if not resolved.is_known:
        return NOT_AVAILABLE
    template = UNIT_FORMATS.get(resolved.unit, "{value}")
    return template.format(value=resolved.value)


def render_lines(fields: Iterable[ResolvedField], sections: bool = False) -> Iterator[str]:
    """
    Yield "<Label>: <value>" lines, optionally grouped under
    "--- <Section> ---" headers, keeping field order.
    """
    current_section = None
    first = True
    for resolved in fields:
        if sections and resolved.section != current_section:
            current_section = resolved.section
            if not first:
                yield ""
            yield f"--- {current_section} ---"
        first = False
        yield f"{resolved.label}: {format_value(resolved)}"


def render(fields: List[ResolvedField], sections: bool = False) -> str:
    return "\n".join(render_lines(fields, sections))
