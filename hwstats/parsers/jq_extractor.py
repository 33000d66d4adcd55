# hwstats/parsers/jq_extractor.py
"""
Structured report extractor backed by the jq query tool.
"""

import json
import logging
from typing import Optional

from .base import BaseExtractor, parse_report_path


def build_filter(path: str) -> str:
    """
    Translate a report path into a jq filter.

    "Display[0].physical.width" ->
    '.[] | select(.type == "Display") | .result[0]["physical"]["width"]'
    """
    module, segments = parse_report_path(path)
    selector = ''.join(
        f'[{segment}]' if isinstance(segment, int) else f'[{json.dumps(segment)}]'
        for segment in segments
    )
    return f'.[] | select(.type == {json.dumps(module)}) | .result{selector}'


class JqExtractor(BaseExtractor):
    """
    Delegates extraction to jq.

    jq prints each result as one line of compact JSON, which is decoded
    here: strings are returned stripped, numbers and booleans as their
    JSON text. null, empty output and containers are all treated as
    absent.
    """

    name = "jq"

    def __init__(self, connector, command: str = 'jq'):
        self.connector = connector
        self.command = command
        self.logger = logging.getLogger(f"extractor.{self.__class__.__name__}")

    def extract(self, blob: str, path: str) -> Optional[str]:
        if not blob:
            return None
        try:
            jq_filter = build_filter(path)
        except ValueError as e:
            self.logger.debug(str(e))
            return None

        result = self.connector.execute_command(
            [self.command, '-c', jq_filter], input_text=blob, log_command=False
        )
        if not result.success:
            self.logger.debug(f"jq failed for {path}: {result.error.strip()[:200]}")
            return None

        lines = result.output.strip().splitlines()
        if not lines:
            return None
        literal = lines[0].strip()
        try:
            value = json.loads(literal)
        except ValueError as e:
            self.logger.debug(f"jq returned non-JSON output for {path}: {e}")
            return None

        if value is None or isinstance(value, (dict, list)):
            return None
        if isinstance(value, str):
            return value.strip() or None
        return literal
