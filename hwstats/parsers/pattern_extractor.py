# hwstats/parsers/pattern_extractor.py
"""
Pattern-backed report extractor.
Walks the raw report text bracket by bracket instead of parsing it whole,
so it works where no JSON query tool is installed.
"""

import json
import logging
import re
from typing import Optional, Tuple

from .base import BaseExtractor, parse_report_path

_BARE_SCALAR = re.compile(r'-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?|true|false|null')
_CLOSERS = {'{': '}', '[': ']'}


def _skip_ws(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in ' \t\r\n':
        pos += 1
    return pos


def _string_end(text: str, pos: int) -> Optional[int]:
    """Index just past the string literal opening at pos"""
    i = pos + 1
    while i < len(text):
        c = text[i]
        if c == '\\':
            i += 2
            continue
        if c == '"':
            return i + 1
        i += 1
    return None


def _container_end(text: str, pos: int) -> Optional[int]:
    """Index just past the container opening at pos; None if unbalanced"""
    expected = [_CLOSERS[text[pos]]]
    i = pos + 1
    while i < len(text):
        c = text[i]
        if c == '"':
            end = _string_end(text, i)
            if end is None:
                return None
            i = end
            continue
        if c in _CLOSERS:
            expected.append(_CLOSERS[c])
        elif c in '}]':
            if c != expected.pop():
                return None
            if not expected:
                return i + 1
        i += 1
    return None


def _value_span(text: str, pos: int) -> Optional[Tuple[int, int]]:
    pos = _skip_ws(text, pos)
    if pos >= len(text):
        return None
    c = text[pos]
    if c in _CLOSERS:
        end = _container_end(text, pos)
    elif c == '"':
        end = _string_end(text, pos)
    else:
        match = _BARE_SCALAR.match(text, pos)
        end = match.end() if match else None
    if end is None:
        return None
    return pos, end


def _decode_string(literal: str) -> Optional[str]:
    try:
        return json.loads(literal)
    except ValueError:
        return None


def _next_member(text: str, pos: int) -> Optional[int]:
    """Position of the next member after pos, or None at the container end"""
    pos = _skip_ws(text, pos)
    if pos < len(text) and text[pos] == ',':
        return pos + 1
    return None


def _member_value(text: str, start: int, key: str) -> Optional[int]:
    """Start of the value stored under key at the top level of the object at start"""
    pos = start + 1
    while True:
        pos = _skip_ws(text, pos)
        if pos >= len(text) or text[pos] != '"':
            return None
        key_end = _string_end(text, pos)
        if key_end is None:
            return None
        name = _decode_string(text[pos:key_end])
        colon = _skip_ws(text, key_end)
        if colon >= len(text) or text[colon] != ':':
            return None
        if name == key:
            return colon + 1
        span = _value_span(text, colon + 1)
        if span is None:
            return None
        pos = _next_member(text, span[1])
        if pos is None:
            return None


def _element_value(text: str, start: int, index: int) -> Optional[int]:
    """Start of the index-th top-level element of the array at start"""
    pos = start + 1
    for _ in range(index):
        span = _value_span(text, pos)
        if span is None:
            return None
        pos = _next_member(text, span[1])
        if pos is None:
            return None
    pos = _skip_ws(text, pos)
    if pos >= len(text) or text[pos] == ']':
        return None
    return pos


class PatternExtractor(BaseExtractor):
    """
    Extracts report values by scanning the text.

    Finds the module whose "type" matches the first path segment, then
    narrows into the innermost container each further segment names, and
    reads the terminal key there. Only top-level members of each container
    are considered, so a key nested deeper cannot shadow the one asked for.
    """

    name = "pattern"

    def __init__(self):
        self.logger = logging.getLogger(f"extractor.{self.__class__.__name__}")

    def extract(self, blob: str, path: str) -> Optional[str]:
        try:
            module, segments = parse_report_path(path)
        except ValueError as e:
            self.logger.debug(str(e))
            return None
        if not blob:
            return None

        pos = self._module_result(blob, module)
        for segment in segments:
            if pos is None:
                return None
            span = _value_span(blob, pos)
            if span is None:
                return None
            start = span[0]
            if isinstance(segment, int):
                pos = _element_value(blob, start, segment) if blob[start] == '[' else None
            else:
                pos = _member_value(blob, start, segment) if blob[start] == '{' else None

        if pos is None:
            return None
        return self._scalar_at(blob, pos)

    def _module_result(self, blob: str, module: str) -> Optional[int]:
        """Start of the "result" value of the first module of this type"""
        pos = _skip_ws(blob, 0)
        if pos >= len(blob) or blob[pos] != '[':
            return None
        if _container_end(blob, pos) is None:
            self.logger.debug("Report blob is truncated or unbalanced")
            return None

        index = 0
        while True:
            element = _element_value(blob, pos, index)
            if element is None:
                return None
            if blob[element] == '{':
                type_pos = _member_value(blob, element, 'type')
                if type_pos is not None:
                    span = _value_span(blob, type_pos)
                    if span and blob[span[0]] == '"' and _decode_string(blob[span[0]:span[1]]) == module:
                        return _member_value(blob, element, 'result')
            index += 1

    @staticmethod
    def _scalar_at(blob: str, pos: int) -> Optional[str]:
        span = _value_span(blob, pos)
        if span is None:
            return None
        literal = blob[span[0]:span[1]]
        if literal[0] in _CLOSERS or literal == 'null':
            return None
        if literal[0] == '"':
            value = _decode_string(literal)
            if value is None:
                return None
            value = value.strip()
            return value or None
        return literal
