"""Tokenizer and entity reader for the DXF group-code/value text format.

Every logical record is two lines: an integer group code, then its value.
Group code ``0`` closes the entity being read and opens a new one whose
type is the value.  Code ``8`` changes the layer in effect for every entity
closed from then on; code ``62`` is the entity's colour number; all other
codes are kept per entity, last value winning.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_LAYER = "0"

CODE_ENTITY = 0
CODE_LAYER = 8
CODE_COLOR = 62

BINARY_SENTINEL = b"AutoCAD Binary DXF"
TEXT_ENCODINGS = ("utf-8-sig", "cp1252")
# every byte maps to a character, so this always succeeds
FALLBACK_ENCODING = "latin-1"


class DxfFieldError(ValueError):
    """A required field of one entity is missing or not numeric."""

    def __init__(self, entity_type: str, code: int, value: Optional[str] = None):
        self.entity_type = entity_type
        self.code = code
        self.value = value
        if value is None:
            message = f"{entity_type}: group code {code} missing"
        else:
            message = f"{entity_type}: group code {code} has non-numeric value {value!r}"
        super().__init__(message)


@dataclass
class DxfEntity:
    """One record read from the text, up to the next group code 0."""

    type: str
    group_codes: Dict[int, str] = field(default_factory=dict)
    layer: str = DEFAULT_LAYER
    color: Optional[str] = None
    tags: List[Tuple[int, str]] = field(default_factory=list)

    def has(self, *codes: int) -> bool:
        return all(code in self.group_codes for code in codes)

    def values(self, code: int) -> List[str]:
        """Every value recorded for ``code``, in reading order."""
        return [value for tag, value in self.tags if tag == code]

    def float_field(self, code: int) -> float:
        value = self.group_codes.get(code)
        if value is None:
            raise DxfFieldError(self.type, code)
        return parse_float(value, self.type, code)

    def int_field(self, code: int, default: int = 0) -> int:
        value = self.group_codes.get(code)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            # some writers store integer flags as reals ("1.0")
            return int(parse_float(value, self.type, code))


def parse_float(value: str, entity_type: str = "", code: int = -1) -> float:
    try:
        number = float(value)
    except ValueError:
        raise DxfFieldError(entity_type, code, value) from None
    if not math.isfinite(number):
        raise DxfFieldError(entity_type, code, value)
    return number


def iter_group_pairs(lines: Iterable[str]) -> Iterator[Tuple[int, str]]:
    """Yield ``(code, value)`` pairs from raw lines.

    Blank lines are skipped where a group code is expected, and a line that
    is not an integer there is dropped so reading resumes on the next line.
    The value line is taken as-is (trimmed), empty or not.
    """
    stream = iter(lines)
    for line in stream:
        text = line.strip()
        if not text:
            continue
        try:
            code = int(text)
        except ValueError:
            logger.debug("skipping non-numeric group code line %r", text)
            continue
        value = next(stream, None)
        if value is None:
            logger.debug("group code %d at end of input has no value", code)
            return
        yield code, value.strip()


@dataclass
class _ReaderState:
    entities: List[DxfEntity] = field(default_factory=list)
    current: Optional[DxfEntity] = None
    layer: str = DEFAULT_LAYER

    def close_current(self) -> None:
        if self.current is not None:
            self.current.layer = self.layer
            self.entities.append(self.current)
            self.current = None

    def apply(self, code: int, value: str) -> None:
        if code == CODE_ENTITY:
            self.close_current()
            self.current = DxfEntity(type=value)
            return
        entity = self.current
        if entity is None:
            return
        entity.tags.append((code, value))
        if code == CODE_LAYER:
            self.layer = value
        elif code == CODE_COLOR:
            entity.color = value
        else:
            entity.group_codes[code] = value


def read_entities(pairs: Iterable[Tuple[int, str]]) -> List[DxfEntity]:
    state = _ReaderState()
    for code, value in pairs:
        state.apply(code, value)
    state.close_current()
    return state.entities


def parse_entities(text: str) -> List[DxfEntity]:
    """Read every entity of a DXF text, in document order."""
    return read_entities(iter_group_pairs(text.splitlines()))


def decode_dxf(data: bytes) -> Optional[str]:
    """Text of an ASCII DXF buffer, or ``None`` for binary DXF."""
    if isinstance(data, str):
        return data
    data = bytes(data)
    if data.startswith(BINARY_SENTINEL):
        logger.warning("binary DXF input is not supported")
        return None
    for encoding in TEXT_ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    logger.warning("DXF input is not valid %s; reading it as %s",
                   " or ".join(TEXT_ENCODINGS), FALLBACK_ENCODING)
    return data.decode(FALLBACK_ENCODING)


__all__ = [
    'DEFAULT_LAYER',
    'DxfEntity',
    'DxfFieldError',
    'decode_dxf',
    'iter_group_pairs',
    'parse_entities',
    'parse_float',
    'read_entities',
]
