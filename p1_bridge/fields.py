"""Extraction of bracket-delimited values from P1 telegram lines.

Every OBIS line carries its payload between brackets, e.g.::

    1-0:1.8.1(000992.992*kWh)
    0-0:96.14.0(0002)
    0-1:24.2.1(150531200000S)(00811.923*m3)

OBIS prefixes have a known length, so the position of the bracket that opens
the payload is predictable. The helpers below only accept brackets inside a
fixed window and bound the token length. They never raise on malformed input:
``None`` means "no value" and the caller keeps whatever it had before.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

logger = logging.getLogger(__name__)

# Window for the "(" that opens a numeric value, searched from the line end.
NUMBER_BRACKET_MIN = 8
NUMBER_BRACKET_MAX = 32
NUMBER_MAX_LENGTH = 12

# Windows for the "(" that opens a text token.
TEXT_BRACKET_MIN = 8
TEXT_END_BRACKET_MAX = 39
TEXT_START_BRACKET_MAX = 12
TEXT_MAX_LENGTH = 31

# Values with a decimal point are normalized to integer sub-units.
SCALE_FACTOR = 1000

_TERMINATORS = b"\r\n"


def _search_end(line: bytes, length: Optional[int]) -> int:
    """Return the exclusive end of the search window, line terminator excluded."""

    end = len(line) if length is None else max(0, min(length, len(line)))
    while end and line[end - 1] in _TERMINATORS:
        end -= 1
    return end


def _reject(line: bytes, reason: str) -> None:
    logger.debug("No value in %r: %s", line, reason)


def is_number(token: bytes) -> bool:
    """Check the token only holds digits and at most one decimal point."""

    if token.count(b".") > 1:
        return False
    return token.replace(b".", b"").isdigit()


def extract_number(line: bytes, length: Optional[int] = None, scale: bool = True) -> Optional[int]:
    """Read the numeric value in the last bracket pair of *line*.

    Args:
        line: Raw telegram line, optionally including ``\\r\\n``
        length: Number of bytes of *line* to consider (default: all of it)
        scale: Multiply by 1000, turning kWh into Wh, kW into W and m3 into dm3

    Returns:
        The integer value, or ``None`` when the line does not hold a
        well-formed number in the expected place.
    """

    end = _search_end(line, length)
    start = line.rfind(b"(", 0, end)
    if start < 0:
        _reject(line, "no opening bracket")
        return None
    if not NUMBER_BRACKET_MIN <= start <= NUMBER_BRACKET_MAX:
        _reject(line, f"bracket at position {start} outside window")
        return None

    # The unit separator ends the value; unitless values end at the bracket.
    stop = line.rfind(b"*", start + 1, end)
    if stop < 0:
        stop = line.rfind(b")", start + 1, end)
    if stop < 0:
        _reject(line, "unterminated value")
        return None

    token = line[start + 1:stop]
    if not 1 <= len(token) <= NUMBER_MAX_LENGTH:
        _reject(line, f"value length {len(token)} out of range")
        return None
    if not is_number(token):
        _reject(line, "value is not a valid number")
        return None

    value = Decimal(token.decode("ascii"))
    if scale:
        value *= SCALE_FACTOR
    return int(value)


def extract_text(line: bytes, length: Optional[int] = None, from_start: bool = False) -> Optional[str]:
    """Read a text token such as a timestamp from a bracket pair of *line*.

    By default the last bracket pair is used. With *from_start* the first pair
    is used instead, which is where the gas line keeps its capture time.
    """

    end = _search_end(line, length)
    if from_start:
        start = line.find(b"(", 0, end)
        max_start = TEXT_START_BRACKET_MAX
    else:
        start = line.rfind(b"(", 0, end)
        max_start = TEXT_END_BRACKET_MAX
    if start < 0:
        _reject(line, "no opening bracket")
        return None
    if not TEXT_BRACKET_MIN <= start <= max_start:
        _reject(line, f"bracket at position {start} outside window")
        return None

    if from_start:
        stop = line.find(b")", start + 1, end)
    else:
        stop = line.rfind(b")", start + 1, end)
    if stop < 0:
        _reject(line, "unterminated text")
        return None

    token = line[start + 1:stop]
    if not 1 <= len(token) <= TEXT_MAX_LENGTH:
        _reject(line, f"text length {len(token)} out of range")
        return None
    try:
        return token.decode("ascii")
    except UnicodeDecodeError:
        _reject(line, "text is not ASCII")
        return None
