"""
Design (allocator.py)
- Purpose: Derive the next free sequence number for a prefix and render ticket numbers.
- Inputs: Existing ticket numbers (any iterable of str), prefix (already normalized).
- Outputs: int sequence / formatted number string.
- Side effects: None.
- Thread-safety: Pure functions; safe from any thread.
"""

import re
from typing import Iterable

from .config import NUMBER_WIDTH


def next_number(existing_numbers: Iterable[str], prefix: str) -> int:
    """
    Purpose: Return max(sequence) + 1 over numbers matching "<prefix>-<digits>", or 1 if none.
    Inputs: existing_numbers, prefix (matched literally and case-sensitively).
    Outputs: Next sequence value (>= 1).
    Notes: Other prefixes and malformed numbers are skipped, never an error.
    """
    pattern = re.compile(re.escape(prefix) + r"-([0-9]+)")
    highest = 0
    for number in existing_numbers:
        if not isinstance(number, str):
            continue
        match = pattern.fullmatch(number)
        if match:
            highest = max(highest, int(match.group(1)))
    return highest + 1


def format_number(prefix: str, sequence: int) -> str:
    """Render "<prefix>-<sequence>" zero-padded to 6 digits; wider sequences are not truncated."""
    return f"{prefix}-{sequence:0{NUMBER_WIDTH}d}"
