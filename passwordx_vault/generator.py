"""
Password generation and strength scoring.

Generation draws every character independently from the union of the
selected character classes using :mod:`secrets`. Scoring is a fixed
rubric, not an entropy estimate; the same password always gets the same
score across every client. Length is counted in UTF-16 code units, as
the browser clients count it:

    length >= 8   +20        lowercase present  +15
    length >= 12  +10        uppercase present  +15
    length >= 16  +10        digit present      +15
                             symbol present     +15   (capped at 100)
"""
import re
import secrets
import string
from typing import Optional

from pydantic import BaseModel

UPPERCASE = string.ascii_uppercase
LOWERCASE = string.ascii_lowercase
DIGITS = string.digits
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"
# Used when no character class is selected.
DEFAULT_ALPHABET = LOWERCASE + UPPERCASE + DIGITS

DEFAULT_LENGTH = 16

_LENGTH_POINTS = ((8, 20), (12, 10), (16, 10))
_CLASS_POINTS = (
    (re.compile(r"[a-z]"), 15),
    (re.compile(r"[A-Z]"), 15),
    (re.compile(r"[0-9]"), 15),
    (re.compile(r"[^a-zA-Z0-9]"), 15),
)
MAX_SCORE = 100


class CharClasses(BaseModel):
    """Character classes to draw from."""

    uppercase: bool = True
    lowercase: bool = True
    numbers: bool = True
    symbols: bool = True

    def alphabet(self) -> str:
        charset = ""
        if self.uppercase:
            charset += UPPERCASE
        if self.lowercase:
            charset += LOWERCASE
        if self.numbers:
            charset += DIGITS
        if self.symbols:
            charset += SYMBOLS
        return charset or DEFAULT_ALPHABET


def generate_password(
    length: int = DEFAULT_LENGTH,
    classes: Optional[CharClasses | dict] = None,
) -> str:
    """Generate a random password.

    Args:
        length: Number of characters.
        classes: Selected character classes; all four when omitted. Selecting
            none falls back to letters and digits.

    Raises:
        ValueError: If ``length`` is less than 1.
    """
    if length < 1:
        raise ValueError(f"Password length must be at least 1, got {length}")
    if classes is None:
        classes = CharClasses()
    elif isinstance(classes, dict):
        classes = CharClasses(**classes)
    charset = classes.alphabet()
    return "".join(secrets.choice(charset) for _ in range(length))


def _utf16_length(password: str) -> int:
    # Browser clients measure length in UTF-16 code units.
    return len(password.encode("utf-16-le")) // 2


def estimate_strength(password: str) -> int:
    """Score ``password`` from 0 to 100."""
    score = 0
    length = _utf16_length(password)
    for threshold, points in _LENGTH_POINTS:
        if length >= threshold:
            score += points
    for pattern, points in _CLASS_POINTS:
        if pattern.search(password):
            score += points
    return min(MAX_SCORE, score)


def strength_label(score: int) -> str:
    """Bucket a score: ``weak`` below 40, ``medium`` below 70, else ``strong``."""
    if score < 40:
        return "weak"
    if score < 70:
        return "medium"
    return "strong"
