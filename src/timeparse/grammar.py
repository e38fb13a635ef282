"""
Time Expression Grammar for Work

Recognizes the lexical form of a single time token. Each form is a
whole-string regular expression; the first form that matches wins.

Supported forms:
- "9", "09"           at an hour (0-23)
- "9:15"              at hour:minute
- "31 20:20"          at day-of-month, hour:minute
- "31-12 20:20"       at day-month, hour:minute
- "2h"                N hours ago/until (1-23)
- "45m"               N minutes ago/until (1-59)
- "1:30h"             hours:minutes ago/until
- "today"/"yesterday" midnight of that day
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum

from src.core.errors import UserError

logger = logging.getLogger(__name__)

_HOUR = r"(0?\d|1\d|2[0-3])"
_MINUTE = r"(0?\d|[1-5]\d)"
_DAY = r"(0?[1-9]|[1-2]\d|3[01])"
_MONTH = r"(0?[1-9]|1[0-2])"


class TokenForm(Enum):
    """The lexical forms a time token can take."""

    AT_HOUR = "H"
    AT_HOUR_MINUTES = "H:M"
    AT_DAY_HOUR_MINUTES = "D H:M"
    AT_DAY_MONTH_HOUR_MINUTES = "D-M H:M"
    HOURS_OFFSET = "Nh"
    MINUTES_OFFSET = "Nm"
    HOURS_MINUTES_OFFSET = "H:Mh"
    TODAY = "today"
    YESTERDAY = "yesterday"


# Ordered grammar table, built once at import and never mutated
GRAMMAR: tuple[tuple[TokenForm, re.Pattern[str]], ...] = (
    (TokenForm.AT_HOUR, re.compile(rf"{_HOUR}")),
    (TokenForm.AT_HOUR_MINUTES, re.compile(rf"{_HOUR}:{_MINUTE}")),
    (TokenForm.AT_DAY_HOUR_MINUTES, re.compile(rf"{_DAY}\s{_HOUR}:{_MINUTE}")),
    (TokenForm.AT_DAY_MONTH_HOUR_MINUTES, re.compile(rf"{_DAY}-{_MONTH}\s{_HOUR}:{_MINUTE}")),
    (TokenForm.HOURS_OFFSET, re.compile(r"(0?[1-9]|1\d|2[0-3])h")),
    (TokenForm.MINUTES_OFFSET, re.compile(r"(0?[1-9]|[1-5]\d)m")),
    # NOTE: accepts 0:0h, which resolves to now
    (TokenForm.HOURS_MINUTES_OFFSET, re.compile(rf"{_HOUR}:{_MINUTE}h")),
    (TokenForm.TODAY, re.compile(r"today")),
    (TokenForm.YESTERDAY, re.compile(r"yesterday")),
)


@dataclass(frozen=True)
class Token:
    """A recognized time token with its numeric fields."""

    form: TokenForm
    text: str
    values: tuple[int, ...] = ()


def classify(text: str) -> Token:
    """
    Recognize the form of a single time token.

    Args:
        text: Token to classify; surrounding whitespace is ignored

    Returns:
        Token carrying the matched form and its captured numbers in order

    Raises:
        UserError: If the token matches none of the known forms
    """
    unit = text.strip()
    for form, pattern in GRAMMAR:
        match = pattern.fullmatch(unit)
        if match:
            values = tuple(int(group) for group in match.groups())
            logger.debug(f"Classified {unit!r} as {form.value} {values}")
            return Token(form=form, text=unit, values=values)

    raise UserError(f"Invalid time specifier: {unit}")

