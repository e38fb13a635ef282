"""
Work Time Expression Module

Parses the short time expressions accepted on the command line
("9:15", "31-12 20:20", "2h", "today", "A - B") into absolute intervals.
"""

from .grammar import GRAMMAR, Token, TokenForm, classify
from .interval import Interval, try_parse
from .resolve import (
    SearchDirection,
    now,
    parse_moment,
    resolve_day_of_month,
    resolve_month_year,
    resolve_time_of_day,
    resolve_token,
)

__all__ = [
    # Grammar
    "GRAMMAR",
    "Token",
    "TokenForm",
    "classify",
    # Resolution
    "SearchDirection",
    "now",
    "parse_moment",
    "resolve_day_of_month",
    "resolve_month_year",
    "resolve_time_of_day",
    "resolve_token",
    # Intervals
    "Interval",
    "try_parse",
]
