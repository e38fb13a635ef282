"""
Work Report Module

Duration formats and the CSV/JSON/human renderers for tallies.
"""

from .formats import (
    TimeFormat,
    approximate_hours,
    approximate_minutes,
    format_time,
    human_readable,
    render,
    render_csv,
    render_human,
    render_json,
)

__all__ = [
    "TimeFormat",
    "approximate_hours",
    "approximate_minutes",
    "format_time",
    "human_readable",
    "render",
    "render_csv",
    "render_human",
    "render_json",
]
