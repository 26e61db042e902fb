"""Statistical subtitles: formatting, templates and dispatch."""

from plotstats.subtitles.dispatch import (
    dispatch,
    parse_family,
    subtitle,
    subtitle_contingency,
    subtitle_correlation,
    subtitle_groups,
    subtitle_onesample,
    supported_types,
)
from plotstats.subtitles.formatting import format_p, format_value, round_half_up
from plotstats.subtitles.templates import Subtitle, Symbol, bayes_caption

__all__ = [
    "Subtitle",
    "Symbol",
    "bayes_caption",
    "dispatch",
    "format_p",
    "format_value",
    "parse_family",
    "round_half_up",
    "subtitle",
    "subtitle_contingency",
    "subtitle_correlation",
    "subtitle_groups",
    "subtitle_onesample",
    "supported_types",
]
