"""Subtitle templates.

A subtitle is a list of comma-separated segments. Each segment carries two
renderings: plain Unicode text (what ``str()`` returns, used by the CLI and
in tests) and matplotlib mathtext (used as the plot subtitle).

Frequentist template::

    t(52) = 2.10, p = 0.04, g = 0.57, CI95% [0.03, 1.10], n = 54

Bayes template::

    t(52) = 2.10, log_e(BF01) = -0.62, r_Cauchy = 0.71, n = 54
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from plotstats.stats.results import StatResult
from plotstats.subtitles.formatting import (
    format_conf_level,
    format_df,
    format_n,
    format_p,
    format_value,
)


@dataclass(frozen=True)
class Symbol:
    """A symbol in both renderings."""

    text: str
    math: str


STATISTIC_SYMBOLS: Dict[str, Symbol] = {
    "t": Symbol("t", r"$\mathit{t}$"),
    "F": Symbol("F", r"$\mathit{F}$"),
    "V": Symbol("V", r"$\mathit{V}$"),
    "U": Symbol("U", r"$\mathit{U}$"),
    "chi2": Symbol("χ²", r"$\chi^2$"),
    "chi2_kw": Symbol("χ²_Kruskal-Wallis", r"$\chi^2_{\mathrm{Kruskal-Wallis}}$"),
    "chi2_friedman": Symbol("χ²_Friedman", r"$\chi^2_{\mathrm{Friedman}}$"),
}

EFFSIZE_SYMBOLS: Dict[str, Symbol] = {
    "d": Symbol("d", r"$\mathit{d}$"),
    "g": Symbol("g", r"$\mathit{g}$"),
    "eta2": Symbol("η²", r"$\eta^2$"),
    "eta2_p": Symbol("η²p", r"$\eta^2_p$"),
    "omega2": Symbol("ω²", r"$\omega^2$"),
    "omega2_p": Symbol("ω²p", r"$\omega^2_p$"),
    "r_rankbis": Symbol("r_rank-biserial", r"$r_{\mathrm{rank-biserial}}$"),
    "epsilon2": Symbol("ε²_ordinal", r"$\epsilon^2_{\mathrm{ordinal}}$"),
    "kendall_w": Symbol("W_Kendall", r"$W_{\mathrm{Kendall}}$"),
    "xi": Symbol("ξ", r"$\xi$"),
    "mu_trimmed": Symbol("μ_trimmed", r"$\hat{\mu}_{\mathrm{trimmed}}$"),
    "r_pearson": Symbol("r_Pearson", r"$r_{\mathrm{Pearson}}$"),
    "rho_spearman": Symbol("ρ_Spearman", r"$\rho_{\mathrm{Spearman}}$"),
    "r_pb": Symbol("ρ_pb", r"$\rho_{\mathrm{pb}}$"),
    "cramer_v": Symbol("V_Cramer", r"$V_{\mathrm{Cramer}}$"),
    "cohen_g": Symbol("g_Cohen", r"$g_{\mathrm{Cohen}}$"),
}

P_SYMBOL = Symbol("p", r"$\mathit{p}$")
N_SYMBOL = Symbol("n", r"$\mathit{n}$")
LOG_BF01_SYMBOL = Symbol("log_e(BF01)", r"$\log_e(\mathrm{BF}_{01})$")
CAUCHY_SYMBOL = Symbol("r_Cauchy", r"$r_{\mathrm{Cauchy}}$")
JZS_SYMBOL = Symbol("r_Cauchy^JZS", r"$r_{\mathrm{Cauchy}}^{\mathrm{JZS}}$")


@dataclass(frozen=True)
class Segment:
    text: str
    math: str


def _escape_math(value: str) -> str:
    return value.replace("%", r"\%")


def _segment(symbol: Symbol, value: str, args: Optional[str] = None) -> Segment:
    head_text = symbol.text if args is None else f"{symbol.text}({args})"
    head_math = symbol.math if args is None else f"{symbol.math}({args})"
    return Segment(f"{head_text} = {value}", f"{head_math} = {value}")


class Subtitle:
    """Rendered statistical label (plot subtitle or Bayes caption).

    ``str(subtitle)`` gives the plain-text rendering, ``subtitle.mathtext``
    the matplotlib one. Two subtitles are equal when their plain text is.
    """

    def __init__(self, segments: Iterable[Segment], prefix: str = ""):
        self.segments: List[Segment] = list(segments)
        self.prefix = prefix

    @property
    def text(self) -> str:
        return self.prefix + ", ".join(s.text for s in self.segments)

    @property
    def mathtext(self) -> str:
        return self.prefix + ", ".join(s.math for s in self.segments)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Subtitle({self.text!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Subtitle):
            return self.text == other.text
        if isinstance(other, str):
            return self.text == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.text)


def _statistic_segment(result: StatResult, k: int) -> Segment:
    symbol = STATISTIC_SYMBOLS[result.statistic_symbol]
    dfs = [format_df(d, k) for d in (result.df1, result.df2) if d is not None]
    args = ", ".join(dfs) if dfs else None
    return _segment(symbol, format_value(result.statistic, k), args)


def _effsize_segments(result: StatResult, k: int) -> List[Segment]:
    symbol = EFFSIZE_SYMBOLS[result.effsize]
    level = format_conf_level(result.conf_level)
    bounds = f"[{format_value(result.conf_low, k)}, {format_value(result.conf_high, k)}]"
    return [
        _segment(symbol, format_value(result.estimate, k)),
        Segment(f"CI{level}% {bounds}", rf"$\mathrm{{CI}}_{{{_escape_math(level + '%')}}}$ {bounds}"),
    ]


def frequentist_subtitle(result: StatResult, k: int = 2) -> Subtitle:
    """Statistic, df, p-value, effect size with CI and sample size.

    The effect-size and CI segments are omitted when the test has no
    effect size.
    """
    segments = [_statistic_segment(result, k), _segment(P_SYMBOL, format_p(result.p_value, k))]
    if result.has_effsize:
        segments.extend(_effsize_segments(result, k))
    segments.append(_segment(N_SYMBOL, format_n(result.n)))
    return Subtitle(segments)


def proportion_subtitle(result: StatResult, k: int = 2) -> Subtitle:
    """Goodness-of-fit subtitle: statistic, df, p-value and sample size."""
    segments = [
        _statistic_segment(result, k),
        _segment(P_SYMBOL, format_p(result.p_value, k)),
        _segment(N_SYMBOL, format_n(result.n)),
    ]
    return Subtitle(segments)


def bayes_subtitle(result: StatResult, k: int = 2) -> Subtitle:
    """Statistic, df, log_e(BF01), prior width (when the test has one) and sample size."""
    segments = [_statistic_segment(result, k), _segment(LOG_BF01_SYMBOL, format_value(result.log_bf01, k))]
    if result.bf_prior is not None:
        segments.append(_segment(CAUCHY_SYMBOL, format_value(result.bf_prior, k)))
    segments.append(_segment(N_SYMBOL, format_n(result.n)))
    return Subtitle(segments)


def bayes_caption(result: StatResult, k: int = 2) -> Subtitle:
    """Caption quantifying the evidence in favor of the null hypothesis."""
    segments = [_segment(LOG_BF01_SYMBOL, format_value(result.log_bf01, k))]
    if result.bf_prior is not None:
        segments.append(_segment(JZS_SYMBOL, format_value(result.bf_prior, k)))
    return Subtitle(segments, prefix="In favor of null: ")
