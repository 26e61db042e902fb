"""Select the runner and template for a test, and the public subtitle functions."""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from plotstats.config import StatsOptions, TestType, resolve_options
from plotstats.data.prepare import level_order, select_columns, uncount
from plotstats.exceptions import InsufficientData, UnsupportedTestKind
from plotstats.stats.results import StatResult, TestFamily
from plotstats.stats.tests import Runner, get_runner, list_runners
from plotstats.subtitles.templates import (
    Subtitle,
    bayes_caption,
    bayes_subtitle,
    frequentist_subtitle,
    proportion_subtitle,
)

logger = logging.getLogger(__name__)

Formatter = Callable[[StatResult, int], Subtitle]

_FAMILY_ALIASES: Dict[str, TestFamily] = {
    "onesample": TestFamily.ONE_SAMPLE,
    "one_sample": TestFamily.ONE_SAMPLE,
    "twosample": TestFamily.TWO_SAMPLE,
    "two_sample": TestFamily.TWO_SAMPLE,
    "anova": TestFamily.ANOVA,
    "correlation": TestFamily.CORRELATION,
    "contingency": TestFamily.CONTINGENCY,
    "proportion": TestFamily.PROPORTION,
}

# Families without a within-subjects variant
_UNPAIRED_ONLY = (TestFamily.ONE_SAMPLE, TestFamily.CORRELATION, TestFamily.PROPORTION)


def parse_family(value: Union[str, TestFamily]) -> TestFamily:
    """Parse a test family tag.

    Raises:
        UnsupportedTestKind: If the tag is not recognised
    """
    if isinstance(value, TestFamily):
        return value
    key = str(value).strip().lower().replace("-", "_")
    if key not in _FAMILY_ALIASES:
        raise UnsupportedTestKind("test family", value, [f.value for f in TestFamily])
    return _FAMILY_ALIASES[key]


def supported_types(family: TestFamily, paired: bool = False) -> List[TestType]:
    """Test types available for a family and design."""
    if family in _UNPAIRED_ONLY:
        paired = False
    return [t for (f, t, p) in list_runners() if f == family and p == paired]


def get_formatter(family: TestFamily, test_type: TestType) -> Formatter:
    if test_type == TestType.BAYES:
        return bayes_subtitle
    if family == TestFamily.PROPORTION:
        return proportion_subtitle
    return frequentist_subtitle


def dispatch(
    family: Union[str, TestFamily], test_type: Union[str, TestType], paired: bool = False
) -> Tuple[Runner, Formatter]:
    """Map (family, type, paired) to its runner and subtitle template.

    ``paired`` is ignored for families that have no within-subjects variant
    (one-sample, correlation, proportion).

    Raises:
        UnsupportedTestKind: For unknown tags or combinations without a runner
    """
    family = parse_family(family)
    test_type = TestType.parse(test_type)
    if family in _UNPAIRED_ONLY:
        paired = False
    return get_runner(family, test_type, paired), get_formatter(family, test_type)


def groups_family(df: pd.DataFrame, x: str = "x") -> TestFamily:
    """Two-sample family for 2 levels of ``x``, ANOVA for more."""
    n_levels = len(level_order(df[x]))
    if n_levels < 2:
        raise InsufficientData(
            f"At least 2 levels of the grouping variable required, found {n_levels}",
            required=2,
            observed=n_levels,
        )
    return TestFamily.TWO_SAMPLE if n_levels == 2 else TestFamily.ANOVA


def run_test(df: pd.DataFrame, family: TestFamily, options: StatsOptions, **kwargs) -> Tuple[Subtitle, StatResult]:
    """Run the selected test on role-named data and render its subtitle."""
    runner, formatter = dispatch(family, options.type, options.paired)
    result = runner(df, options, **kwargs)
    logger.debug(f"{result.method}: {result.as_dict()}")

    undefined = [
        name for name, value in (("statistic", result.statistic), ("estimate", result.estimate))
        if (name == "statistic" or result.has_effsize) and not math.isfinite(value)
    ]
    if undefined:
        logger.warning(f"{result.method}: {', '.join(undefined)} not defined for these data, shown as NA")
    return formatter(result, options.k), result


def run_bayes_caption(df: pd.DataFrame, family: TestFamily, options: StatsOptions, **kwargs) -> Optional[Subtitle]:
    """Bayes factor caption in favor of the null, or None.

    None is returned when ``bf_message`` is off, when the subtitle itself is
    already Bayesian, or when the design has no Bayes factor.
    """
    if not options.bf_message or options.type == TestType.BAYES:
        return None
    paired = False if family in _UNPAIRED_ONLY else options.paired
    if TestType.BAYES not in supported_types(family, paired):
        return None
    runner = get_runner(family, TestType.BAYES, paired)
    return bayes_caption(runner(df, options, **kwargs), options.k)


# ──────────────────────────────────────────────────────────────
# Public subtitle functions
# ──────────────────────────────────────────────────────────────


def subtitle_onesample(
    data: pd.DataFrame, x: str, options: Optional[StatsOptions] = None, **overrides
) -> Optional[Subtitle]:
    """Subtitle for a one-sample test of ``x`` against ``test_value``."""
    options = resolve_options(options, **overrides)
    if not options.results_subtitle:
        return None
    df = select_columns(data, x=x)
    return run_test(df, TestFamily.ONE_SAMPLE, options)[0]


def subtitle_groups(
    data: pd.DataFrame, x: str, y: str, options: Optional[StatsOptions] = None, **overrides
) -> Optional[Subtitle]:
    """Subtitle comparing ``y`` across levels of ``x``.

    Two levels give a two-sample test, more levels a one-way ANOVA; set
    ``paired=True`` for within-subjects designs.
    """
    options = resolve_options(options, **overrides)
    if not options.results_subtitle:
        return None
    df = select_columns(data, x=x, y=y)
    return run_test(df, groups_family(df), options)[0]


def subtitle_correlation(
    data: pd.DataFrame, x: str, y: str, options: Optional[StatsOptions] = None, **overrides
) -> Optional[Subtitle]:
    """Subtitle for the correlation between ``x`` and ``y``."""
    options = resolve_options(options, **overrides)
    if not options.results_subtitle:
        return None
    df = select_columns(data, x=x, y=y)
    return run_test(df, TestFamily.CORRELATION, options)[0]


def contingency_data(
    data: pd.DataFrame, main: str, condition: Optional[str] = None, counts: Optional[str] = None
) -> pd.DataFrame:
    """Role-named contingency data with counts expanded into rows."""
    df = select_columns(data, main=main, condition=condition, counts=counts)
    if counts is not None:
        df = uncount(df, "counts")
    return df


def subtitle_contingency(
    data: pd.DataFrame,
    main: str,
    condition: Optional[str] = None,
    counts: Optional[str] = None,
    ratio: Optional[Sequence[float]] = None,
    options: Optional[StatsOptions] = None,
    **overrides,
) -> Optional[Subtitle]:
    """Subtitle for association between ``main`` and ``condition``.

    Without ``condition`` this is a goodness-of-fit test of ``main`` against
    ``ratio`` (equal proportions by default).
    """
    options = resolve_options(options, **overrides)
    if not options.results_subtitle:
        return None
    df = contingency_data(data, main, condition, counts)
    if condition is None:
        return run_test(df, TestFamily.PROPORTION, options, ratio=ratio)[0]
    return run_test(df, TestFamily.CONTINGENCY, options)[0]


def subtitle(
    data: pd.DataFrame,
    family: Union[str, TestFamily],
    x: str,
    y: Optional[str] = None,
    counts: Optional[str] = None,
    options: Optional[StatsOptions] = None,
    **overrides,
) -> Optional[Subtitle]:
    """Subtitle for any family, with columns given positionally as ``x`` and ``y``.

    For contingency and proportion tests ``x`` is the main variable and
    ``y`` the condition.
    """
    family = parse_family(family)
    if family == TestFamily.ONE_SAMPLE:
        return subtitle_onesample(data, x, options, **overrides)
    if family in (TestFamily.CONTINGENCY, TestFamily.PROPORTION):
        condition = y if family == TestFamily.CONTINGENCY else None
        if family == TestFamily.CONTINGENCY and y is None:
            raise ValueError("The contingency family needs both x and y")
        return subtitle_contingency(data, x, condition, counts, options=options, **overrides)
    if y is None:
        raise ValueError(f"The {family.value} family needs both x and y")
    if family == TestFamily.CORRELATION:
        return subtitle_correlation(data, x, y, options, **overrides)

    options = resolve_options(options, **overrides)
    if not options.results_subtitle:
        return None
    df = select_columns(data, x=x, y=y)
    return run_test(df, family, options)[0]
