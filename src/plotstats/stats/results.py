"""Result record produced by every test runner."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from plotstats.config import TestType


class TestFamily(str, Enum):
    """Kind of hypothesis being tested; selects the runner table and the subtitle template."""

    __test__ = False

    ONE_SAMPLE = "onesample"
    TWO_SAMPLE = "twosample"
    ANOVA = "anova"
    CORRELATION = "correlation"
    CONTINGENCY = "contingency"
    PROPORTION = "proportion"


@dataclass(frozen=True)
class StatResult:
    """Unrounded outcome of one test.

    ``statistic_symbol`` and ``effsize`` are template keys (see
    ``plotstats.subtitles.templates``). Non-finite values are kept as NaN and
    rendered as "NA".
    """

    family: TestFamily
    test_type: TestType
    method: str
    statistic: float
    statistic_symbol: str
    p_value: float
    n: int
    df1: Optional[float] = None
    df2: Optional[float] = None
    effsize: Optional[str] = None
    estimate: float = math.nan
    conf_low: float = math.nan
    conf_high: float = math.nan
    conf_level: float = 0.95
    log_bf01: Optional[float] = None
    bf_prior: Optional[float] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_effsize(self) -> bool:
        return self.effsize is not None

    @property
    def is_bayes(self) -> bool:
        return self.log_bf01 is not None

    def as_dict(self) -> Dict[str, Any]:
        """Flat dictionary view, convenient for tables and logging."""
        return {
            "family": self.family.value,
            "type": self.test_type.value,
            "method": self.method,
            "statistic": self.statistic,
            "df1": self.df1,
            "df2": self.df2,
            "p_value": self.p_value,
            "effsize": self.effsize,
            "estimate": self.estimate,
            "conf_low": self.conf_low,
            "conf_high": self.conf_high,
            "conf_level": self.conf_level,
            "n": self.n,
            "log_bf01": self.log_bf01,
            "bf_prior": self.bf_prior,
        }
