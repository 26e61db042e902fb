"""Configuration for statistical subtitles and plots."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from plotstats.exceptions import UnsupportedTestKind

logger = logging.getLogger(__name__)


class TestType(str, Enum):
    """Family of statistical approach."""

    __test__ = False

    PARAMETRIC = "parametric"
    NONPARAMETRIC = "nonparametric"
    ROBUST = "robust"
    BAYES = "bayes"

    @classmethod
    def parse(cls, value: Union[str, TestType]) -> TestType:
        """Parse a full name or abbreviation ("p", "np", "r", "bf").

        Raises:
            UnsupportedTestKind: If the value is not recognised
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key in _TYPE_ALIASES:
            return _TYPE_ALIASES[key]
        raise UnsupportedTestKind("test type", value, [t.value for t in cls] + ["p", "np", "r", "bf"])


_TYPE_ALIASES: Dict[str, TestType] = {
    "parametric": TestType.PARAMETRIC,
    "p": TestType.PARAMETRIC,
    "nonparametric": TestType.NONPARAMETRIC,
    "np": TestType.NONPARAMETRIC,
    "robust": TestType.ROBUST,
    "r": TestType.ROBUST,
    "bayes": TestType.BAYES,
    "bf": TestType.BAYES,
}


class EffsizeType(str, Enum):
    """Biased (Cohen's d, eta-squared) or unbiased (Hedges' g, omega-squared) effect sizes."""

    BIASED = "biased"
    UNBIASED = "unbiased"

    @classmethod
    def parse(cls, value: Union[str, EffsizeType]) -> EffsizeType:
        """Parse an effect-size tag.

        Raises:
            UnsupportedTestKind: If the value is not recognised (no fallback)
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key in _EFFSIZE_ALIASES:
            return _EFFSIZE_ALIASES[key]
        raise UnsupportedTestKind("effect size type", value, list(_EFFSIZE_ALIASES))


_EFFSIZE_ALIASES: Dict[str, EffsizeType] = {
    "biased": EffsizeType.BIASED,
    "d": EffsizeType.BIASED,
    "eta": EffsizeType.BIASED,
    "partial_eta": EffsizeType.BIASED,
    "unbiased": EffsizeType.UNBIASED,
    "g": EffsizeType.UNBIASED,
    "omega": EffsizeType.UNBIASED,
    "partial_omega": EffsizeType.UNBIASED,
}

SAMPLING_PLANS = ("jointMulti", "indepMulti")
FIXED_MARGINS = ("rows", "cols")


@dataclass
class StatsOptions:
    """Options shared by every subtitle and plot function.

    Attributes:
        results_subtitle: Whether to run the test and render a subtitle at all
        type: Test type, parsed into TestType ("p", "np", "r", "bf" accepted)
        paired: Within-subjects design
        k: Decimal places for statistics in the subtitle
        perc_k: Decimal places for percentage labels
        conf_level: Confidence level for intervals, in (0, 1)
        nboot: Number of bootstrap resamples
        seed: Seed for resampling; None draws fresh entropy
        bf_message: Whether to add a Bayes factor caption in favor of the null
        bf_prior: Width of the Cauchy prior for t-test and correlation Bayes factors
        effsize_type: Effect-size flavour, parsed into EffsizeType
        partial: Report partial eta/omega-squared
        var_equal: Assume equal variances (Student t / Fisher F)
        tr: Trimming proportion for robust tests
        test_value: Reference value for one-sample tests
        messages: Log assumption checks and auxiliary tables
        sampling_plan: Sampling plan for contingency Bayes factors
        fixed_margin: Fixed margin for the independent multinomial plan
        prior_concentration: Dirichlet concentration for contingency Bayes factors
    """

    results_subtitle: bool = True
    type: Union[str, TestType] = TestType.PARAMETRIC
    paired: bool = False
    k: int = 2
    perc_k: int = 0
    conf_level: float = 0.95
    nboot: int = 100
    seed: Optional[int] = None
    bf_message: bool = True
    bf_prior: float = 0.707
    effsize_type: Union[str, EffsizeType] = EffsizeType.UNBIASED
    partial: bool = True
    var_equal: bool = False
    tr: float = 0.2
    test_value: float = 0.0
    messages: bool = True
    sampling_plan: str = "indepMulti"
    fixed_margin: str = "rows"
    prior_concentration: float = 1.0

    def __post_init__(self):
        """Validate configuration."""
        self.type = TestType.parse(self.type)
        self.effsize_type = EffsizeType.parse(self.effsize_type)

        if self.k < 0 or self.perc_k < 0:
            raise ValueError(f"k and perc_k must be >= 0, got k={self.k}, perc_k={self.perc_k}")

        if self.conf_level <= 0 or self.conf_level >= 1:
            raise ValueError(f"conf_level must be in (0, 1), got {self.conf_level}")

        if int(self.nboot) != self.nboot or self.nboot < 1:
            raise ValueError(f"nboot must be a positive integer, got {self.nboot}")
        self.nboot = int(self.nboot)

        if not 0 <= self.tr < 0.5:
            raise ValueError(f"tr must be in [0, 0.5), got {self.tr}")

        if self.bf_prior <= 0:
            raise ValueError(f"bf_prior must be > 0, got {self.bf_prior}")

        if self.prior_concentration <= 0:
            raise ValueError(f"prior_concentration must be > 0, got {self.prior_concentration}")

        if self.sampling_plan not in SAMPLING_PLANS:
            raise UnsupportedTestKind("sampling plan", self.sampling_plan, SAMPLING_PLANS)

        if self.fixed_margin not in FIXED_MARGINS:
            raise UnsupportedTestKind("fixed margin", self.fixed_margin, FIXED_MARGINS)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> StatsOptions:
        """Build options from a mapping that may use dotted keys (``conf.level``)."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in mapping.items():
            name = str(key).replace(".", "_").replace("-", "_")
            if name not in known:
                raise ValueError(f"Unknown option '{key}'. Known options: {sorted(known)}")
            kwargs[name] = value
        return cls(**kwargs)

    def updated(self, **overrides: Any) -> StatsOptions:
        """Return a copy with the given fields replaced (None values are ignored)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def resolve_options(options: Optional[StatsOptions] = None, **overrides: Any) -> StatsOptions:
    """Merge an optional StatsOptions with keyword overrides."""
    base = options if options is not None else StatsOptions()
    return base.updated(**overrides)


def load_options(path: Union[str, Path]) -> StatsOptions:
    """Load StatsOptions from a YAML file.

    The file holds a flat mapping of option names; R-style dotted keys
    (``results.subtitle``, ``conf.level``) are accepted.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Options file not found: {path}")

    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Options file must contain a mapping, got {type(data).__name__}")

    logger.info(f"Loaded options from {path}")
    return StatsOptions.from_mapping(data)
