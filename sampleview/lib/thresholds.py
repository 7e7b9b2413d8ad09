"""Threshold and filter configuration for sample classification.

Every classification, filter and aggregation call receives an immutable
EvaluationConfig. Changing a control means building a new config and re-running
the pipeline.

Default thresholds are almost_offset=2, very_wrong_offset=3,
high_confidence=0.7, low_confidence=0.2. Threshold ordering
(almost_offset < very_wrong_offset, low_confidence < high_confidence) is not
enforced; see ThresholdConfig.ordering_issues.

Functions:
    - parse_threshold: Parse a numeric control value, keeping the last good value on bad input.
    - parse_allow_list: Parse a comma-separated list of sample indices.
    - parse_evaluation_mode: Build the evaluation mode from the iteration controls.
"""

import logging
import math
import re
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, List, Optional

logger = logging.getLogger(__name__)

LEADING_INT = re.compile(r"\s*([+-]?\d+)", re.ASCII)


@dataclass(frozen=True)
class ThresholdConfig:
    """Numeric cut points for offset and confidence categories."""

    almost_offset: float = 2
    very_wrong_offset: float = 3
    high_confidence: float = 0.7
    low_confidence: float = 0.2

    def ordering_issues(self) -> List[str]:
        """Describe threshold pairs whose expected ordering is violated.

        When almost_offset >= very_wrong_offset, an offset can satisfy both the
        "almost" and "very wrong" tests; "almost" wins because it is tested first.
        When high_confidence <= low_confidence, "high" wins for the same reason.
        """
        issues = []
        if not self.almost_offset < self.very_wrong_offset:
            issues.append(
                f"almost_offset ({self.almost_offset}) is not below "
                f"very_wrong_offset ({self.very_wrong_offset})"
            )
        if not self.low_confidence < self.high_confidence:
            issues.append(
                f"low_confidence ({self.low_confidence}) is not below "
                f"high_confidence ({self.high_confidence})"
            )
        return issues


@dataclass(frozen=True)
class EvaluationMode:
    """Where the evaluation point of a sample is read from.

    `final()` reads final metrics. `at_iteration(n)` reads the window with
    iteration n; n is None when the selector could not be parsed, which excludes
    every sample.
    """

    use_iteration: bool = False
    iteration: Optional[int] = None

    @classmethod
    def final(cls):
        return cls()

    @classmethod
    def at_iteration(cls, iteration: Optional[int]):
        return cls(use_iteration=True, iteration=iteration)

    @property
    def label(self):
        return "Iteration" if self.use_iteration else "Final"


@dataclass(frozen=True)
class FilterOptions:
    """Category toggles and sample restrictions applied to every dataset view."""

    show_low: bool = True
    show_mid: bool = True
    show_high: bool = True
    show_correct: bool = True
    show_almost: bool = True
    show_very_wrong: bool = True
    only_turnaround: bool = False
    only_has_video: bool = False
    sample_index_allow_list: FrozenSet[int] = field(default_factory=frozenset)
    evaluation_mode: EvaluationMode = field(default_factory=EvaluationMode.final)


@dataclass(frozen=True)
class EvaluationConfig:
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    options: FilterOptions = field(default_factory=FilterOptions)

    def with_thresholds(self, **changes):
        return replace(self, thresholds=replace(self.thresholds, **changes))

    def with_options(self, **changes):
        return replace(self, options=replace(self.options, **changes))


DEFAULT_THRESHOLDS = ThresholdConfig()
DEFAULT_OPTIONS = FilterOptions()
DEFAULT_CONFIG = EvaluationConfig(thresholds=DEFAULT_THRESHOLDS, options=DEFAULT_OPTIONS)


def parse_threshold(text, last_good: float) -> float:
    """Parse a threshold control value.

    Args:
        text: Raw control value (string or number).
        last_good: Value to keep when `text` is not a finite number.

    Returns:
        The parsed float, or `last_good`.
    """
    try:
        value = float(str(text).strip())
    except (TypeError, ValueError):
        logger.debug(f"Ignoring unparseable threshold {text!r}, keeping {last_good}")
        return last_good
    if math.isnan(value) or math.isinf(value):
        logger.debug(f"Ignoring non-finite threshold {text!r}, keeping {last_good}")
        return last_good
    return value


def parse_allow_list(text) -> FrozenSet[int]:
    """Parse a comma-separated list of sample indices.

    Each entry is read up to its first non-digit, so "5.5" gives 5 and "3abc"
    gives 3. Entries without a leading integer are dropped. An empty or blank
    string gives an empty set, meaning no restriction.
    """
    if text is None:
        return frozenset()
    if not isinstance(text, str):
        return _ints(text)

    indices = (_leading_int(part) for part in text.split(","))
    return frozenset(i for i in indices if i is not None)


def _ints(values: Iterable) -> FrozenSet[int]:
    return frozenset(v for v in values if isinstance(v, int) and not isinstance(v, bool))


def _leading_int(text) -> Optional[int]:
    match = LEADING_INT.match(str(text))
    return int(match.group(1)) if match else None


def parse_evaluation_mode(use_iteration: bool, text) -> EvaluationMode:
    """Build the evaluation mode from the "use iteration" toggle and its input."""
    if not use_iteration:
        return EvaluationMode.final()
    return EvaluationMode.at_iteration(_leading_int(text))
