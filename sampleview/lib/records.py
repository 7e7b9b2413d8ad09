"""This module provides the sample record model and parsing of dataset documents.

A dataset document is a JSON array of sample objects. Each sample has a
`sample_idx`, a `final_metrics` object and a `window_metrics` array with one
entry per evaluation iteration.

Functions:
    - parse_sample: Build a SampleRecord from one decoded JSON object.
    - parse_document: Build SampleRecords from a decoded dataset document.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sampleview.lib.errors import DatasetLoadError
from sampleview.lib.stats import EMPTY_STATS, MetricStats, compute_stats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowMetric:
    """One prediction snapshot of a sample at a given iteration."""

    iteration: Optional[int]
    predicted_class: Optional[int] = None
    ground_truth: Optional[int] = None
    confidence: Optional[float] = None
    offset_from_correct: Optional[float] = None
    correct: bool = False
    cross_entropy: Optional[float] = None
    softmax_probs: Optional[Tuple[float, ...]] = None
    video_path: Optional[str] = None
    melspectrogram_path: Optional[str] = None


@dataclass(frozen=True)
class FinalMetrics:
    """Terminal prediction of a sample, not tied to an iteration."""

    ground_truth: Optional[int] = None
    predicted_class: Optional[int] = None
    confidence: Optional[float] = None
    offset_from_correct: Optional[float] = None
    cross_entropy: Optional[float] = None
    rank_of_correct_class: Optional[int] = None


@dataclass(frozen=True)
class SampleStats:
    offset: MetricStats = EMPTY_STATS
    confidence: MetricStats = EMPTY_STATS


@dataclass(frozen=True)
class SampleRecord:
    """An evaluated sample with its final prediction and window history.

    `stats` is derived from `window_metrics` when the record is built. Records
    are frozen, so the cached stats always match the windows.
    """

    sample_idx: int
    final_metrics: FinalMetrics
    window_metrics: Tuple[WindowMetric, ...] = ()
    stats: SampleStats = field(init=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "stats", compute_sample_stats(self.window_metrics))

    @property
    def window_count(self):
        return len(self.window_metrics)

    def window_at(self, iteration) -> Optional[WindowMetric]:
        """Return the window whose iteration equals `iteration`, or None."""
        for window in self.window_metrics:
            if window.iteration == iteration:
                return window
        return None


def compute_sample_stats(windows: Sequence[WindowMetric]) -> SampleStats:
    offsets = [w.offset_from_correct for w in windows if w.offset_from_correct is not None]
    confidences = [w.confidence for w in windows if w.confidence is not None]
    return SampleStats(offset=compute_stats(offsets), confidence=compute_stats(confidences))


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------


def _number(value) -> Optional[float]:
    """Return a real number, or None for anything that is not one.

    Booleans and NaN count as missing.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def _integer(value) -> Optional[int]:
    number = _number(value)
    if number is None:
        return None
    if isinstance(number, float):
        if not number.is_integer():
            return None
        return int(number)
    return number


def _path(value) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _probs(value) -> Optional[Tuple[float, ...]]:
    if not isinstance(value, (list, tuple)):
        return None
    probs = tuple(_number(p) for p in value)
    if any(p is None for p in probs):
        return None
    return probs


def parse_window(raw: Mapping[str, Any]) -> WindowMetric:
    return WindowMetric(
        iteration=_integer(raw.get("iteration")),
        predicted_class=_integer(raw.get("predicted_class")),
        ground_truth=_integer(raw.get("ground_truth")),
        confidence=_number(raw.get("confidence")),
        offset_from_correct=_number(raw.get("offset_from_correct")),
        correct=raw.get("correct") is True,
        cross_entropy=_number(raw.get("cross_entropy")),
        softmax_probs=_probs(raw.get("softmax_probs")),
        video_path=_path(raw.get("video_path")),
        melspectrogram_path=_path(raw.get("melspectrogram_path")),
    )


def parse_final(raw: Optional[Mapping[str, Any]]) -> FinalMetrics:
    raw = raw or {}
    return FinalMetrics(
        ground_truth=_integer(raw.get("ground_truth")),
        predicted_class=_integer(raw.get("predicted_class")),
        confidence=_number(raw.get("confidence")),
        offset_from_correct=_number(raw.get("offset_from_correct")),
        cross_entropy=_number(raw.get("cross_entropy")),
        rank_of_correct_class=_integer(raw.get("rank_of_correct_class")),
    )


def parse_sample(raw: Mapping[str, Any], sample_idx: Optional[int] = None) -> SampleRecord:
    """Build a SampleRecord from one decoded JSON object.

    Args:
        raw: Decoded sample object.
        sample_idx: Index to use instead of `raw["sample_idx"]`, for callers that
            synthesize indices.

    Returns:
        SampleRecord with window stats computed.

    Raises:
        DatasetLoadError: If the object has no usable index or malformed sections.
    """
    if not isinstance(raw, Mapping):
        raise DatasetLoadError(f"Sample must be an object, got {type(raw).__name__}")

    if sample_idx is None:
        sample_idx = _integer(raw.get("sample_idx"))
    if sample_idx is None:
        raise DatasetLoadError(f"Sample has no integer sample_idx: {raw.get('sample_idx')!r}")

    final_raw = raw.get("final_metrics")
    if final_raw is not None and not isinstance(final_raw, Mapping):
        raise DatasetLoadError(f"Sample {sample_idx}: final_metrics must be an object")

    windows_raw = raw.get("window_metrics") or []
    if not isinstance(windows_raw, list):
        raise DatasetLoadError(f"Sample {sample_idx}: window_metrics must be an array")
    for window in windows_raw:
        if not isinstance(window, Mapping):
            raise DatasetLoadError(f"Sample {sample_idx}: window entries must be objects")

    return SampleRecord(
        sample_idx=sample_idx,
        final_metrics=parse_final(final_raw),
        window_metrics=tuple(parse_window(w) for w in windows_raw),
    )


def parse_document(document, synthesize_missing_idx=False) -> List[SampleRecord]:
    """Build SampleRecords from a decoded dataset document.

    Args:
        document: Decoded JSON array of sample objects.
        synthesize_missing_idx: If True, a sample without `sample_idx` gets its
            1-based position in the document as index.

    Returns:
        List of SampleRecord in document order.

    Raises:
        DatasetLoadError: If the document is not an array, a sample is malformed,
            or two samples share an index.
    """
    if not isinstance(document, list):
        raise DatasetLoadError(
            f"Dataset document must be an array of samples, got {type(document).__name__}"
        )

    samples = []
    seen: Dict[int, int] = {}
    synthesized = 0
    for position, raw in enumerate(document):
        idx = None
        if synthesize_missing_idx and isinstance(raw, Mapping) and _integer(raw.get("sample_idx")) is None:
            idx = position + 1
            synthesized += 1
        try:
            sample = parse_sample(raw, sample_idx=idx)
        except DatasetLoadError as e:
            raise DatasetLoadError(f"Invalid sample at position {position}: {e}") from e

        if sample.sample_idx in seen:
            raise DatasetLoadError(
                f"Duplicate sample_idx {sample.sample_idx} at positions "
                f"{seen[sample.sample_idx]} and {position}"
            )
        seen[sample.sample_idx] = position
        samples.append(sample)

    if synthesized:
        logger.info(f"Synthesized sample_idx for {synthesized} of {len(samples)} samples")
    return samples
