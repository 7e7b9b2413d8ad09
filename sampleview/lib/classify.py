"""This module provides categorization of sample evaluation points.

An evaluation point is the (offset, confidence) pair of a sample, read either
from its final metrics or from one window. The offset is turned into an offset
category and the confidence into a confidence category.

The dataset mode is resolved once, by `classifier_for`:
- MULTI_CLASS grades the offset against the almost/very-wrong thresholds.
- BINARY compares ground truth and prediction and ignores the offset thresholds.

Functions:
    - offset_category: Graded offset category for multi-class datasets.
    - binary_category: Correct/incorrect category for binary datasets.
    - confidence_category: Low/mid/high category, shared by both modes.
    - resolve_evaluation_point: Select the evaluation point of a sample.
    - classifier_for: Classifier for a dataset mode.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sampleview.lib.records import SampleRecord
from sampleview.lib.thresholds import EvaluationMode, ThresholdConfig


class DatasetMode(str, Enum):
    MULTI_CLASS = "multi_class"
    BINARY = "binary"


class OffsetCategory(str, Enum):
    CORRECT = "correct"
    ALMOST = "almost"
    VERY_WRONG = "very_wrong"
    OTHER = "other"
    INCORRECT = "incorrect"


class ConfidenceCategory(str, Enum):
    LOW = "low"
    MID = "mid"
    HIGH = "high"


@dataclass(frozen=True)
class EvaluationPoint:
    """The values of a sample that are classified and aggregated."""

    offset: Optional[float] = None
    confidence: Optional[float] = None
    ground_truth: Optional[int] = None
    predicted_class: Optional[int] = None


def offset_category(offset, thresholds: ThresholdConfig) -> OffsetCategory:
    """Categorize an offset against the almost/very-wrong thresholds.

    An offset of 0 is always correct, whatever the thresholds. A missing offset,
    or one that falls between the two thresholds, is OTHER.
    """
    if offset == 0:
        return OffsetCategory.CORRECT
    if offset is not None and offset <= thresholds.almost_offset:
        return OffsetCategory.ALMOST
    if offset is not None and offset >= thresholds.very_wrong_offset:
        return OffsetCategory.VERY_WRONG
    return OffsetCategory.OTHER


def binary_category(ground_truth, predicted) -> OffsetCategory:
    if ground_truth is None or predicted is None:
        return OffsetCategory.INCORRECT
    if ground_truth == predicted:
        return OffsetCategory.CORRECT
    return OffsetCategory.INCORRECT


def confidence_category(confidence, thresholds: ThresholdConfig) -> Optional[ConfidenceCategory]:
    """Categorize a confidence value.

    HIGH is tested before LOW, so when high_confidence <= low_confidence a value
    satisfying both is HIGH. A missing confidence has no category (None).
    """
    if confidence is None:
        return None
    if confidence >= thresholds.high_confidence:
        return ConfidenceCategory.HIGH
    if confidence <= thresholds.low_confidence:
        return ConfidenceCategory.LOW
    return ConfidenceCategory.MID


def final_point(sample: SampleRecord) -> EvaluationPoint:
    final = sample.final_metrics
    return EvaluationPoint(
        offset=final.offset_from_correct,
        confidence=final.confidence,
        ground_truth=final.ground_truth,
        predicted_class=final.predicted_class,
    )


def resolve_evaluation_point(sample: SampleRecord, mode: EvaluationMode) -> Optional[EvaluationPoint]:
    """Select the evaluation point of a sample.

    Args:
        sample: Sample to evaluate.
        mode: Final, or a specific iteration.

    Returns:
        The evaluation point, or None if the iteration is unparseable or the sample
        has no window for it. Such samples are excluded; there is no fallback to
        final metrics.
    """
    if not mode.use_iteration:
        return final_point(sample)
    if mode.iteration is None:
        return None

    window = sample.window_at(mode.iteration)
    if window is None:
        return None
    return EvaluationPoint(
        offset=window.offset_from_correct,
        confidence=window.confidence,
        ground_truth=window.ground_truth,
        predicted_class=window.predicted_class,
    )


class Classifier:
    """Turns evaluation points into categories for one dataset mode."""

    mode: DatasetMode

    def offset_category(self, point: EvaluationPoint, thresholds: ThresholdConfig) -> OffsetCategory:
        raise NotImplementedError

    def confidence_category(self, point: EvaluationPoint, thresholds: ThresholdConfig):
        return confidence_category(point.confidence, thresholds)

    def is_correct(self, point: EvaluationPoint) -> bool:
        raise NotImplementedError

    def offset_enabled(self, category: OffsetCategory, options) -> bool:
        """Whether the offset category toggles in `options` let `category` through."""
        raise NotImplementedError


class MultiClassClassifier(Classifier):
    mode = DatasetMode.MULTI_CLASS

    def offset_category(self, point, thresholds):
        return offset_category(point.offset, thresholds)

    def is_correct(self, point):
        return point.offset == 0

    def offset_enabled(self, category, options):
        if category is OffsetCategory.CORRECT:
            return options.show_correct
        if category is OffsetCategory.ALMOST:
            return options.show_almost
        if category is OffsetCategory.VERY_WRONG:
            return options.show_very_wrong
        return True


class BinaryClassifier(Classifier):
    mode = DatasetMode.BINARY

    def offset_category(self, point, thresholds):
        return binary_category(point.ground_truth, point.predicted_class)

    def is_correct(self, point):
        return binary_category(point.ground_truth, point.predicted_class) is OffsetCategory.CORRECT

    def offset_enabled(self, category, options):
        if category is OffsetCategory.CORRECT:
            return options.show_correct
        # A single "wrong" category, enabled by either wrong toggle.
        return options.show_almost or options.show_very_wrong


_CLASSIFIERS = {
    DatasetMode.MULTI_CLASS: MultiClassClassifier(),
    DatasetMode.BINARY: BinaryClassifier(),
}


def classifier_for(mode) -> Classifier:
    """Return the classifier for a dataset mode (enum member or its string value)."""
    return _CLASSIFIERS[DatasetMode(mode)]
