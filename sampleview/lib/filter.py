"""This module provides the per-sample visibility decision.

A sample is visible when every enabled check passes:
1. Its evaluation point resolves (an unknown iteration excludes it).
2. If only turnaround samples are requested, most windows were wrong but the
   final prediction is correct.
3. Its confidence category is enabled.
4. Its offset category is enabled.
5. If only samples with video are requested, a window carries a video.
6. If an allow-list is set, its index is in it.

Functions:
    - is_turnaround: Whether a sample recovered from mostly wrong windows.
    - evaluate_sample: Classify a sample and decide its visibility.
    - passes: Visibility decision alone.
"""

from dataclasses import dataclass
from typing import Optional

from sampleview.lib.classify import (
    Classifier,
    ConfidenceCategory,
    EvaluationPoint,
    OffsetCategory,
    classifier_for,
    final_point,
    resolve_evaluation_point,
)
from sampleview.lib.media import has_video
from sampleview.lib.records import SampleRecord
from sampleview.lib.thresholds import EvaluationConfig, FilterOptions, ThresholdConfig


@dataclass(frozen=True)
class SampleResult:
    """Classification and visibility of one sample under one config.

    `point` and both categories are None when the evaluation point could not be
    resolved.
    """

    sample_idx: int
    visible: bool
    offset_category: Optional[OffsetCategory] = None
    confidence_category: Optional[ConfidenceCategory] = None
    point: Optional[EvaluationPoint] = None


def is_turnaround(sample: SampleRecord, classifier: Classifier) -> bool:
    """Whether fewer than half of the windows were correct but the final prediction is.

    Final correctness is read from final metrics, whatever the evaluation mode.
    """
    n_correct = sum(1 for window in sample.window_metrics if window.correct)
    majority_wrong = n_correct < sample.window_count / 2
    return majority_wrong and classifier.is_correct(final_point(sample))


def _confidence_enabled(category, options: FilterOptions) -> bool:
    if category is ConfidenceCategory.LOW:
        return options.show_low
    if category is ConfidenceCategory.MID:
        return options.show_mid
    if category is ConfidenceCategory.HIGH:
        return options.show_high
    # no confidence, no category to filter on
    return True


def evaluate_sample(sample: SampleRecord, config: EvaluationConfig, classifier: Classifier) -> SampleResult:
    """Classify a sample and decide whether it passes the filters.

    Args:
        sample: Sample to evaluate.
        config: Thresholds and filter options.
        classifier: Classifier of the dataset the sample belongs to.

    Returns:
        SampleResult with the categories of the resolved evaluation point.
    """
    options = config.options
    point = resolve_evaluation_point(sample, options.evaluation_mode)
    if point is None:
        return SampleResult(sample_idx=sample.sample_idx, visible=False)

    offset_cat = classifier.offset_category(point, config.thresholds)
    confidence_cat = classifier.confidence_category(point, config.thresholds)

    visible = (
        (not options.only_turnaround or is_turnaround(sample, classifier))
        and _confidence_enabled(confidence_cat, options)
        and classifier.offset_enabled(offset_cat, options)
        and (not options.only_has_video or has_video(sample))
        and (
            not options.sample_index_allow_list
            or sample.sample_idx in options.sample_index_allow_list
        )
    )

    return SampleResult(
        sample_idx=sample.sample_idx,
        visible=visible,
        offset_category=offset_cat,
        confidence_category=confidence_cat,
        point=point,
    )


def passes(sample: SampleRecord, thresholds: ThresholdConfig, options: FilterOptions, mode) -> bool:
    """Whether `sample` is visible under `thresholds` and `options` for a dataset mode."""
    config = EvaluationConfig(thresholds=thresholds, options=options)
    return evaluate_sample(sample, config, classifier_for(mode)).visible
