import pytest

from sampleview.lib.classify import (
    ConfidenceCategory,
    DatasetMode,
    OffsetCategory,
    classifier_for,
)
from sampleview.lib.filter import evaluate_sample, is_turnaround, passes
from sampleview.lib.records import parse_sample
from sampleview.lib.thresholds import (
    DEFAULT_CONFIG,
    DEFAULT_OPTIONS,
    DEFAULT_THRESHOLDS,
    EvaluationMode,
    FilterOptions,
)


def make_sample(idx=1, offset=0, confidence=0.9, windows=None, ground_truth=1, predicted=1):
    return parse_sample(
        {
            "sample_idx": idx,
            "final_metrics": {
                "offset_from_correct": offset,
                "confidence": confidence,
                "ground_truth": ground_truth,
                "predicted_class": predicted,
            },
            "window_metrics": windows or [],
        }
    )


def windows_with_correct(*flags):
    return [
        {"iteration": i + 1, "correct": flag, "offset_from_correct": 0 if flag else 4, "confidence": 0.5}
        for i, flag in enumerate(flags)
    ]


# --- Turnaround ---


def test_turnaround_when_most_windows_wrong_and_final_correct():
    sample = make_sample(offset=0, windows=windows_with_correct(False, False, True))
    classifier = classifier_for(DatasetMode.MULTI_CLASS)
    assert is_turnaround(sample, classifier)

    options = FilterOptions(only_turnaround=True)
    assert passes(sample, DEFAULT_THRESHOLDS, options, DatasetMode.MULTI_CLASS)


def test_not_turnaround_when_most_windows_correct():
    sample = make_sample(offset=0, windows=windows_with_correct(False, True, True))
    assert not is_turnaround(sample, classifier_for(DatasetMode.MULTI_CLASS))

    options = FilterOptions(only_turnaround=True)
    assert not passes(sample, DEFAULT_THRESHOLDS, options, DatasetMode.MULTI_CLASS)


def test_not_turnaround_when_final_wrong():
    sample = make_sample(offset=2, windows=windows_with_correct(False, False, False))
    assert not is_turnaround(sample, classifier_for(DatasetMode.MULTI_CLASS))


def test_sample_without_windows_is_not_turnaround():
    assert not is_turnaround(make_sample(offset=0), classifier_for(DatasetMode.MULTI_CLASS))


def test_turnaround_uses_final_correctness_in_iteration_mode():
    # window 1 is wrong, but the final prediction is correct
    sample = make_sample(offset=0, windows=windows_with_correct(False, False, True))
    options = FilterOptions(only_turnaround=True, evaluation_mode=EvaluationMode.at_iteration(1))
    assert passes(sample, DEFAULT_THRESHOLDS, options, DatasetMode.MULTI_CLASS)


def test_binary_turnaround_uses_label_equality():
    sample = make_sample(offset=None, ground_truth=0, predicted=0, windows=windows_with_correct(False, False))
    assert is_turnaround(sample, classifier_for(DatasetMode.BINARY))
    assert not is_turnaround(sample, classifier_for(DatasetMode.MULTI_CLASS))


# --- Category toggles ---


@pytest.mark.parametrize(
    "confidence, toggle",
    [(0.1, "show_low"), (0.5, "show_mid"), (0.9, "show_high")],
)
def test_confidence_toggles(confidence, toggle):
    sample = make_sample(confidence=confidence)
    assert passes(sample, DEFAULT_THRESHOLDS, DEFAULT_OPTIONS, DatasetMode.MULTI_CLASS)
    options = FilterOptions(**{toggle: False})
    assert not passes(sample, DEFAULT_THRESHOLDS, options, DatasetMode.MULTI_CLASS)


@pytest.mark.parametrize(
    "offset, toggle",
    [(0, "show_correct"), (1, "show_almost"), (4, "show_very_wrong")],
)
def test_offset_toggles(offset, toggle):
    sample = make_sample(offset=offset)
    assert passes(sample, DEFAULT_THRESHOLDS, DEFAULT_OPTIONS, DatasetMode.MULTI_CLASS)
    options = FilterOptions(**{toggle: False})
    assert not passes(sample, DEFAULT_THRESHOLDS, options, DatasetMode.MULTI_CLASS)


def test_other_offset_category_always_passes():
    sample = make_sample(offset=None)
    options = FilterOptions(show_correct=False, show_almost=False, show_very_wrong=False)
    result = evaluate_sample(sample, DEFAULT_CONFIG.with_options(show_correct=False, show_almost=False, show_very_wrong=False), classifier_for(DatasetMode.MULTI_CLASS))
    assert result.offset_category == OffsetCategory.OTHER
    assert passes(sample, DEFAULT_THRESHOLDS, options, DatasetMode.MULTI_CLASS)


def test_missing_confidence_passes_confidence_toggles():
    sample = make_sample(confidence=None)
    options = FilterOptions(show_low=False, show_mid=False, show_high=False)
    assert passes(sample, DEFAULT_THRESHOLDS, options, DatasetMode.MULTI_CLASS)


def test_binary_incorrect_uses_either_wrong_toggle():
    sample = make_sample(offset=None, ground_truth=0, predicted=1)

    assert passes(sample, DEFAULT_THRESHOLDS, FilterOptions(show_almost=False), DatasetMode.BINARY)
    assert passes(sample, DEFAULT_THRESHOLDS, FilterOptions(show_very_wrong=False), DatasetMode.BINARY)
    assert not passes(
        sample,
        DEFAULT_THRESHOLDS,
        FilterOptions(show_almost=False, show_very_wrong=False),
        DatasetMode.BINARY,
    )


def test_binary_correct_uses_correct_toggle():
    sample = make_sample(offset=5, ground_truth=1, predicted=1)
    assert passes(sample, DEFAULT_THRESHOLDS, FilterOptions(show_very_wrong=False), DatasetMode.BINARY)
    assert not passes(sample, DEFAULT_THRESHOLDS, FilterOptions(show_correct=False), DatasetMode.BINARY)


# --- Video and allow-list ---


def test_only_has_video():
    with_video = make_sample(windows=[{"iteration": 1, "video_path": "data/sample_1/w1.mp4"}])
    without_video = make_sample(windows=[{"iteration": 1, "video_path": ""}])
    options = FilterOptions(only_has_video=True)

    assert passes(with_video, DEFAULT_THRESHOLDS, options, DatasetMode.MULTI_CLASS)
    assert not passes(without_video, DEFAULT_THRESHOLDS, options, DatasetMode.MULTI_CLASS)


def test_allow_list_restricts_by_index():
    options = FilterOptions(sample_index_allow_list=frozenset({2, 3}))
    assert passes(make_sample(idx=2), DEFAULT_THRESHOLDS, options, DatasetMode.MULTI_CLASS)
    assert not passes(make_sample(idx=1), DEFAULT_THRESHOLDS, options, DatasetMode.MULTI_CLASS)


def test_empty_allow_list_is_no_restriction():
    options = FilterOptions(sample_index_allow_list=frozenset())
    assert passes(make_sample(idx=99), DEFAULT_THRESHOLDS, options, DatasetMode.MULTI_CLASS)


# --- Evaluation mode ---


def test_iteration_mode_classifies_the_window():
    sample = make_sample(
        offset=0,
        confidence=0.9,
        windows=[{"iteration": 3, "offset_from_correct": 5, "confidence": 0.1}],
    )
    config = DEFAULT_CONFIG.with_options(evaluation_mode=EvaluationMode.at_iteration(3))
    result = evaluate_sample(sample, config, classifier_for(DatasetMode.MULTI_CLASS))

    assert result.visible
    assert result.offset_category == OffsetCategory.VERY_WRONG
    assert result.confidence_category == ConfidenceCategory.LOW


@pytest.mark.parametrize("mode", [DatasetMode.MULTI_CLASS, DatasetMode.BINARY])
def test_missing_iteration_excludes_sample(mode):
    sample = make_sample(offset=0, windows=[{"iteration": 1, "offset_from_correct": 0}])
    options = FilterOptions(evaluation_mode=EvaluationMode.at_iteration(5))
    assert not passes(sample, DEFAULT_THRESHOLDS, options, mode)

    result = evaluate_sample(
        sample, DEFAULT_CONFIG.with_options(evaluation_mode=EvaluationMode.at_iteration(5)), classifier_for(mode)
    )
    assert result.point is None
    assert result.offset_category is None
    assert result.confidence_category is None


def test_unparseable_iteration_excludes_sample():
    sample = make_sample(windows=[{"iteration": 1, "offset_from_correct": 0}])
    options = FilterOptions(evaluation_mode=EvaluationMode.at_iteration(None))
    assert not passes(sample, DEFAULT_THRESHOLDS, options, DatasetMode.MULTI_CLASS)


def test_all_checks_must_pass():
    sample = make_sample(
        idx=4,
        offset=0,
        confidence=0.9,
        windows=windows_with_correct(False, False, True)[:2]
        + [{"iteration": 3, "correct": True, "video_path": "v.mp4"}],
    )
    options = FilterOptions(
        only_turnaround=True,
        only_has_video=True,
        sample_index_allow_list=frozenset({4}),
    )
    assert passes(sample, DEFAULT_THRESHOLDS, options, DatasetMode.MULTI_CLASS)
    assert not passes(
        sample, DEFAULT_THRESHOLDS, FilterOptions(only_has_video=True, show_high=False), DatasetMode.MULTI_CLASS
    )
