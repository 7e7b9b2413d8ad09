import streamlit as st

from sampleview.lib.thresholds import (
    DEFAULT_CONFIG,
    EvaluationConfig,
    FilterOptions,
    ThresholdConfig,
    parse_allow_list,
    parse_evaluation_mode,
    parse_threshold,
)

THRESHOLD_CONTROLS = [
    ("almost_offset", "Offset threshold (almost)"),
    ("very_wrong_offset", "Offset threshold (very wrong)"),
    ("high_confidence", "High confidence threshold"),
    ("low_confidence", "Low confidence threshold"),
]

TOGGLE_CONTROLS = [
    ("show_low", "Low confidence"),
    ("show_mid", "Mid confidence"),
    ("show_high", "High confidence"),
    ("show_correct", "Correct"),
    ("show_almost", "Almost"),
    ("show_very_wrong", "Very wrong"),
    ("only_turnaround", "Only turnaround samples"),
    ("only_has_video", "Only samples with video"),
]

USE_ITERATION_KEY = "filter_use_iteration"
ITERATION_KEY = "filter_iteration"
SAMPLE_INDEX_KEY = "filter_sample_index"


def _threshold_key(name):
    return f"threshold_{name}"


def _toggle_key(name):
    return f"filter_{name}"


def init_control_state(config: EvaluationConfig = DEFAULT_CONFIG):
    """Seed the widget keys in session state, once per session."""
    for name, _ in THRESHOLD_CONTROLS:
        value = getattr(config.thresholds, name)
        st.session_state.setdefault(_threshold_key(name), str(value))
        st.session_state.setdefault(f"{_threshold_key(name)}_last_good", value)
    for name, _ in TOGGLE_CONTROLS:
        st.session_state.setdefault(_toggle_key(name), getattr(config.options, name))
    st.session_state.setdefault(USE_ITERATION_KEY, False)
    st.session_state.setdefault(ITERATION_KEY, "")
    st.session_state.setdefault(SAMPLE_INDEX_KEY, "")


def reset_controls(config: EvaluationConfig = DEFAULT_CONFIG, session=None):
    """Put every control back to `config` and reset `session` if given. Used as a button callback."""
    for name, _ in THRESHOLD_CONTROLS:
        value = getattr(config.thresholds, name)
        st.session_state[_threshold_key(name)] = str(value)
        st.session_state[f"{_threshold_key(name)}_last_good"] = value
    for name, _ in TOGGLE_CONTROLS:
        st.session_state[_toggle_key(name)] = getattr(config.options, name)
    st.session_state[USE_ITERATION_KEY] = False
    st.session_state[ITERATION_KEY] = ""
    st.session_state[SAMPLE_INDEX_KEY] = ""
    if session is not None:
        session.reset()


def create_threshold_input(name, label, container):
    """
    Create a text input for a threshold and parse its value.

    Args:
        name: ThresholdConfig field name
        label: Label for the input
        container: Streamlit container to place the input in

    Returns:
        The parsed threshold, or the last good value if the input is not a number
    """
    key = _threshold_key(name)
    last_good_key = f"{key}_last_good"

    container.text_input(label, key=key)
    value = parse_threshold(st.session_state[key], st.session_state[last_good_key])
    st.session_state[last_good_key] = value
    return value


def build_evaluation_config(container, defaults: EvaluationConfig = DEFAULT_CONFIG, session=None):
    """
    Render every control and build the EvaluationConfig they describe.

    Args:
        container: Streamlit container to place the controls in (usually the sidebar)
        defaults: Config that the controls start from and reset to
        session: ViewerSession reset along with the controls

    Returns:
        EvaluationConfig
    """
    init_control_state(defaults)

    container.subheader("Thresholds")
    thresholds = ThresholdConfig(
        **{
            name: create_threshold_input(name, label, container)
            for name, label in THRESHOLD_CONTROLS
        }
    )

    container.subheader("Filters")
    toggles = {
        name: container.checkbox(label, key=_toggle_key(name))
        for name, label in TOGGLE_CONTROLS
    }

    use_iteration = container.checkbox("Evaluate at iteration", key=USE_ITERATION_KEY)
    container.text_input(
        "Iteration", key=ITERATION_KEY, disabled=not use_iteration
    )
    container.text_input(
        "Sample indices (comma-separated)", key=SAMPLE_INDEX_KEY
    )

    options = FilterOptions(
        **toggles,
        sample_index_allow_list=parse_allow_list(st.session_state[SAMPLE_INDEX_KEY]),
        evaluation_mode=parse_evaluation_mode(use_iteration, st.session_state[ITERATION_KEY]),
    )

    container.button(
        "Reset filters", on_click=reset_controls, kwargs={"config": defaults, "session": session}
    )
    return EvaluationConfig(thresholds=thresholds, options=options)
