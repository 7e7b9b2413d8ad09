import os

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from sampleview.lib.aggregate import format_summary
from sampleview.lib.classify import ConfidenceCategory, OffsetCategory
from sampleview.lib.media import full_media_paths
from sampleview.lib.stats import format_stat
from src.card_state import CardState

OFFSET_COLORS = {
    OffsetCategory.CORRECT: "green",
    OffsetCategory.ALMOST: "orange",
    OffsetCategory.VERY_WRONG: "red",
    OffsetCategory.INCORRECT: "red",
    OffsetCategory.OTHER: "gray",
}

CONFIDENCE_COLORS = {
    ConfidenceCategory.HIGH: "green",
    ConfidenceCategory.MID: "orange",
    ConfidenceCategory.LOW: "red",
}

WINDOW_COLUMNS = {
    "iteration": "Iter",
    "predicted_class": "Pred Class",
    "ground_truth": "GT",
    "confidence": "Confidence",
    "offset_from_correct": "Offset",
    "correct": "Correct?",
    "cross_entropy": "Cross Entropy",
    "video_path": "Video",
    "melspectrogram_path": "Melspec",
}


def badge(text, color):
    return f":{color}-background[{text}]"


def offset_badge(value, category):
    text = "N/A" if value is None else value
    return badge(text, OFFSET_COLORS.get(category, "gray"))


def confidence_badge(value, category):
    text = "N/A" if value is None else f"{value:.3f}"
    return badge(text, CONFIDENCE_COLORS.get(category, "gray"))


def softmax_bar_colors(probs, ground_truth):
    """Bar colors for a softmax chart.

    The top class is green when it is the ground truth and red otherwise; the
    ground truth is gold when it is not the top class.
    """
    if not probs:
        return []
    top = max(range(len(probs)), key=lambda i: (probs[i], -i))
    colors = []
    for i in range(len(probs)):
        if i == top and i == ground_truth:
            colors.append("green")
        elif i == top:
            colors.append("red")
        elif i == ground_truth:
            colors.append("gold")
        else:
            colors.append("#ccc")
    return colors


def window_frame(sample):
    """Window breakdown of a sample as a DataFrame, one row per window."""
    rows = [
        {column: getattr(window, column) for column in WINDOW_COLUMNS}
        for window in sample.window_metrics
    ]
    return pd.DataFrame(rows, columns=list(WINDOW_COLUMNS)).rename(columns=WINDOW_COLUMNS)


class VisualizationRenderer:
    @staticmethod
    def display_global_stats(view, evaluation_mode):
        st.markdown(format_summary(view.summary, evaluation_mode).replace("\n", "  \n"))

    @staticmethod
    def softmax_chart(probs, ground_truth):
        fig = go.Figure(
            go.Bar(
                x=list(range(len(probs))),
                y=list(probs),
                marker_color=softmax_bar_colors(probs, ground_truth),
                hovertemplate="Class %{x}: %{y:.1%}<extra></extra>",
            )
        )
        fig.update_layout(height=200, margin=dict(l=0, r=0, t=10, b=0), yaxis_range=[0, 1])
        return fig

    @staticmethod
    def display_final_metrics(sample, result):
        final = sample.final_metrics
        point = result.point
        offset = point.offset if point else None
        confidence = point.confidence if point else None
        is_correct = result.offset_category is OffsetCategory.CORRECT

        left, right = st.columns(2)
        with left:
            st.markdown(f"**Ground Truth:** {final.ground_truth if final.ground_truth is not None else 'N/A'}")
            st.markdown(f"**Predicted:** {final.predicted_class if final.predicted_class is not None else 'N/A'}")
        with right:
            st.markdown(f"**Correct?** {badge('Yes', 'green') if is_correct else badge('No', 'red')}")
            st.markdown(f"**Offset:** {offset_badge(offset, result.offset_category)}")
            st.markdown(f"**Confidence:** {confidence_badge(confidence, result.confidence_category)}")

        st.markdown(
            f"**Cross Entropy:** {final.cross_entropy if final.cross_entropy is not None else 'N/A'}  \n"
            f"**Rank of Correct Class:** {final.rank_of_correct_class if final.rank_of_correct_class is not None else 'N/A'}"
        )

        off, conf = sample.stats.offset, sample.stats.confidence
        st.markdown(
            "**Window Stats (Offset):** "
            f"min={format_stat(off.min)} / max={format_stat(off.max)} / "
            f"mean={format_stat(off.mean)} / std={format_stat(off.std)}  \n"
            "**Window Stats (Confidence):** "
            f"min={format_stat(conf.min, 3)} / max={format_stat(conf.max, 3)} / "
            f"mean={format_stat(conf.mean, 3)} / std={format_stat(conf.std, 3)}"
        )

    @staticmethod
    def display_media(sample, data_root):
        st.markdown("**Full Audio/Video**")
        video_path, melspec_path = full_media_paths(sample, data_root)
        if os.path.exists(video_path):
            st.video(video_path)
        else:
            st.write("No full video found.")
        if os.path.exists(melspec_path):
            st.image(melspec_path, caption="Full Melspectrogram", width=600)
        else:
            st.write("No full spectrogram found.")

    @staticmethod
    def display_windows(sample, key_prefix):
        st.markdown("**Window Breakdown**")
        if not sample.window_metrics:
            st.caption("No window metrics.")
            return

        st.dataframe(window_frame(sample), hide_index=True)

        for window in sample.window_metrics:
            if not (window.softmax_probs or window.video_path or window.melspectrogram_path):
                continue
            st.markdown(f"Iteration {window.iteration}")
            cols = st.columns(3)
            if window.softmax_probs:
                cols[0].plotly_chart(
                    VisualizationRenderer.softmax_chart(window.softmax_probs, window.ground_truth),
                    use_container_width=True,
                    key=f"{key_prefix}_softmax_{window.iteration}",
                )
            if window.video_path and os.path.exists(window.video_path):
                cols[1].video(window.video_path)
            if window.melspectrogram_path and os.path.exists(window.melspectrogram_path):
                cols[2].image(window.melspectrogram_path, width=150)

    @staticmethod
    def display_sample_card(view, sample, card_states, data_root):
        key = (view.label, sample.sample_idx)
        result = view.sample_results[sample.sample_idx]
        state = card_states.state(key)
        icon = "▲" if state is CardState.COLLAPSED else "▼"

        with st.container(border=True):
            st.button(
                f"{icon} Sample #{sample.sample_idx}",
                key=f"card_{view.label}_{sample.sample_idx}",
                on_click=card_states.toggle,
                args=(key,),
            )
            if state is CardState.COLLAPSED:
                return

            VisualizationRenderer.display_final_metrics(sample, result)
            VisualizationRenderer.display_media(sample, data_root)
            VisualizationRenderer.display_windows(sample, key_prefix=f"card_{view.label}_{sample.sample_idx}")
            card_states.media_loaded(key)

    @staticmethod
    def display_view(view, card_states, data_root, page_size):
        samples = view.visible_samples()
        if not samples:
            st.warning("No samples match the selected filters.")
            return

        n_pages = max(1, -(-len(samples) // page_size))
        page_key = f"page_{view.label}"
        # Filters can shrink the page count below the stored page
        if st.session_state.get(page_key, 1) > n_pages:
            st.session_state[page_key] = n_pages
        page = st.number_input("Page", min_value=1, max_value=n_pages, key=page_key)
        start = (page - 1) * page_size
        for sample in samples[start : start + page_size]:
            VisualizationRenderer.display_sample_card(view, sample, card_states, data_root)
