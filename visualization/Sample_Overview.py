import os
import sys

import streamlit as st

st.set_page_config(
    page_title="Sample Overview - Prediction Viewer",
    layout="wide",
)

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from sampleview.lib.dataset_view import ViewerSession
from sampleview.lib.io import fetch_document
from src.card_state import CardStates
from src.config import DATA_ROOT, PAGE_SIZE, load_config
from src.filtering import build_evaluation_config
from src.rendering import VisualizationRenderer


@st.cache_data
def load_document(source):
    return fetch_document(source)


def get_session(viewer_config):
    if "viewer_session" not in st.session_state:
        st.session_state["viewer_session"] = ViewerSession.load(
            viewer_config.datasets, fetch=load_document, config=viewer_config.config
        )
        st.session_state["card_states"] = CardStates()
    return st.session_state["viewer_session"], st.session_state["card_states"]


def all_card_keys(session):
    return [
        (view.label, sample.sample_idx)
        for view in session.views.values()
        for sample in view.samples
    ]


st.title("Sample Overview")
st.markdown("Inspect final and per-iteration predictions of the evaluated samples")

viewer_config = load_config()
session, card_states = get_session(viewer_config)

st.sidebar.title("Controls")
config = build_evaluation_config(st.sidebar, defaults=viewer_config.config, session=session)
if config != session.config:
    session.apply(config)

for issue in config.thresholds.ordering_issues():
    st.sidebar.warning(f"Threshold ordering: {issue}")

col_expand, col_collapse = st.columns(2)
col_expand.button(
    "Expand all", on_click=card_states.expand_all, args=(all_card_keys(session),)
)
col_collapse.button(
    "Collapse all", on_click=card_states.collapse_all, args=(all_card_keys(session),)
)

for label, error in session.failed.items():
    st.error(f"Could not load {label}: {error}")

if session.views:
    tabs = st.tabs(list(session.views))
    for tab, view in zip(tabs, session.views.values()):
        with tab:
            st.header(view.label)
            VisualizationRenderer.display_global_stats(view, config.options.evaluation_mode)
            st.markdown("---")
            VisualizationRenderer.display_view(view, card_states, DATA_ROOT, PAGE_SIZE)
