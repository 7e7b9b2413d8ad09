import streamlit as st
import git
from src.config import CONFIG_PATH

st.set_page_config(
    page_title="Analysis Overview - Prediction Viewer",
    layout="wide",
)


def display_yaml(file_path):
    with open(file_path, 'r') as file:
        st.code(file.read(), language="yaml")


def display_active_config():
    session = st.session_state.get("viewer_session")
    if session is None:
        st.info("Open the Sample Overview page to load the datasets.")
        return

    thresholds = session.config.thresholds
    options = session.config.options
    st.json(
        {
            "thresholds": {
                "almost_offset": thresholds.almost_offset,
                "very_wrong_offset": thresholds.very_wrong_offset,
                "high_confidence": thresholds.high_confidence,
                "low_confidence": thresholds.low_confidence,
            },
            "evaluation_mode": options.evaluation_mode.label,
            "iteration": options.evaluation_mode.iteration,
            "sample_index_allow_list": sorted(options.sample_index_allow_list),
            "datasets": {label: len(view) for label, view in session.views.items()},
            "failed": session.failed,
        }
    )
    for issue in thresholds.ordering_issues():
        st.warning(f"Threshold ordering: {issue}")


def display_git_info():
    # Get git repository information
    try:
        repo = git.Repo(search_parent_directories=True)
        commit_hash = repo.head.commit.hexsha

        # Check if there are any remotes
        if repo.remotes:
            remote_url = repo.remotes[0].url if not hasattr(repo.remotes, 'origin') else repo.remotes.origin.url
            st.write(f"**Repository URL:** {remote_url}")
        else:
            st.write("**Repository URL:** No remote repositories configured")

        st.write(f"**Current Commit Hash:** {commit_hash}")
    except (git.InvalidGitRepositoryError, git.NoSuchPathError, ValueError) as e:
        st.error(f"Error retrieving git information: {str(e)}")


st.title("Analysis Overview")

tab1, tab2, tab3 = st.tabs(["Config", "Active Settings", "Git"])
with tab1:
    st.header("Viewer Configuration")
    display_yaml(CONFIG_PATH)

with tab2:
    display_active_config()

with tab3:
    display_git_info()
