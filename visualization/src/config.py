import os
import logging

from sampleview.lib.configuration import load_viewer_config

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Get paths for visualization
CONFIG_PATH = os.environ.get("SAMPLEVIEW_CONFIG_PATH", "viewer.yaml")
DATA_ROOT = os.environ.get("SAMPLEVIEW_DATA_ROOT", "data")
PAGE_SIZE = int(os.environ.get("SAMPLEVIEW_PAGE_SIZE", "50"))

logger.info(f"CONFIG_PATH: {os.path.abspath(CONFIG_PATH)}")
logger.info(f"DATA_ROOT: {os.path.abspath(DATA_ROOT)}")


def load_config():
    """Load the YAML viewer configuration file."""
    try:
        return load_viewer_config(CONFIG_PATH)
    except FileNotFoundError:
        logger.info(f"Current working directory: {os.getcwd()}")
        raise
