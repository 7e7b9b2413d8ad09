"""Fetching of dataset documents.

A source is either an http(s) URL or a local path to a JSON file. Each document
is fetched once, without retries.
"""

import json
import logging
from pathlib import Path

import requests

from sampleview.lib.errors import DatasetLoadError

logger = logging.getLogger(__name__)


def is_url(source) -> bool:
    return str(source).startswith(("http://", "https://"))


def fetch_document(source, timeout=None):
    """Fetch and decode a dataset document.

    Args:
        source: URL or local file path of the JSON document.
        timeout: Optional timeout in seconds for URL sources.

    Returns:
        The decoded JSON value.

    Raises:
        DatasetLoadError: If the document cannot be read or is not valid JSON.
    """
    if is_url(source):
        logger.info(f"Fetching dataset document from {source}")
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DatasetLoadError(f"Could not fetch {source}: {e}") from e
        try:
            return response.json()
        except ValueError as e:
            raise DatasetLoadError(f"Invalid JSON from {source}: {e}") from e

    path = Path(source)
    logger.info(f"Reading dataset document from {path.resolve()}")
    try:
        with open(path, "r", encoding="utf-8") as file:
            return json.load(file)
    except OSError as e:
        raise DatasetLoadError(f"Could not read {path}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DatasetLoadError(f"Invalid JSON in {path}: {e}") from e
