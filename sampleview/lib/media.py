"""Helpers for locating the media attached to a sample.

Functions:
    - has_video: Whether any window of a sample carries a video.
    - sample_media_folder: Folder holding the full-window media of a sample.
    - full_media_paths: Paths of the full-window video and melspectrogram.
"""

import re
from pathlib import PurePosixPath

from sampleview.lib.records import SampleRecord

FULL_VIDEO_NAME = "full_window.mp4"
FULL_MELSPEC_NAME = "melspectrogram_full.png"

SAMPLE_FOLDER_PATTERN = re.compile(r"^(.*sample_\d+)/.*$")


def has_video(sample: SampleRecord) -> bool:
    return any(window.video_path for window in sample.window_metrics)


def sample_media_folder(sample: SampleRecord, data_root="data") -> str:
    """Return the folder of a sample's full-window media.

    The folder is taken from the first window's video path when it contains a
    `sample_<n>` directory, otherwise it is `<data_root>/sample_<sample_idx>`.
    """
    folder = str(PurePosixPath(data_root) / f"sample_{sample.sample_idx}")
    if sample.window_metrics and sample.window_metrics[0].video_path:
        match = SAMPLE_FOLDER_PATTERN.match(sample.window_metrics[0].video_path)
        if match:
            folder = match.group(1)
    return folder


def full_media_paths(sample: SampleRecord, data_root="data"):
    """Return (video_path, melspectrogram_path) for the full window of a sample."""
    folder = sample_media_folder(sample, data_root)
    return f"{folder}/{FULL_VIDEO_NAME}", f"{folder}/{FULL_MELSPEC_NAME}"
