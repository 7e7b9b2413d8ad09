"""Summary statistics over the visible samples of a dataset view.

Confidence and offset are averaged differently:
- mean confidence divides by the number of samples; a missing confidence counts as 0.
- mean offset divides by the number of samples that have an offset.

Functions:
    - points_frame: Tabulate evaluation points with their correctness.
    - aggregate: Summarize evaluation points.
    - format_summary: Render a summary for display.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

import pandas as pd

from sampleview.lib.classify import Classifier, EvaluationPoint
from sampleview.lib.thresholds import EvaluationMode

logger = logging.getLogger(__name__)

NO_SAMPLES_MESSAGE = "No samples available with current filters."


@dataclass(frozen=True)
class GlobalSummary:
    count: int
    accuracy_percent: float
    mean_confidence: float
    mean_offset: Optional[float]


def points_frame(points: Iterable[EvaluationPoint], classifier: Classifier) -> pd.DataFrame:
    """Tabulate evaluation points.

    Returns:
        DataFrame with float columns `offset` and `confidence` (NaN when missing)
        and a boolean column `correct`.
    """
    points = list(points)
    return pd.DataFrame(
        {
            "offset": pd.Series([p.offset for p in points], dtype=float),
            "confidence": pd.Series([p.confidence for p in points], dtype=float),
            "correct": pd.Series([classifier.is_correct(p) for p in points], dtype=bool),
        }
    )


def aggregate(points: Iterable[EvaluationPoint], classifier: Classifier) -> Optional[GlobalSummary]:
    """Summarize the evaluation points of the visible samples.

    Args:
        points: Evaluation points of the samples that passed the filters.
        classifier: Classifier of the dataset, used to decide correctness.

    Returns:
        GlobalSummary, or None when there are no samples.
    """
    df = points_frame(points, classifier)
    count = len(df)
    if count == 0:
        return None

    offsets = df["offset"].dropna()
    return GlobalSummary(
        count=count,
        accuracy_percent=100.0 * int(df["correct"].sum()) / count,
        mean_confidence=float(df["confidence"].fillna(0).sum()) / count,
        mean_offset=float(offsets.sum()) / len(offsets) if len(offsets) else None,
    )


def format_summary(summary: Optional[GlobalSummary], mode: EvaluationMode) -> str:
    if summary is None:
        return NO_SAMPLES_MESSAGE

    label = mode.label
    mean_offset = "N/A" if summary.mean_offset is None else f"{summary.mean_offset:.2f}"
    return "\n".join(
        [
            f"Total Samples: {summary.count}",
            f"Accuracy ({label} predictions): {summary.accuracy_percent:.1f}%",
            f"Average {label} Confidence: {summary.mean_confidence:.3f}",
            f"Average {label} Offset: {mean_offset}",
        ]
    )
