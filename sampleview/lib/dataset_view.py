"""Dataset views and the session that keeps them in sync with one configuration.

A DatasetView owns the samples of one dataset and the results of the last
recompute. A ViewerSession owns every view plus the current EvaluationConfig;
applying a new config recomputes every view before returning, so callers never
see a view computed under a stale config.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

import pandas as pd

from sampleview.lib.aggregate import GlobalSummary, aggregate
from sampleview.lib.classify import DatasetMode, classifier_for
from sampleview.lib.errors import DatasetLoadError
from sampleview.lib.filter import SampleResult, evaluate_sample
from sampleview.lib.records import SampleRecord, parse_document
from sampleview.lib.thresholds import DEFAULT_CONFIG, EvaluationConfig

logger = logging.getLogger(__name__)

RESULT_COLUMNS = ["visible", "offset_category", "confidence_category"]


class DatasetView:
    """Samples of one dataset and their classification under the current config."""

    def __init__(self, label: str, mode, samples: Iterable[SampleRecord]):
        self.label = label
        self.mode = DatasetMode(mode)
        self.classifier = classifier_for(self.mode)
        self.samples: List[SampleRecord] = list(samples)
        self.sample_results: Dict[int, SampleResult] = {}
        self.summary: Optional[GlobalSummary] = None
        self.config: Optional[EvaluationConfig] = None

    @classmethod
    def from_document(cls, label, mode, document):
        """Build a view from a decoded dataset document.

        Binary datasets may omit `sample_idx`; those samples are numbered by
        1-based position. Multi-class samples must carry an index.
        """
        mode = DatasetMode(mode)
        samples = parse_document(document, synthesize_missing_idx=mode is DatasetMode.BINARY)
        logger.info(f"Loaded {len(samples)} samples for '{label}' ({mode.value})")
        return cls(label, mode, samples)

    def __len__(self):
        return len(self.samples)

    def recompute(self, config: EvaluationConfig):
        """Classify and filter every sample under `config`, then summarize the visible ones."""
        results = {
            sample.sample_idx: evaluate_sample(sample, config, self.classifier)
            for sample in self.samples
        }
        self.sample_results = results
        self.summary = aggregate(
            (r.point for r in results.values() if r.visible), self.classifier
        )
        self.config = config
        logger.debug(
            f"'{self.label}': {self.visible_count} of {len(self.samples)} samples visible"
        )
        return self.summary

    @property
    def visible_count(self):
        return sum(1 for r in self.sample_results.values() if r.visible)

    def visible_samples(self) -> List[SampleRecord]:
        return [
            s
            for s in self.samples
            if s.sample_idx in self.sample_results and self.sample_results[s.sample_idx].visible
        ]

    @property
    def results(self) -> pd.DataFrame:
        """Per-sample results of the last recompute, indexed by sample_idx.

        Category columns hold the enum values ("correct", "low", ...) or None.
        """
        rows = [
            {
                "sample_idx": r.sample_idx,
                "visible": r.visible,
                "offset_category": r.offset_category.value if r.offset_category else None,
                "confidence_category": r.confidence_category.value if r.confidence_category else None,
            }
            for r in self.sample_results.values()
        ]
        if not rows:
            return pd.DataFrame(columns=RESULT_COLUMNS, index=pd.Index([], name="sample_idx"))
        return pd.DataFrame(rows).set_index("sample_idx")[RESULT_COLUMNS]


class ViewerSession:
    """All dataset views of a session, kept consistent with one EvaluationConfig."""

    def __init__(self, views: Iterable[DatasetView] = (), config: EvaluationConfig = DEFAULT_CONFIG):
        self.views: Dict[str, DatasetView] = {view.label: view for view in views}
        self.failed: Dict[str, str] = {}
        self.defaults = config
        self.config = config
        self.recompute()

    @classmethod
    def load(cls, dataset_specs, fetch: Callable, config: EvaluationConfig = DEFAULT_CONFIG):
        """Fetch every dataset and build a session from the ones that loaded.

        Args:
            dataset_specs: Iterable of DatasetSpec (label, source, mode).
            fetch: Callable returning the decoded document for a source. It must
                raise DatasetLoadError on failure.
            config: Initial configuration.

        Returns:
            ViewerSession. Datasets that failed to load are listed in `failed`
            and do not affect the others.
        """
        views = []
        failed = {}
        for spec in dataset_specs:
            try:
                document = fetch(spec.source)
                views.append(DatasetView.from_document(spec.label, spec.mode, document))
            except DatasetLoadError as e:
                logger.error(f"Error loading {spec.source} for '{spec.label}': {e}")
                failed[spec.label] = str(e)

        session = cls(views, config=config)
        session.failed = failed
        return session

    def recompute(self):
        for issue in self.config.thresholds.ordering_issues():
            logger.warning(f"Threshold ordering: {issue}")
        for view in self.views.values():
            view.recompute(self.config)

    def apply(self, config: EvaluationConfig):
        """Make `config` current and recompute every view."""
        self.config = config
        self.recompute()
        return self.summaries()

    def reset(self):
        """Restore the thresholds and filter options the session started with.

        These are DEFAULT_CONFIG unless the viewer configuration overrides thresholds.
        """
        return self.apply(self.defaults)

    def summaries(self) -> Dict[str, Optional[GlobalSummary]]:
        return {label: view.summary for label, view in self.views.items()}
