"""Viewer configuration file.

The YAML file lists the datasets to show and may override the default
thresholds:

    datasets:
      - label: 21-Class Predictions
        source: data/samples.json
        mode: multi_class
      - label: Binary Predictions (In Sync/Out of Sync)
        source: data_oos/samples.json
        mode: binary
    thresholds:
      almost_offset: 2
"""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import List

import yaml

from sampleview.lib.classify import DatasetMode
from sampleview.lib.errors import ConfigurationError
from sampleview.lib.thresholds import DEFAULT_CONFIG, EvaluationConfig, ThresholdConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatasetSpec:
    label: str
    source: str
    mode: DatasetMode = DatasetMode.MULTI_CLASS


@dataclass(frozen=True)
class ViewerConfig:
    datasets: List[DatasetSpec]
    config: EvaluationConfig = DEFAULT_CONFIG


def parse_dataset_spec(raw, base_dir=None) -> DatasetSpec:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Dataset entry must be a mapping, got {raw!r}")
    missing = [key for key in ("label", "source") if not raw.get(key)]
    if missing:
        raise ConfigurationError(f"Dataset entry {raw!r} is missing {', '.join(missing)}")

    try:
        mode = DatasetMode(raw.get("mode", DatasetMode.MULTI_CLASS.value))
    except ValueError:
        valid = ", ".join(m.value for m in DatasetMode)
        raise ConfigurationError(
            f"Unknown mode {raw.get('mode')!r} for dataset '{raw['label']}' (expected one of: {valid})"
        ) from None

    source = str(raw["source"])
    if base_dir is not None and not source.startswith(("http://", "https://")):
        source = str(Path(base_dir) / source)
    return DatasetSpec(label=str(raw["label"]), source=source, mode=mode)


def parse_thresholds(raw) -> ThresholdConfig:
    if raw is None:
        return DEFAULT_CONFIG.thresholds
    if not isinstance(raw, dict):
        raise ConfigurationError(f"thresholds must be a mapping, got {raw!r}")

    known = {f.name for f in fields(ThresholdConfig)}
    unknown = set(raw) - known
    if unknown:
        raise ConfigurationError(f"Unknown threshold keys: {', '.join(sorted(unknown))}")

    values = {}
    for key, value in raw.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigurationError(f"Threshold {key} must be a number, got {value!r}")
        values[key] = value
    return replace(DEFAULT_CONFIG.thresholds, **values)


def parse_viewer_config(raw, base_dir=None) -> ViewerConfig:
    """Build a ViewerConfig from a decoded YAML mapping.

    Args:
        raw: Decoded YAML document.
        base_dir: Directory that relative dataset sources are resolved against.
            None leaves them relative to the working directory.

    Returns:
        ViewerConfig.

    Raises:
        ConfigurationError: If the document is malformed.
    """
    if not isinstance(raw, dict):
        raise ConfigurationError("Viewer configuration must be a mapping")

    datasets = raw.get("datasets")
    if not isinstance(datasets, list) or not datasets:
        raise ConfigurationError("Viewer configuration needs a non-empty 'datasets' list")

    specs = [parse_dataset_spec(entry, base_dir) for entry in datasets]
    labels = [spec.label for spec in specs]
    if len(set(labels)) != len(labels):
        raise ConfigurationError(f"Dataset labels must be unique: {labels}")

    thresholds = parse_thresholds(raw.get("thresholds"))
    return ViewerConfig(datasets=specs, config=replace(DEFAULT_CONFIG, thresholds=thresholds))


def load_viewer_config(config_path) -> ViewerConfig:
    """Load the YAML viewer configuration file.

    Relative dataset sources are resolved against the directory of the file.
    """
    config_path = Path(config_path)
    try:
        with open(config_path, "r") as file:
            raw = yaml.safe_load(file)
    except FileNotFoundError:
        logger.error(f"Config file not found at: {config_path.resolve()}")
        raise
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    return parse_viewer_config(raw, base_dir=config_path.parent)
