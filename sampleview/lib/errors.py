"""Exception types raised by the sample viewer library."""


class SampleviewError(Exception):
    """Base class for errors raised by sampleview."""


class DatasetLoadError(SampleviewError):
    """A dataset document could not be fetched or parsed."""


class ConfigurationError(SampleviewError, ValueError):
    """The viewer configuration file is malformed."""
