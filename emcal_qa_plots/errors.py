# errors.py
"""
emcal_qa_plots errors

Description: Exception types raised by the run registry, the histogram
  source and the plotter. Configuration faults are fatal, per-run faults
  make the plotter skip that run.
"""


class QAError(Exception):
    """Base class for all QA plotting errors."""


class ConfigError(QAError):
    """A fault in the configuration. Fatal at the command line."""


class BadConfig(ConfigError):
    """Missing setting or value out of range."""


class UnknownRun(ConfigError):
    def __init__(self, run):
        self.run = run
        super().__init__(f"Run '{run}' is not in the run registry")


class DuplicateRun(ConfigError):
    def __init__(self, run):
        self.run = run
        super().__init__(f"Run '{run}' appears more than once in the run registry")


class SourceError(QAError):
    """A per-run input fault. The run is skipped, the batch continues."""

    def __init__(self, run, message):
        self.run = run
        super().__init__(message)


class SourceMissing(SourceError):
    pass


class SourceCorrupt(SourceError):
    pass


class HistogramMissing(SourceError):
    def __init__(self, run, hist_name, message=None):
        self.hist_name = hist_name
        if message is None:
            message = f"Histogram '{hist_name}' not found"
        super().__init__(run, message)


class EmptyOverlay(QAError):
    """No run produced a histogram, so no overlay image was written."""

    def __init__(self, hist_name):
        self.hist_name = hist_name
        super().__init__(f"No run produced '{hist_name}', overlay not written")


class WriteFailed(QAError):
    def __init__(self, path, reason):
        self.path = path
        super().__init__(f"Could not write {path}: {reason}")
