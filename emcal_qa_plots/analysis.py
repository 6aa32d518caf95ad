# analysis.py
"""
emcal_qa_plots analysis

Description: Histogram transforms (per-event/per-SEB normalization and the
  low energy cut) and the RunAnalyzer class which loads one histogram for one
  run and applies them.
"""

from collections import namedtuple

import numpy as np

CutSpec = namedtuple('CutSpec', ['enabled', 'threshold', 'applies_to'])

NO_CUT = CutSpec(False, 0.0, frozenset())


def make_cut_spec(threshold, applies_to):
    """CutSpec enabled when a threshold is given."""
    if threshold is None:
        return NO_CUT
    return CutSpec(True, float(threshold), frozenset(applies_to))


def normalize(hist, n_events, n_sebs):
    """
    Returns a copy of `hist` scaled by 1 / (n_events * n_sebs), a per-event,
    per-SEB rate. With a non-positive n_events or n_sebs the copy is unscaled.
    """
    scaled = hist.copy()
    if n_events > 0 and n_sebs > 0:
        factor = 1.0 / (n_events * n_sebs)
        scaled.contents = scaled.contents * factor
        scaled.underflow *= factor
        scaled.overflow *= factor
    return scaled


def low_cut(hist, threshold):
    """
    Returns a copy of `hist` with every bin whose center is below `threshold`
    set to zero. A bin centered exactly on the threshold is kept. Underflow and
    overflow are not touched.
    """
    cut = hist.copy()
    cut.contents = np.where(cut.centers < threshold, 0.0, cut.contents)
    return cut


def event_count(norm_hist, method="entries"):
    """Number of events of a run, read off the normalization histogram."""
    if method == "integral":
        return int(norm_hist.integral())
    return int(norm_hist.entries)


class RunAnalyzer:
    """
    Loads histograms for a single run and applies the configured transforms.
    """
    def __init__(self, run_id, meta, source, count_method="entries"):
        self.run_id = run_id
        self.meta = meta
        self.source = source
        self.count_method = count_method
        self.n_events = None
        self.normalized = False
        self.cut_applied = False

    def load(self, hist_name, normalize_enabled=True, cut_spec=NO_CUT):
        """
        Reads `hist_name` and the normalization histogram from the run's file,
        then normalizes and cuts. Source errors propagate to the caller.
        The file is closed before returning.
        """
        with self.source.opened(self.run_id) as handle:
            hist = self.source.get(handle, hist_name, run=self.run_id)
            norm_hist = self.source.get_normalization(handle, run=self.run_id)

        self.n_events = event_count(norm_hist, self.count_method)

        if normalize_enabled:
            hist = normalize(hist, self.n_events, self.meta.seb_count)
            self.normalized = True
            print(f"  | Normalized using nEvents: {self.n_events} and SEB count: {self.meta.seb_count}")
        else:
            print("  | No normalization applied.")

        if cut_spec.enabled and hist_name in cut_spec.applies_to:
            hist = low_cut(hist, cut_spec.threshold)
            self.cut_applied = True
            print(f"  | Energy cut applied for bins below {cut_spec.threshold}")
        else:
            print(f"  | No energy cut applied for histogram: {hist_name}")

        return hist
