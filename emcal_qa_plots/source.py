# source.py
"""
emcal_qa_plots source

Description: Reads 1-D histograms out of the per-run QA ROOT files
  (<base dir>/<run>/qa.root) with uproot, and holds them as Histogram1D
  objects backed by numpy arrays.
"""

import os
from contextlib import contextmanager

import numpy as np
import pandas as pd
import uproot
import uproot.behaviors.TH1

from .errors import HistogramMissing, SourceCorrupt, SourceMissing


class Histogram1D:
    """
    A binned 1-D histogram: bin edges, bin contents, the underflow and
    overflow contents, the total number of entries and the labels and
    styling used when drawing it.
    """
    def __init__(self, name, edges, contents, entries=0, title="", x_label="", y_label="",
                 underflow=0.0, overflow=0.0):
        edges = np.asarray(edges, dtype=float)
        contents = np.asarray(contents, dtype=float)
        if edges.ndim != 1 or contents.ndim != 1 or len(edges) != len(contents) + 1:
            raise ValueError(f"Histogram '{name}' needs len(edges) == len(contents) + 1, "
                             f"got {len(edges)} edges and {len(contents)} contents")
        self.name = name
        self.edges = edges
        self.contents = contents
        self.entries = int(entries)
        self.title = title
        self.x_label = x_label
        self.y_label = y_label
        self.underflow = float(underflow)
        self.overflow = float(overflow)

        # Drawing attributes, set by the plotter
        self.line_color = 'black'
        self.line_width = 1.0
        self.marker_color = 'black'
        self.marker_style = None
        self.marker_size = 0.0
        self.show_stats = True

    @property
    def n_bins(self):
        return len(self.contents)

    @property
    def centers(self):
        return (self.edges[:-1] + self.edges[1:]) / 2

    def integral(self):
        """Sum of the in-range bin contents."""
        return float(self.contents.sum())

    def copy(self):
        new = Histogram1D(self.name, self.edges.copy(), self.contents.copy(), self.entries,
                          self.title, self.x_label, self.y_label, self.underflow, self.overflow)
        new.line_color = self.line_color
        new.line_width = self.line_width
        new.marker_color = self.marker_color
        new.marker_style = self.marker_style
        new.marker_size = self.marker_size
        new.show_stats = self.show_stats
        return new

    def to_dataframe(self):
        """One row per bin: low edge, high edge, center and content."""
        return pd.DataFrame({
            'bin_low': self.edges[:-1],
            'bin_high': self.edges[1:],
            'bin_center': self.centers,
            'content': self.contents,
        })

    def __repr__(self):
        return f"Histogram1D({self.name!r}, n_bins={self.n_bins}, entries={self.entries})"


def histogram_from_uproot(obj, name):
    """Converts an uproot TH1 model into a Histogram1D."""
    contents, edges = obj.to_numpy(flow=False)
    with_flow = obj.values(flow=True)
    x_axis = obj.member("fXaxis")
    y_axis = obj.member("fYaxis")
    return Histogram1D(
        name=name,
        edges=edges,
        contents=contents,
        entries=obj.member("fEntries"),
        title=obj.member("fTitle"),
        x_label=x_axis.member("fTitle"),
        y_label=y_axis.member("fTitle"),
        underflow=with_flow[0],
        overflow=with_flow[-1],
    )


class HistogramSource:
    """
    Read-only access to the per-run QA files. Every run file is expected to
    hold the normalization histogram next to the histograms that get plotted.
    """
    def __init__(self, base_dir, filename="qa.root", normalization_hist_name="hNClusters"):
        self.base_dir = base_dir
        self.filename = filename
        self.normalization_hist_name = normalization_hist_name

    def path_for(self, run):
        return os.path.join(self.base_dir, str(run), self.filename)

    def open(self, run):
        """Opens the QA file of a run and returns the uproot directory handle."""
        filepath = self.path_for(run)
        if not os.path.isfile(filepath):
            raise SourceMissing(run, f"File not found: {filepath}")
        try:
            return uproot.open(filepath)
        except (FileNotFoundError, PermissionError, IsADirectoryError) as e:
            raise SourceMissing(run, f"Could not read {filepath}: {e}") from e
        except Exception as e:
            raise SourceCorrupt(run, f"Not a valid ROOT file {filepath}: {e}") from e

    def close(self, handle):
        handle.close()

    @contextmanager
    def opened(self, run):
        handle = self.open(run)
        try:
            yield handle
        finally:
            self.close(handle)

    def get(self, handle, hist_name, run=None):
        """Returns the named 1-D histogram, HistogramMissing if absent or not 1-D."""
        if hist_name not in handle:
            raise HistogramMissing(run, hist_name)
        try:
            obj = handle[hist_name]
        except Exception as e:
            raise HistogramMissing(run, hist_name, f"Histogram '{hist_name}' could not be read: {e}") from e

        if not isinstance(obj, uproot.behaviors.TH1.Histogram) or len(obj.axes) != 1:
            raise HistogramMissing(run, hist_name,
                                   f"Object '{hist_name}' is a {obj.classname}, not a 1-D histogram")
        return histogram_from_uproot(obj, hist_name)

    def get_normalization(self, handle, run=None):
        return self.get(handle, self.normalization_hist_name, run=run)
