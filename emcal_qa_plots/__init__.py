"""
emcal_qa_plots

QA plots for the sPHENIX EMCal from per-run qa.root histogram files:
overlays of one histogram across runs, and single-run plots.
"""

from .analysis import CutSpec, RunAnalyzer, low_cut, make_cut_spec, normalize
from .plotting import PlotReport, PlotRequest, QAPlotter
from .runs import RunMeta, RunRegistry
from .source import Histogram1D, HistogramSource

__version__ = "0.1.0"
