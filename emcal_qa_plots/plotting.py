# plotting.py
"""
emcal_qa_plots plotting

Description: Contains the QAPlotter class which draws the QA histograms,
  either all runs overlaid on one canvas or one canvas per run.
"""

import os
import re
from collections import namedtuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from .analysis import NO_CUT, RunAnalyzer
from .config import require
from .errors import BadConfig, EmptyOverlay, SourceError, WriteFailed

PlotRequest = namedtuple('PlotRequest', ['hist_name', 'display_title', 'x_label', 'y_label'])

# ROOT TLatex markup: #chi, #Delta, _{T}, ^{2}
_LATEX_TOKENS = re.compile(r"(?:#[A-Za-z]+|[_^]\{[^{}]*\})+")

OVERLAY_LINE_WIDTH = 1.0
SINGLE_LINE_WIDTH = 2.0
OVERLAY_MARKER_SIZE = 3.0
YLABEL_PAD = 10 # points, keeps the y title clear of the tick labels


def root_latex_to_mathtext(text):
    """
    Converts ROOT style markup into matplotlib mathtext, e.g.
    'Cluster #chi^{2}' -> 'Cluster $\\chi^{2}$', 'p_{T}' -> 'p$_{T}$'.
    Text already containing '$' is returned unchanged.
    """
    if not text or '$' in text:
        return text
    return _LATEX_TOKENS.sub(lambda m: "$" + m.group(0).replace("#", "\\") + "$", text)


def _y_limits(contents):
    """Log-scale y range covering the positive contents, None if there are none."""
    positive = contents[contents > 0]
    if positive.size == 0:
        return None
    return positive.min() * 0.5, positive.max() * 2.0


class PlotReport:
    """
    Bookkeeping for one or more plot requests: one record per (histogram, run)
    with its status, plus the written images.
    """
    def __init__(self):
        self.records = []
        self.images = []
        self.legend_labels = []
        self.x_range = None
        self.y_range = None

    def add(self, hist_name, run, status, reason="", output=None):
        self.records.append({
            'hist': hist_name,
            'run': run,
            'status': status,
            'reason': reason,
            'output': output,
        })

    @property
    def n_drawn(self):
        return sum(1 for r in self.records if r['status'] == 'drawn')

    @property
    def n_skipped(self):
        return sum(1 for r in self.records if r['status'] == 'skipped')

    def to_dataframe(self):
        return pd.DataFrame(self.records, columns=['hist', 'run', 'status', 'reason', 'output'])


class QAPlotter:
    """
    Handles plotting for the EMCal QA histograms.
    """
    def __init__(self, config, registry, source):
        """
        Initializes the plotter with the configuration, the run registry and
        the histogram source
        """
        self.config = config
        self.registry = registry
        self.source = source

    # --------------------------------------------------------------------------
    # Helper Methods
    # --------------------------------------------------------------------------

    def _new_figure(self):
        fig, ax = plt.subplots(figsize=self.config.FIGURE_SIZE)
        ax.set_yscale('log', nonpositive='clip')
        ax.grid(True, linestyle='--')
        return fig, ax

    def _set_labels(self, ax, title, x_label, y_label):
        ax.set_title(root_latex_to_mathtext(title))
        ax.set_xlabel(root_latex_to_mathtext(x_label), fontweight='bold')
        ax.set_ylabel(root_latex_to_mathtext(y_label), fontweight='bold', labelpad=YLABEL_PAD)

    def _draw_histogram(self, ax, hist, label=None):
        """Draws bin contents as a step line, plus markers at the bin centers if styled with one."""
        ax.stairs(hist.contents, hist.edges, baseline=None, color=hist.line_color,
                  linewidth=hist.line_width, label=label)
        if hist.marker_style:
            positive = hist.contents > 0
            ax.plot(hist.centers[positive], hist.contents[positive], linestyle='none',
                    marker=hist.marker_style, markersize=hist.marker_size, color=hist.marker_color)

    def _add_stats_box(self, ax, hist):
        """Adds a ROOT-like stats box (entries, mean, std dev) to the top right corner."""
        bins = hist.to_dataframe()
        total = bins['content'].sum()
        if total > 0:
            mean = (bins['bin_center'] * bins['content']).sum() / total
            std = np.sqrt((bins['content'] * (bins['bin_center'] - mean) ** 2).sum() / total)
        else:
            mean, std = 0.0, 0.0

        text = (
            f"{hist.name}\n"
            f"Entries  {hist.entries:d}\n"
            f"Mean     {mean:.4g}\n"
            f"Std Dev  {std:.4g}"
        )
        ax.text(0.98, 0.98, text, transform=ax.transAxes,
                horizontalalignment='right', verticalalignment='top',
                fontsize=9, family='monospace',
                bbox=dict(boxstyle='round,pad=0.5', fc='white', alpha=0.8))

    def _save_figure(self, fig, output_filename):
        """Writes the figure, WriteFailed if the directory or file cannot be written."""
        output_dir = os.path.dirname(output_filename)
        try:
            if output_dir and not os.path.exists(output_dir):
                os.makedirs(output_dir)
                print(f"Created directory: {output_dir}")
            fig.savefig(output_filename, dpi=self.config.DPI)
        except OSError as e:
            raise WriteFailed(output_filename, e) from e
        return output_filename

    def _load_run(self, run, request, report, normalize_enabled, cut_spec=NO_CUT):
        """Returns the transformed histogram of a run, or None (and a skip record) on a source error."""
        meta = self.registry.meta(run)
        analyzer = RunAnalyzer(run, meta, self.source, self.config.NORMALIZATION_COUNT)
        try:
            hist = analyzer.load(request.hist_name, normalize_enabled, cut_spec)
        except SourceError as e:
            print(f"  - SKIPPING run {run}: {e}")
            report.add(request.hist_name, run, 'skipped', reason=str(e))
            return None
        return hist

    # --------------------------------------------------------------------------
    # Plots
    # --------------------------------------------------------------------------

    def overlay_filename(self, hist_name):
        output_dir = require(self.config, 'OVERLAY_OUTPUT_DIR')
        return os.path.join(output_dir, f"Overlayed_{hist_name}.png")

    def single_output_dir(self, hist_name):
        output_dir = self.config.SINGLE_OUTPUT_DIR_BY_HIST.get(hist_name)
        if not output_dir:
            raise BadConfig(f"No output directory configured for '{hist_name}' in SINGLE_OUTPUT_DIR_BY_HIST")
        return output_dir

    def single_filename(self, hist_name, run):
        return os.path.join(self.single_output_dir(hist_name), f"{hist_name}_Run_{run}.png")

    def plot_overlay(self, request, normalize_enabled=True, report=None, union_ranges=None):
        """
        Overlays `request.hist_name` from every run in registry order on one
        log-y canvas and writes Overlayed_<hist>.png. The first drawn run sets
        the axis ranges unless union_ranges is on. Raises EmptyOverlay if no
        run could be drawn.
        """
        if report is None:
            report = PlotReport()
        if union_ranges is None:
            union_ranges = self.config.OVERLAY_UNION_RANGES
        output_filename = self.overlay_filename(request.hist_name)

        fig, ax = self._new_figure()
        try:
            x_ranges, y_ranges = [], []
            for run in self.registry.runs():
                print(f"\n  Processing run: {run}")
                hist = self._load_run(run, request, report, normalize_enabled)
                if hist is None:
                    continue

                meta = self.registry.meta(run)
                hist.show_stats = False # a stats box means nothing for superimposed runs
                hist.line_color = meta.color
                hist.marker_color = meta.color
                hist.marker_style = 'o'
                hist.marker_size = OVERLAY_MARKER_SIZE
                hist.line_width = OVERLAY_LINE_WIDTH

                self._draw_histogram(ax, hist, label=f"Run: {run}")

                x_ranges.append((hist.edges[0], hist.edges[-1]))
                y_range = _y_limits(hist.contents)
                if y_range is not None:
                    y_ranges.append(y_range)

                # The first run fixes the axes, later runs are drawn on top without rescaling
                if len(x_ranges) == 1:
                    ax.set_xlim(*x_ranges[0])
                    if y_range is not None:
                        ax.set_ylim(*y_range)
                    else:
                        ax.set_ylim(ax.get_ylim())

                report.add(request.hist_name, run, 'drawn')
                print(f"  Completed for run: {run}")

            if not x_ranges:
                raise EmptyOverlay(request.hist_name)

            if union_ranges:
                ax.set_xlim(min(lo for lo, _ in x_ranges), max(hi for _, hi in x_ranges))
                if y_ranges:
                    ax.set_ylim(min(lo for lo, _ in y_ranges), max(hi for _, hi in y_ranges))

            self._set_labels(ax, request.display_title, request.x_label, request.y_label)
            legend = ax.legend(loc='upper right', ncol=2, framealpha=0.2, edgecolor='black',
                               fontsize='small', handlelength=1.5)
            text_x, text_y = self.config.ANNOTATION_POSITION
            fig.text(text_x, text_y, self.config.ANNOTATION_TEXT, fontsize=10)

            report.legend_labels = [t.get_text() for t in legend.get_texts()]
            report.x_range = ax.get_xlim()
            report.y_range = ax.get_ylim()

            self._save_figure(fig, output_filename)
            report.images.append(output_filename)
            print(f"Overlay plot saved to: {output_filename}")
        finally:
            plt.close(fig)
        return output_filename

    def plot_single(self, request, cut_spec=NO_CUT, normalize_enabled=True, report=None):
        """
        Draws `request.hist_name` for each run on its own canvas and writes
        <hist>_Run_<run>.png into the histogram's output directory.
        """
        if report is None:
            report = PlotReport()
        # Fails before any run is read if the histogram has no output directory
        self.single_output_dir(request.hist_name)

        written = []
        for run in self.registry.runs():
            meta = self.registry.meta(run)
            print("-------------------------------------------------")
            print(f"| Processing Run: {run}")
            print(f"| SEB Count: {meta.seb_count}")

            hist = self._load_run(run, request, report, normalize_enabled, cut_spec)
            if hist is None:
                continue

            hist.line_color = meta.color
            hist.line_width = SINGLE_LINE_WIDTH

            output_filename = self.single_filename(request.hist_name, run)
            fig, ax = self._new_figure()
            try:
                self._draw_histogram(ax, hist)
                self._set_labels(ax, f"{request.display_title} (Run: {run})", request.x_label, request.y_label)
                if hist.show_stats:
                    self._add_stats_box(ax, hist)
                self._save_figure(fig, output_filename)
            finally:
                plt.close(fig)

            written.append(output_filename)
            report.images.append(output_filename)
            report.add(request.hist_name, run, 'drawn', output=output_filename)
            print(f"| Saved plot for histogram: {request.hist_name} and run: {run} at path: {output_filename}")
        return written
