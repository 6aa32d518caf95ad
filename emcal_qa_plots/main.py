# main.py
"""
emcal_qa_plots main script

Description: Command line entry point. Reads the config file, builds the run
  registry and the histogram source, and makes either the overlay plots or
  the single-run plots for every requested histogram.

  emcal-qa-plots overlay --config configs/emcal_qa_october.py
  emcal-qa-plots single --config configs/emcal_qa_october.py --cut 0.5 --cut-hist hClusterPt
"""

import argparse
from collections import namedtuple

import matplotlib.pyplot as plt

from .analysis import NO_CUT, make_cut_spec
from .config import load_config, require
from .errors import BadConfig, ConfigError, EmptyOverlay, WriteFailed
from .plotting import PlotReport, PlotRequest, QAPlotter
from .runs import RunRegistry
from .source import HistogramSource

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2
EXIT_NO_OUTPUT = 3

# --- Set global font sizes for all plots ---
plt.rcParams['axes.labelsize']   = 12 # x and y labels
plt.rcParams['axes.titlesize']   = 13 # main title of a subplot
plt.rcParams['xtick.labelsize']  = 10 # x-axis tick labels
plt.rcParams['ytick.labelsize']  = 10 # y-axis tick labels
plt.rcParams['legend.fontsize']  = 9  # legend

RunSummary = namedtuple('RunSummary', ['requests', 'drawn', 'skipped', 'images', 'failed', 'report'])


def make_plot_requests(config, selected=None):
    """PlotRequest objects from PLOT_REQUESTS, optionally only the histograms named in `selected`."""
    requests = []
    for entry in config.PLOT_REQUESTS:
        if isinstance(entry, dict):
            try:
                request = PlotRequest(entry['hist_name'], entry['display_title'], entry['x_label'], entry['y_label'])
            except KeyError as e:
                raise BadConfig(f"Plot request {entry} is missing key {e}") from e
        else:
            try:
                request = PlotRequest(*entry)
            except TypeError as e:
                raise BadConfig(f"Plot request {entry!r} is not (hist, title, x label, y label)") from e
        requests.append(request)

    if selected:
        known = {r.hist_name for r in requests}
        unknown = [name for name in selected if name not in known]
        if unknown:
            raise BadConfig(f"Histogram(s) {', '.join(unknown)} not in PLOT_REQUESTS")
        requests = [r for r in requests if r.hist_name in selected]

    if not requests:
        raise BadConfig("PLOT_REQUESTS is empty")
    return requests


def check_output_layout(config, mode, requests):
    """All output locations must be configured before any plot is made."""
    if mode == 'overlay':
        require(config, 'OVERLAY_OUTPUT_DIR')
    else:
        dir_by_hist = config.SINGLE_OUTPUT_DIR_BY_HIST
        missing = [r.hist_name for r in requests if not dir_by_hist.get(r.hist_name)]
        if missing:
            raise BadConfig(f"SINGLE_OUTPUT_DIR_BY_HIST has no directory for: {', '.join(missing)}")


def run_requests(plotter, mode, requests, normalize_enabled=True, cut_spec=NO_CUT, union_ranges=None):
    """
    Makes the plots of every request. Per-run problems are skipped inside the
    plotter; an empty overlay or a failed write only ends that request.
    """
    report = PlotReport()
    failed = 0
    for request in requests:
        print("===========================================")
        print(f"-----Start {mode.title()} Plotting for Histogram: {request.hist_name}-----")
        print("===========================================")
        try:
            if mode == 'overlay':
                plotter.plot_overlay(request, normalize_enabled, report, union_ranges=union_ranges)
            else:
                plotter.plot_single(request, cut_spec, normalize_enabled, report)
        except EmptyOverlay as e:
            print(f"  - WARNING: {e}")
        except WriteFailed as e:
            print(f"  - ERROR: {e}")
            failed += 1
        print(f"Completed Plotting for Histogram: {request.hist_name}\n")

    return RunSummary(len(requests), report.n_drawn, report.n_skipped, len(report.images), failed, report)


def print_summary(summary):
    print("\n========================================================")
    print("QA Plotting Summary")
    print("-----------------------------------")
    df = summary.report.to_dataframe()
    if not df.empty:
        counts = df.pivot_table(index='hist', columns='status', values='run', aggfunc='count', fill_value=0)
        print(counts.to_string())
        skipped = df[df['status'] == 'skipped']
        if not skipped.empty:
            print("\nSkipped runs:")
            for _, row in skipped.iterrows():
                print(f"  - {row['hist']:<16} Run: {row['run']:<8} {row['reason']}")
    if summary.failed:
        print(f"\nRequests that failed to write: {summary.failed}")
    print(f"\nSummary: requests processed: {summary.requests}, runs drawn: {summary.drawn}, "
          f"runs skipped: {summary.skipped}, images written: {summary.images}")
    print("========================================================\n")


def build_parser():
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--config', required=True, metavar='PATH',
                        help="python config file (see configs/emcal_qa_october.py)")
    common.add_argument('--no-normalize', action='store_true',
                        help="do not scale by 1/(nEvents * nSEBs)")
    common.add_argument('--cut', type=float, default=None, metavar='VALUE',
                        help="zero bins with a center below VALUE (single plots only)")
    common.add_argument('--cut-hist', nargs='+', default=None, metavar='NAME',
                        help="histograms the cut applies to (default: CUT_HISTOGRAMS)")
    common.add_argument('--hist', nargs='+', default=None, metavar='NAME',
                        help="only plot these histograms from PLOT_REQUESTS")

    parser = argparse.ArgumentParser(prog='emcal-qa-plots',
                                     description="EMCal QA plots from per-run qa.root files")
    subparsers = parser.add_subparsers(dest='mode', required=True)
    overlay = subparsers.add_parser('overlay', parents=[common],
                                    help="overlay every run on one canvas per histogram")
    overlay.add_argument('--union-ranges', action='store_true', default=None,
                         help="x range covering all runs instead of the first run")
    subparsers.add_parser('single', parents=[common],
                          help="one canvas per histogram and run")
    return parser


def main(argv=None):
    """
    Main function: parse arguments, set everything up and make the plots.
    Returns the process exit code.
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        registry = RunRegistry(require(config, 'RUN_REGISTRY'))
        source = HistogramSource(require(config, 'BASE_INPUT_DIR'), config.CONTAINER_FILENAME,
                                 config.NORMALIZATION_HIST_NAME)
        requests = make_plot_requests(config, args.hist)
        check_output_layout(config, args.mode, requests)
    except ConfigError as e:
        print(f"  - ERROR: Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    normalize_enabled = config.NORMALIZE and not args.no_normalize

    threshold = args.cut if args.cut is not None else config.CUT_THRESHOLD
    cut_hists = args.cut_hist if args.cut_hist else config.CUT_HISTOGRAMS
    cut_spec = make_cut_spec(threshold, cut_hists)
    if args.mode == 'overlay' and cut_spec.enabled:
        print("  - WARNING: The energy cut only applies to single plots, ignored for overlays.")
    elif cut_spec.enabled and not cut_spec.applies_to:
        print(f"  - WARNING: Cut at {threshold} requested but no histograms selected (--cut-hist / CUT_HISTOGRAMS).")
    elif args.cut_hist and threshold is None:
        print("  - WARNING: --cut-hist given without a cut value (--cut / CUT_THRESHOLD), no cut applied.")

    print(f"Runs: {', '.join(registry.runs())}")
    print(f"Normalization: {'on' if normalize_enabled else 'off'}")

    plotter = QAPlotter(config, registry, source)
    union_ranges = getattr(args, 'union_ranges', None)
    try:
        summary = run_requests(plotter, args.mode, requests, normalize_enabled, cut_spec, union_ranges)
    except ConfigError as e:
        print(f"  - ERROR: Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    print_summary(summary)

    if summary.images == 0:
        print("  - ERROR: No images were produced.")
        return EXIT_NO_OUTPUT
    return EXIT_OK

