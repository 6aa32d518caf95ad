# config.py
"""
emcal_qa_plots config

Description: Default settings for the EMCal QA plotter. A deployment config
  file (a python file with the same UPPER_CASE names, see
  configs/emcal_qa_october.py) is passed with --config and overrides these.
  Paths have no default, they must come from the config file.
"""

import copy
import importlib.util
import os
import types

from .errors import BadConfig

# --- File Locations ---
# Directory holding one sub-directory per run, <BASE_INPUT_DIR>/<run>/<CONTAINER_FILENAME>
BASE_INPUT_DIR = None
CONTAINER_FILENAME = "qa.root"

# Overlay plots are all written here as Overlayed_<histName>.png
OVERLAY_OUTPUT_DIR = None

# Single-run plots go to one directory per histogram, as <histName>_Run_<run>.png
#  e.g. {"hClusterPt": "Individual_Plot_Output/Cluster_pt", ...}
SINGLE_OUTPUT_DIR_BY_HIST = {}

# --- Runs ---
# (run number, matplotlib color, SEB count). Order here is the overlay/legend order.
RUN_REGISTRY = []

# --- Normalization ---
# Histogram filled once per event, its entry count is the number of events of the run
NORMALIZATION_HIST_NAME = "hNClusters"
# "entries" (number of fills) or "integral" (sum of bin contents)
NORMALIZATION_COUNT = "entries"
# Scale every histogram by 1 / (nEvents * nSEBs)
NORMALIZE = True

# --- Histograms to plot ---
# (histogram name, title, x-axis label, y-axis label). ROOT style #chi^{2} / p_{T} markup is fine.
PLOT_REQUESTS = [
    ("hClusterChi", "Cluster #chi^{2} Distribution", "Cluster #chi^{2}", "Counts"),
    ("hTotalMBD", "MBD Charge Distribution", "MBD Charge", "Counts"),
    ("hClusterPt", "Cluster p_{T} Good Runs Distribution", "Cluster p_{T} (GeV)", "Counts"),
    ("hTotalCaloE", "Total Calorimeter Energy Distribution", "Cluster Energy (GeV)", "Counts"),
    ("hClusterECore", "Cluster ECore Distribution", "Cluster ECore (GeV)", "Counts"),
]

# --- Low energy cut (single-run plots only) ---
# Bins with a center below CUT_THRESHOLD are zeroed. None disables the cut.
CUT_THRESHOLD = None
CUT_HISTOGRAMS = []

# --- Plotting Parameters ---
ANNOTATION_TEXT = "sPHENIX EMCal QA"
ANNOTATION_POSITION = (0.67, 0.575) # figure fraction, below the legend
# Use the union of all runs' x ranges in overlays instead of the first run's range
OVERLAY_UNION_RANGES = False
FIGURE_SIZE = (8, 6)
DPI = 100 # 8x6 inches at 100 dpi gives 800x600 pixel images


def _defaults():
    """All UPPER_CASE settings of this module, copied so callers can modify them."""
    module_globals = globals()
    return {name: copy.deepcopy(module_globals[name]) for name in module_globals if name.isupper()}


def load_config(path=None):
    """
    Returns the settings as a namespace with UPPER_CASE attributes: the defaults
    above, overridden by the names defined in the python file at `path`.
    """
    settings = _defaults()

    if path is not None:
        if not os.path.isfile(path):
            raise BadConfig(f"Config file not found: {path}")
        spec = importlib.util.spec_from_file_location('emcal_qa_user_config', path)
        if spec is None or spec.loader is None:
            raise BadConfig(f"Config file {path} cannot be loaded as a python module")
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise BadConfig(f"Error while executing config file {path}: {e}") from e

        for name in dir(module):
            if not name.isupper():
                continue
            if name not in settings:
                print(f"  - WARNING: Unknown setting '{name}' in {path}, ignored.")
                continue
            settings[name] = getattr(module, name)

    config = types.SimpleNamespace(**settings)
    check_values(config)
    return config


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_number_pair(value):
    return isinstance(value, (list, tuple)) and len(value) == 2 and all(_is_number(v) for v in value)


def check_values(config):
    """Value checks that do not depend on the plotting mode."""
    if config.NORMALIZATION_COUNT not in ("entries", "integral"):
        raise BadConfig(f"NORMALIZATION_COUNT must be 'entries' or 'integral', got {config.NORMALIZATION_COUNT!r}")
    if not config.NORMALIZATION_HIST_NAME:
        raise BadConfig("NORMALIZATION_HIST_NAME is not set")
    if not config.CONTAINER_FILENAME:
        raise BadConfig("CONTAINER_FILENAME is not set")
    if config.CUT_THRESHOLD is not None:
        try:
            config.CUT_THRESHOLD = float(config.CUT_THRESHOLD)
        except (TypeError, ValueError):
            raise BadConfig(f"CUT_THRESHOLD must be a number, got {config.CUT_THRESHOLD!r}") from None
    # a bare string would become a set of single characters
    if (not isinstance(config.CUT_HISTOGRAMS, (list, tuple, set, frozenset))
            or not all(isinstance(name, str) for name in config.CUT_HISTOGRAMS)):
        raise BadConfig(f"CUT_HISTOGRAMS must be a list of histogram names, got {config.CUT_HISTOGRAMS!r}")
    if not isinstance(config.SINGLE_OUTPUT_DIR_BY_HIST, dict):
        raise BadConfig("SINGLE_OUTPUT_DIR_BY_HIST must be a dict of histogram name -> directory")
    if not _is_number(config.DPI) or config.DPI <= 0:
        raise BadConfig(f"DPI must be a positive number, got {config.DPI!r}")
    for name in ("FIGURE_SIZE", "ANNOTATION_POSITION"):
        if not _is_number_pair(getattr(config, name)):
            raise BadConfig(f"{name} must be a pair of numbers, got {getattr(config, name)!r}")


def require(config, name):
    """Returns a setting that has no usable default, BadConfig if it is unset."""
    value = getattr(config, name, None)
    if value is None or value == "" or value == [] or value == {}:
        raise BadConfig(f"{name} is not set in the config file")
    return value
