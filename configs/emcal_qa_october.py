# emcal_qa_october.py
"""
EMCal QA October run list

Description: Deployment config for emcal-qa-plots. Paths are relative to the
  directory the command is run from; change them to match your setup.

  emcal-qa-plots overlay --config configs/emcal_qa_october.py
  emcal-qa-plots single --config configs/emcal_qa_october.py --cut 1.0 --cut-hist hClusterPt hClusterECore
"""

# --- File Locations ---
# Each run has its own folder: rootOutput/<run>/qa.root
BASE_INPUT_DIR = "QA_EMCal/rootOutput"

OVERLAY_OUTPUT_DIR = "QA_EMCal/OverlayedPlotOutput"

# Create a separate folder for each histogram, the code will do the work from there
SINGLE_OUTPUT_DIR_BY_HIST = {
    "hClusterChi": "QA_EMCal/Individual_Plot_Output/Cluster_Chi",
    "hClusterPt": "QA_EMCal/Individual_Plot_Output/Cluster_pt",
    "hClusterECore": "QA_EMCal/Individual_Plot_Output/ECore",
    "hTotalCaloE": "QA_EMCal/Individual_Plot_Output/Total_Calo_Energy",
    "hTotalMBD": "QA_EMCal/Individual_Plot_Output/MBD_charge",
}

# --- Runs ---
# (run number, color, SEB count)
RUN_REGISTRY = [
    ("21813", "blue", 7),
    ("21796", "orangered", 8),
    ("21615", "black", 8),
    ("21599", "navy", 8),
    ("21598", "red", 8),
    ("21891", "teal", 7),
    ("22979", "magenta", 5),
    ("22950", "blueviolet", 5),
    ("22949", "darkmagenta", 5),
    ("22951", "steelblue", 5),
    ("22982", "dodgerblue", 5),
    ("21518", "deeppink", 8),
    ("21520", "orange", 8),
    ("21889", "gray", 7),
]

# hNClusters is filled once per event
NORMALIZATION_HIST_NAME = "hNClusters"
NORMALIZE = True

# --- Low energy cut, only used by single-run plots ---
#CUT_THRESHOLD = 1.0
CUT_HISTOGRAMS = ["hClusterPt", "hClusterECore", "hTotalCaloE"]
