"""
Configuration for the Exam Results Dashboard

Contains workbook locations, sheet layout markers and KPI settings.
To point the dashboard at different files, edit YEAR_FILES below or set
RESULTS_DATA_DIR.
"""

import os
from pathlib import Path

# =============================================================================
# DATA FILES
# =============================================================================
# Each year group maps to one results workbook (first sheet is read)

DATA_DIR = Path(os.environ.get("RESULTS_DATA_DIR", "assets"))

YEAR_FILES = {
    "7": "year7.xlsx",
    "8": "year8.xlsx",
    "9": "year9.xlsx",
    "10": "year10.xlsx",
}

DEFAULT_YEAR = "7"

# =============================================================================
# SHEET LAYOUT
# =============================================================================
# A subject block starts at a header row ("Class" in column A, "Total" in
# column C). The subject name sits SUBJECT_LOOKBACK rows above that header.

HEADER_MARKERS = {0: "Class", 2: "Total"}
SUBJECT_LOOKBACK = 2
OVERALL_LABEL = "Overall"

# Numeric columns of a detail row, starting at column index 2
RECORD_COLUMNS = [
    "total",
    "Astar", "A2", "B3", "B4", "C5", "C6", "D7", "E8", "U",
    "total1_6", "pct1_6",
    "total1_8", "pct1_8",
]
FIRST_VALUE_COLUMN = 2

# =============================================================================
# KPI SETTINGS
# =============================================================================

METRICS = {
    "pct1_6": "% 1–6",
    "pct1_8": "% 1–8",
}
DEFAULT_METRIC = "pct1_6"

# "weighted": Overall % weighted by each subject's candidate total
# "simple":   plain mean of each subject's Overall %
AVERAGING_POLICY = "weighted"

KPI_LABELS = [
    "Overall % 1–6",
    "Overall % 1–8",
    "Total Candidates",
    "No. of Subjects",
]

# =============================================================================
# CHART DISPLAY SETTINGS
# =============================================================================

METRIC_COLORS = {
    "pct1_6": "#1976d2",    # Blue
    "pct1_8": "#388e3c",    # Green
}

PERCENT_AXIS_RANGE = [0, 100]
