"""
Input/output helpers for CDA results and settings.
"""

from .exporters import CDAResultExporter
from .results_row import ResultsRow, RESULTS_COLUMNS, results_header
from .settings_store import save_options, load_options, options_to_dict, options_from_dict

__all__ = [
    "CDAResultExporter",
    "ResultsRow",
    "RESULTS_COLUMNS",
    "results_header",
    "save_options",
    "load_options",
    "options_to_dict",
    "options_from_dict",
]
