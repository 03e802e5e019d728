"""
Export CDA analysis results to various formats.

Supports CSV tables of every evaluated shift, the significance summary and
the distance profile, the tab-separated results row and a JSON report.
"""

import json
import math
import warnings
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np
import pandas as pd

from ..core.processors import STATISTICS, distance_profile
from ..types import CDAResult
from .results_row import ResultsRow, results_header
from .settings_store import options_to_dict


def _json_float(value: float) -> Optional[float]:
    return None if value is None or not math.isfinite(value) else float(value)


class CDAResultExporter:
    """
    Export CDA analysis results to multiple formats.

    Formats:
        - csv: One row per evaluated shift
        - summary: Significance summary of M1, M2 and R
        - profile: Mean statistics by rounded shift distance
        - tsv: Results row with header
        - json: Summary, options and counts
    """

    def results_dataframe(self, result: CDAResult) -> pd.DataFrame:
        """Table with one row per evaluated shift."""
        rows = [
            {
                "dx": r.shift.dx,
                "dy": r.shift.dy,
                "distance": r.distance,
                "M1": r.m1,
                "M2": r.m2,
                "R": r.r,
                "n": r.n,
                "area": r.area,
                "null": r.distance > result.options.random_radius,
            }
            for r in result.results
        ]
        columns = ["dx", "dy", "distance", "M1", "M2", "R", "n", "area", "null"]
        return pd.DataFrame(rows, columns=columns)

    def summary_dataframe(self, result: CDAResult) -> pd.DataFrame:
        """Table with one row per statistic."""
        rows = []
        for name in STATISTICS:
            summary = result.statistics.get(name)
            if summary is None:
                continue
            rows.append({
                "statistic": name,
                "value": summary.value,
                "mean": summary.mean,
                "std": summary.std,
                "lower_limit": summary.lower_limit,
                "upper_limit": summary.upper_limit,
                "p_value": result.options.p_value,
                "samples": summary.samples,
                "verdict": summary.verdict.value,
            })
        columns = ["statistic", "value", "mean", "std", "lower_limit", "upper_limit",
                   "p_value", "samples", "verdict"]
        return pd.DataFrame(rows, columns=columns)

    def profile_dataframe(self, result: CDAResult) -> pd.DataFrame:
        """Mean M1, M2 and R at each rounded shift distance."""
        include = result.options.sub_random_samples
        data = {}
        for name in STATISTICS:
            distances, means = distance_profile(result.results, name, include_sub_random=include)
            data["distance"] = distances
            data[name] = means
        return pd.DataFrame(data, columns=["distance", *STATISTICS])

    def export(
        self,
        result: CDAResult,
        output_dir: Union[str, Path],
        formats: List[str] = ["csv", "json"],
        prefix: str = "cda",
    ) -> Dict[str, str]:
        """
        Export analysis results to specified formats.

        Args:
            result: CDAResult to export
            output_dir: Output directory
            formats: List of formats ("csv", "summary", "profile", "tsv", "json")
            prefix: Filename prefix

        Returns:
            Dictionary mapping format to file path
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        export_paths = {}
        for fmt in formats:
            if fmt == "csv":
                path = output_dir / f"{prefix}_shifts.csv"
                self.results_dataframe(result).to_csv(path, index=False)
            elif fmt == "summary":
                path = output_dir / f"{prefix}_summary.csv"
                self.summary_dataframe(result).to_csv(path, index=False)
            elif fmt == "profile":
                path = output_dir / f"{prefix}_profile.csv"
                self.profile_dataframe(result).to_csv(path, index=False)
            elif fmt == "tsv":
                path = self._export_tsv(result, output_dir, prefix)
            elif fmt == "json":
                path = self._export_json(result, output_dir, prefix)
            else:
                warnings.warn(f"Unknown format: {fmt}")
                continue
            export_paths[fmt] = str(path)

        return export_paths

    def _export_tsv(self, result: CDAResult, output_dir: Path, prefix: str) -> Path:
        """Export the results row with its header."""
        row = ResultsRow.from_result(result, image=prefix, method="CDA")
        output_path = output_dir / f"{prefix}_results.tsv"
        with open(output_path, "w") as f:
            f.write(results_header() + "\n")
            f.write(row.format() + "\n")
        return output_path

    def _export_json(self, result: CDAResult, output_dir: Path, prefix: str) -> Path:
        """Export the significance summary with options and counts."""
        statistics = {}
        for name, summary in result.statistics.items():
            statistics[name] = {
                "value": _json_float(summary.value),
                "mean": _json_float(summary.mean),
                "std": _json_float(summary.std),
                "lower_limit": _json_float(summary.lower_limit),
                "upper_limit": _json_float(summary.upper_limit),
                "verdict": summary.verdict.value,
                "samples": summary.samples,
                "histogram": {
                    "bin_starts": [float(v) for v in np.asarray(summary.histogram.bin_starts)],
                    "interval": float(summary.histogram.interval),
                    "counts": [int(v) for v in np.asarray(summary.histogram.counts)],
                },
            }

        unshifted = result.unshifted
        output_data = {
            "options": options_to_dict(result.options),
            "requested": result.requested,
            "achieved": result.achieved,
            "cancelled": result.cancelled,
            "denominator1": result.denominator1,
            "denominator2": result.denominator2,
            "n": unshifted.n if unshifted is not None else None,
            "area": _json_float(unshifted.area) if unshifted is not None else None,
            "statistics": statistics,
        }

        output_path = output_dir / f"{prefix}_summary.json"
        with open(output_path, "w") as f:
            json.dump(output_data, f, indent=2)
        return output_path
