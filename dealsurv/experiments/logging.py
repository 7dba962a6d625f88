"""CSV logging of estimated survival curves."""

import csv
import json
from pathlib import Path
from typing import Any, Dict, Union

from ..metrics.kaplan_meier import CurveRecord, SurvivalCurve


class CurveCSVWriter:
    """CSV writer for Kaplan-Meier curves.

    Writes one row per curve record, tagged with a run label so that
    several curves (e.g. different seeds or cohort sizes) can share a file.

    Args:
        output_path: Path to CSV file.
        append: If True, append to existing file.
    """

    FIELDNAMES = ["label", "n"] + list(CurveRecord._fields)

    def __init__(self, output_path: Union[str, Path], append: bool = False):
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

        mode = "a" if append and self.output_path.exists() else "w"
        self.file = open(self.output_path, mode, newline="")
        self.writer = csv.DictWriter(self.file, fieldnames=self.FIELDNAMES)

        # Write header if new file
        if mode == "w":
            self.writer.writeheader()

    def write(self, curve: SurvivalCurve, label: str = "") -> int:
        """Write every record of a curve.

        Args:
            curve: Curve to write.
            label: Run label stored in each row.

        Returns:
            Number of rows written.
        """
        for record in curve.records:
            row = {"label": label, "n": curve.n}
            row.update(record._asdict())
            self.writer.writerow(row)
        self.file.flush()
        return len(curve.records)

    def close(self) -> None:
        """Close the CSV file."""
        self.file.close()


def write_run_info(path: Union[str, Path], info: Dict[str, Any]) -> None:
    """Write run information to a JSON file.

    Args:
        path: Destination path.
        info: Dictionary of run information.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(info, f, indent=2, default=str)
