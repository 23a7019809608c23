"""Logging setup and CSV output for simulation runs."""

import csv
import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np

from ..data.types import SimulationStage
from ..estimation.kaplan_meier import StratifiedSurvival

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: Union[int, str] = logging.INFO, log_file: Optional[Path] = None) -> None:
    """Configure the root logger for command-line runs.

    Warnings raised through :mod:`warnings` (for example an empty
    informative-censoring selection) are routed into the log.

    Args:
        level: Logging level name or number.
        log_file: Optional file receiving the same records as stderr.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    handlers = [logging.StreamHandler()]
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    logging.captureWarnings(True)


class CSVCurveWriter:
    """CSV writer for Kaplan-Meier curves.

    Writes one row per (stage, group, event time).

    Args:
        output_path: Path to CSV file.
        append: If True, append to existing file.
    """

    FIELDNAMES = [
        "stage",
        "group",
        "time",
        "n_at_risk",
        "n_events",
        "survival",
    ]

    def __init__(self, output_path: Union[str, Path], append: bool = False):
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

        mode = "a" if append and self.output_path.exists() else "w"
        self.file = open(self.output_path, mode, newline="")
        self.writer = csv.DictWriter(self.file, fieldnames=self.FIELDNAMES)

        # Write header if new file
        if mode == "w":
            self.writer.writeheader()

    def write(self, stage: SimulationStage, curves: StratifiedSurvival) -> None:
        """Write every step of every group curve for one stage.

        Args:
            stage: Stage the curves belong to.
            curves: Stratified curves to write.
        """
        for label, curve in curves:
            for t, n_risk, n_event, s in zip(
                curve.times, curve.n_at_risk, curve.n_events, curve.survival
            ):
                self.writer.writerow(
                    {
                        "stage": stage.name.lower(),
                        "group": label,
                        "time": float(t),
                        "n_at_risk": int(n_risk),
                        "n_events": int(n_event),
                        "survival": float(np.round(s, 10)),
                    }
                )
        self.file.flush()

    def close(self) -> None:
        """Close the CSV file."""
        self.file.close()

    def __enter__(self) -> "CSVCurveWriter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
