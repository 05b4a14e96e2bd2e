import csv
import logging
from pathlib import Path
from typing import Iterable

from .models import FileOutcome

HEADERS = [
    "Source Path",
    "Decision",
    "Action",
    "Target Path",
    "Fallback",
    "Capture Time",
    "Shifted Time",
    "Convention",
    "Reason",
    "Dry Run",
]


class ReportGenerator:
    def write_csv(self, outcomes: Iterable[FileOutcome], output_csv: Path) -> int:
        """
        Writes one row per outcome so a run (or a dry run preview) can be
        inspected afterwards. Returns the number of rows written.
        """
        logging.info(f"Writing report to {output_csv}")
        count = 0
        with open(output_csv, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(HEADERS)
            for outcome in outcomes:
                writer.writerow(self._row(outcome))
                count += 1

        logging.info(f"Report complete. {count} rows.")
        return count

    def _row(self, o: FileOutcome) -> list:
        return [
            str(o.source),
            o.decision.value,
            o.action,
            str(o.target) if o.target else "",
            "yes" if o.is_fallback else "",
            o.capture_datetime.isoformat(sep=" ") if o.capture_datetime else "",
            o.shifted_datetime.isoformat(sep=" ") if o.shifted_datetime else "",
            o.convention.value if o.convention else "",
            o.reason,
            "yes" if o.dry_run else "",
        ]
