import csv
import logging
from collections import Counter
from pathlib import Path
from typing import Dict, List

from .exceptions import UndatedRecordWarning
from .models import RunReport


class ReportGenerator:
    def __init__(self, report: RunReport):
        self.report = report

    def summary_lines(self) -> List[str]:
        r = self.report
        counts = [
            ("Discovered", r.discovered),
            ("Extracted", r.extracted),
            ("Warned", r.warned),
            ("Undated", len(r.undated)),
            ("Duplicates", len(r.duplicates)),
            ("Planned" if r.dry_run else "Copied", r.copied),
            ("Failed", r.failed),
        ]
        lines = [f"{label + ':':<12} {value}" for label, value in counts]

        # Break warnings down by kind so failures are never hidden in a total
        kinds = Counter(issue.kind for issue in r.issues)
        for kind, count in sorted(kinds.items()):
            lines.append(f"  {kind}: {count}")
        return lines

    def log_summary(self):
        logging.info("=== Run Summary ===")
        for line in self.summary_lines():
            logging.info(line)
        for issue in self.report.issues:
            if not isinstance(issue.error, UndatedRecordWarning):
                logging.debug(str(issue))
        for outcome in self.report.outcomes:
            if not outcome.ok:
                logging.warning(f"Copy failed: {outcome.record.source_path}: {outcome.error}")

    def write_csv(self, output_csv: Path):
        """
        Writes one row per discovered file describing what happened to it.
        """
        headers = [
            "Source Path",
            "Status",
            "Resolved Date",
            "Date Source",
            "Destination",
            "Notes",
        ]

        notes = self._notes_by_path()
        rows = []

        for outcome in self.report.outcomes:
            rec = outcome.record
            if outcome.ok:
                status = "Planned" if self.report.dry_run else "Copied"
                note = notes.get(rec.source_path, "")
            else:
                status = "Copy Failed"
                note = "; ".join(filter(None, [notes.get(rec.source_path, ""), f"CopyError: {outcome.error}"]))
            rows.append([rec.source_path, status, rec.resolved_date.isoformat(),
                         rec.date_source, outcome.destination, note])

        for match in self.report.duplicates:
            rec = match.discarded
            rows.append([rec.source_path, "Duplicate", rec.resolved_date.isoformat() if rec.resolved_date else "",
                         rec.date_source or "", "", f"Duplicate of {match.kept.source_path}"])

        for rec in self.report.undated:
            rows.append([rec.source_path, "Undated", "", "", "", notes.get(rec.source_path, "")])

        with open(output_csv, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(headers)
            writer.writerows(rows)

        logging.info(f"Report written to {output_csv} ({len(rows)} rows).")

    def _notes_by_path(self) -> Dict[Path, str]:
        notes: Dict[Path, List[str]] = {}
        for issue in self.report.issues:
            notes.setdefault(issue.path, []).append(f"{issue.kind}: {issue.error}")
        return {path: "; ".join(items) for path, items in notes.items()}
