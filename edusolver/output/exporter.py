"""
Export saved scans to plain text, CSV or Markdown.

Each writer returns the document as a string and optionally writes it
to a file. Images are not exported, only their count.
"""

import csv
import io
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from ..models import Scan
from ..utils.errors import ExportError

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Timestamp",
    "Mode",
    "Level",
    "Subject",
    "Style",
    "Images",
    "Text",
    "Result",
]

FORMATS = {".txt": "text", ".csv": "csv", ".md": "markdown"}


def format_timestamp(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d %H:%M")


def scan_result(scan: Scan) -> str:
    """The solution, the error, or a pending marker."""
    if scan.loading:
        return "(still processing)"
    return scan.solution or scan.error or ""


class HistoryExporter:
    """
    Writes a list of scans in one of the supported formats.

    Usage:
        exporter = HistoryExporter(history.get_scans())
        exporter.export(Path("history.md"))
    """

    def __init__(self, scans: List[Scan]):
        self.scans = scans

    def to_text(self, path: Optional[Path] = None) -> str:
        """Export to plain text."""
        lines = ["EduSolver History Export", "=" * 60, ""]

        for scan in self.scans:
            lines.append(f"Date: {format_timestamp(scan.timestamp)}")
            lines.append(f"Mode: {scan.mode.value}")
            lines.append(f"Level: {scan.education_level.value}")
            lines.append(f"Subject: {scan.display_subject}")
            lines.append(f"Style: {scan.explanation_style.label}")
            lines.append(f"Images: {len(scan.images)}")
            for i, text in enumerate(scan.text_inputs, 1):
                lines.append(f"Text #{i}: {text}")
            lines.append("Result:")
            lines.append(scan_result(scan))
            lines.append("-" * 40)
            lines.append("")

        return self._finish("\n".join(lines), path)

    def to_csv(self, path: Optional[Path] = None) -> str:
        """Export to CSV, one row per scan."""
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(CSV_HEADER)

        for scan in self.scans:
            writer.writerow(
                [
                    datetime.fromtimestamp(scan.timestamp / 1000).isoformat(),
                    scan.mode.value,
                    scan.education_level.value,
                    scan.display_subject,
                    scan.explanation_style.value,
                    len(scan.images),
                    "\n".join(scan.text_inputs),
                    scan_result(scan),
                ]
            )

        return self._finish(buffer.getvalue(), path)

    def to_markdown(self, path: Optional[Path] = None) -> str:
        """Export to a Markdown document; LaTeX in answers is kept as-is."""
        parts = ["# EduSolver History", ""]

        for scan in self.scans:
            parts.append(
                f"## {format_timestamp(scan.timestamp)} | "
                f"{scan.education_level.value} | {scan.display_subject}"
            )
            parts.append("")
            parts.append(f"*Mode:* {scan.mode.value} | *Style:* {scan.explanation_style.label}")
            if scan.images:
                parts.append(f"*Images:* {len(scan.images)}")
            parts.append("")
            for text in scan.text_inputs:
                parts.append(f"> {text}")
                parts.append("")
            parts.append(scan_result(scan))
            parts.append("")
            parts.append("---")
            parts.append("")

        return self._finish("\n".join(parts), path)

    def export(self, path: Union[str, Path]) -> str:
        """
        Export to a file, choosing the format from its suffix.

        Raises:
            ExportError: Unknown suffix or the file cannot be written
        """
        path = Path(path)
        fmt = FORMATS.get(path.suffix.lower())
        if fmt is None:
            raise ExportError(
                f"Unsupported export format: '{path.suffix or path.name}'",
                suggestions=["Use a .txt, .csv or .md file name"],
            )
        writer = {
            "text": self.to_text,
            "csv": self.to_csv,
            "markdown": self.to_markdown,
        }[fmt]
        return writer(path)

    def _finish(self, content: str, path: Optional[Path]) -> str:
        if path is not None:
            try:
                with open(path, "w", encoding="utf-8", newline="") as f:
                    f.write(content)
            except OSError as e:
                raise ExportError(
                    f"Could not write to {path}",
                    technical_details=str(e),
                ) from e
            logger.info("Exported %d scan(s) to %s", len(self.scans), path)
        return content
