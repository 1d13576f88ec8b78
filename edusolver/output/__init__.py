"""Output layer: rendering and export."""

from .renderer import SolutionRenderer
from .exporter import HistoryExporter

__all__ = ["SolutionRenderer", "HistoryExporter"]
