"""CSV trend data generator.

Exports one row per run so trends can be charted in external tools.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from perfguard.models.metrics import MetricsSnapshot, PerformanceDataPoint

CSV_HEADER = [
    "Run",
    "Performance",
    "Accessibility",
    "BestPractices",
    "SEO",
    "FCP",
    "LCP",
    "SpeedIndex",
    "TBT",
    "CLS",
]


class TrendCsvGenerator:
    """Generates CSV trend data from a chronological list of snapshots."""

    def render(self, history: Sequence[MetricsSnapshot | PerformanceDataPoint]) -> str:
        """Render the CSV content.

        Args:
            history: Snapshots in chronological order.

        Returns:
            CSV text with a header row and one row per snapshot.
        """
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)

        for run, metrics in enumerate(history, start=1):
            writer.writerow([
                run,
                f"{metrics.performance_score * 100:.2f}",
                f"{metrics.accessibility_score * 100:.2f}",
                f"{metrics.best_practices_score * 100:.2f}",
                f"{metrics.seo_score * 100:.2f}",
                f"{metrics.first_contentful_paint:.0f}",
                f"{metrics.largest_contentful_paint:.0f}",
                f"{metrics.speed_index:.0f}",
                f"{metrics.total_blocking_time:.0f}",
                f"{metrics.cumulative_layout_shift:.3f}",
            ])

        return buffer.getvalue()

    def generate(
        self,
        history: Sequence[MetricsSnapshot | PerformanceDataPoint],
        output_path: Path,
    ) -> None:
        """Write the CSV trend data to a file, creating its directory."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.render(history), encoding="utf-8")


def generate_trend_csv(history: Sequence[MetricsSnapshot | PerformanceDataPoint]) -> str:
    """Convenience function to render CSV trend data."""
    return TrendCsvGenerator().render(history)
