"""Segment tables for the trace, rendered with ``tabulate``."""

from html import escape
from typing import Any, Iterable, List, Optional, Sequence

from tabulate import tabulate

from paramo.logger.base_logger import TraceLogger
from paramo.logger.formatting import format_state


class Logger(TraceLogger):
    """
    Trace logger with segment tables.

    Usage:
        logger = Logger("paramo.trace")
        logger.section("Discretization (res=50)")
        logger.segment_table([("0", 1.0), ("1", 2.5)], title="Edge 3")
        logger.write_html("output/paramo_trace.html")
    """

    float_format: str = ".6g"

    def table(
        self,
        rows: Sequence[Sequence[Any]],
        headers: Sequence[str],
        title: Optional[str] = None,
    ) -> None:
        if self.disabled:
            return
        text = tabulate(
            rows, headers=list(headers), tablefmt="simple", floatfmt=self.float_format
        )
        if title:
            self.logger.info("%s:\n%s", title, text)
            self._body.append(f"<h4>{escape(title)}</h4>")
        else:
            self.logger.info("\n%s", text)
        self._body.append(f'<div class="table-container"><pre>{escape(text)}</pre></div>')

    def segment_table(
        self, segments: Iterable[Sequence[Any]], title: Optional[str] = None
    ) -> None:
        """One row per segment with its state, duration and running end time."""
        if self.disabled:
            return
        rows: List[List[Any]] = []
        end = 0.0
        for state, duration in segments:
            end += float(duration)
            rows.append([format_state(state), float(duration), end])
        self.table(rows, headers=["State", "Duration", "End"], title=title)
