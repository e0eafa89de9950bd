"""Step-by-step trace of discretization and stacking runs.

The trace mirrors every message to a standard ``logging`` logger and keeps
an HTML transcript that can be written next to the analysis outputs.
"""

import logging
from contextlib import contextmanager
from html import escape
from pathlib import Path
from typing import Iterator, List, Union

from paramo.logger.html_content import CSS_LOG


class TraceLogger:
    """Collects trace sections for a single run."""

    def __init__(self, name: str):
        self.name = name
        self.disabled = False
        self.logger = logging.getLogger(name)
        self._body: List[str] = []
        self._open_section = False

    def section(self, title: str) -> None:
        if self.disabled:
            return
        self.end_section()
        self.logger.info("==== %s ====", title)
        self._body.append(f'<section class="section"><h3>{escape(title)}</h3>')
        self._open_section = True

    def end_section(self) -> None:
        if self._open_section:
            self._body.append("</section>")
            self._open_section = False

    def info(self, message: str) -> None:
        self._record(logging.INFO, "info", message)

    def error(self, message: str) -> None:
        self._record(logging.ERROR, "error", message)

    def _record(self, level: int, css_class: str, message: str) -> None:
        if self.disabled:
            return
        self.logger.log(level, message)
        self._body.append(f'<p class="{css_class}">{escape(message)}</p>')

    def clear(self) -> None:
        self._body = []
        self._open_section = False

    @contextmanager
    def capture(self) -> Iterator["TraceLogger"]:
        """Enable the trace for the duration of a block, starting empty."""
        previous = self.disabled
        self.clear()
        self.disabled = False
        try:
            yield self
        finally:
            self.disabled = previous

    def get_html_content(self) -> str:
        parts = ['<div class="content">', *self._body]
        if self._open_section:
            parts.append("</section>")
        parts.append("</div>")
        return "\n".join(parts)

    def get_css_content(self) -> str:
        return CSS_LOG

    def write_html(self, path: Union[str, Path]) -> Path:
        """Write the transcript as a standalone HTML page and return its path."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            "<!DOCTYPE html>\n<html>\n<head>\n"
            f'<meta charset="utf-8"/>\n<title>{escape(self.name)}</title>\n'
            f"<style>{self.get_css_content()}</style>\n"
            f"</head>\n<body>\n{self.get_html_content()}\n</body>\n</html>\n",
            encoding="utf-8",
        )
        return path
