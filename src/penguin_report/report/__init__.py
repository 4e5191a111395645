"""Report rendering.

Builds report.md and a self-contained report.html from results already
computed by the pipeline. Nothing here computes statistics.
"""

from .html import write_report_html
from .markdown import ReportInputs, write_report_markdown
from .plots import ReportConfig

__all__ = ["ReportConfig", "ReportInputs", "write_report_html", "write_report_markdown"]
