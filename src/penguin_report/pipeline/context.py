from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..paths import plots_dir, reports_root, run_dir
from ..utils import new_run_id


@dataclass(frozen=True)
class RunContext:
    """Run identifier plus the standard artifact paths of one run directory."""

    run_dir: Path
    run_id: str

    @classmethod
    def create(cls, *, output_root: Path | None = None, run_id: str | None = None) -> "RunContext":
        rid = run_id or new_run_id()
        rdir = run_dir(rid, output_root or reports_root())
        rdir.mkdir(parents=True, exist_ok=True)
        return cls(run_dir=rdir, run_id=rid)

    def path(self, filename: str) -> Path:
        return self.run_dir / filename

    def plots_dir(self) -> Path:
        return plots_dir(self.run_dir)

    def report_md_path(self) -> Path:
        return self.path("report.md")

    def report_html_path(self) -> Path:
        return self.path("report.html")

    def group_summary_path(self) -> Path:
        return self.path("group_summary.csv")

    def coefficients_path(self) -> Path:
        return self.path("coefficients.csv")

    def anova_path(self) -> Path:
        return self.path("anova.csv")

    def dataset_profile_path(self) -> Path:
        return self.path("dataset_profile.json")

    def analysis_log_path(self) -> Path:
        return self.path("analysis_log.json")
