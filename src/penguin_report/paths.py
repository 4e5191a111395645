from __future__ import annotations

from pathlib import Path


def reports_root() -> Path:
    """
    Root directory for rendered runs.
    Kept relative to the working directory, like a notebook's output folder.
    """
    return Path.cwd() / "reports"


def run_dir(run_id: str, root: Path | None = None) -> Path:
    return (root or reports_root()) / run_id


def plots_dir(run_path: Path) -> Path:
    return run_path / "plots"
