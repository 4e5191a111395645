"""Pipeline orchestration: load, clean, aggregate, fit, render."""

from .context import RunContext
from .run import ModelResults, RunResult, fit_models, run_pipeline

__all__ = ["ModelResults", "RunContext", "RunResult", "fit_models", "run_pipeline"]
