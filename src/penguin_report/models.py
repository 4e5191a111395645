from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

MEASUREMENT_COLUMNS: tuple[str, ...] = (
    "bill_length_mm",
    "bill_depth_mm",
    "flipper_length_mm",
    "body_mass_g",
)
KEY_COLUMNS: tuple[str, ...] = ("species", "island", "sex")
TEXT_COLUMNS: tuple[str, ...] = KEY_COLUMNS

# Column order of the palmerpenguins table.
COLUMNS: tuple[str, ...] = (
    "species",
    "island",
    "bill_length_mm",
    "bill_depth_mm",
    "flipper_length_mm",
    "body_mass_g",
    "sex",
    "year",
)

SEX_VALUES: tuple[str, ...] = ("female", "male")

RESPONSE = "body_mass_g"
PREDICTOR = "species"


class DatasetError(ValueError):
    """Raised when the penguins table is missing columns or holds malformed values."""


class ModelFitError(ValueError):
    """Raised when a linear model cannot be fitted (degenerate or singular input)."""


class Observation(BaseModel):
    """
    One penguin record. Every field may be missing.

    species / island: categorical labels
    sex: "female" | "male" | None
    measurements in millimetres and grams; year of the study season
    """
    species: Optional[str] = None
    island: Optional[str] = None
    bill_length_mm: Optional[float] = None
    bill_depth_mm: Optional[float] = None
    flipper_length_mm: Optional[float] = None
    body_mass_g: Optional[float] = None
    sex: Optional[str] = None
    year: Optional[int] = None

    model_config = {"frozen": True}


class OutputManifest(BaseModel):
    """
    Paths to run artifacts produced by `penguin-report run`.

    These artifacts are the contract of a run: the rendered report plus the
    tables it was built from.
    """
    run_dir: str
    report_md: str
    report_html: str
    group_summary_csv: str
    coefficients_csv: str
    anova_csv: str
    dataset_profile_json: str
    analysis_log_json: str
    plots_dir: Optional[str] = None
