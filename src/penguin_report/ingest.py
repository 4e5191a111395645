from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pandas as pd
from palmerpenguins import load_penguins

from .dataset import Dataset
from .models import COLUMNS, MEASUREMENT_COLUMNS, SEX_VALUES, TEXT_COLUMNS, DatasetError
from .utils import sha256_file

BUNDLED_SOURCE = "palmerpenguins"

# Strings treated as missing when reading a CSV (R writes "NA").
_NA_VALUES = ["NA", "N/A", "NaN", "nan", ""]


def _require_columns(df: pd.DataFrame, source: str) -> None:
    missing = [c for c in COLUMNS if c not in df.columns]
    if missing:
        raise DatasetError(f"Dataset {source} is missing required columns: {missing}")


def _coerce_numeric(df: pd.DataFrame, col: str, source: str) -> pd.Series:
    """
    Converts a column to float. Text that is not a number is a malformed row,
    not a missing value, and aborts the load.
    """
    raw = df[col]
    coerced = pd.to_numeric(raw, errors="coerce")
    bad = raw.notna() & coerced.isna()
    if bad.any():
        row = int(bad.to_numpy().nonzero()[0][0])
        raise DatasetError(
            f"Dataset {source}: column '{col}' has non-numeric value {raw.iloc[row]!r} at row {row + 1}."
        )
    return coerced.astype(float)


def _coerce_year(df: pd.DataFrame, source: str) -> pd.Series:
    years = _coerce_numeric(df, "year", source)
    present = years.dropna()
    fractional = present[(present % 1) != 0]
    if not fractional.empty:
        raise DatasetError(f"Dataset {source}: column 'year' has non-integer value {fractional.iloc[0]!r}.")
    return years.astype("Int64")


def _coerce_text(df: pd.DataFrame, col: str) -> pd.Series:
    s = df[col].astype("string").str.strip()
    return s.mask(s == "")


def _validate_frame(df: pd.DataFrame, source: str) -> pd.DataFrame:
    _require_columns(df, source)
    if df.empty:
        raise DatasetError(f"Dataset {source} has no rows.")

    out = df.loc[:, list(COLUMNS)].reset_index(drop=True).copy()
    for col in MEASUREMENT_COLUMNS:
        out[col] = _coerce_numeric(out, col, source)
    out["year"] = _coerce_year(out, source)
    for col in TEXT_COLUMNS:
        out[col] = _coerce_text(out, col)

    sex = out["sex"].str.lower()
    unknown = sorted(set(sex.dropna()) - set(SEX_VALUES))
    if unknown:
        raise DatasetError(f"Dataset {source}: column 'sex' has unknown values {unknown}; expected {list(SEX_VALUES)}.")
    out["sex"] = sex
    return out


def load_dataset(path: Path | None = None) -> Dataset:
    """
    Load the penguins table into memory.

    With no path, the copy bundled with the palmerpenguins package is used.
    Otherwise `path` must be a CSV with the palmerpenguins columns; extra
    columns are ignored. Any load failure aborts before cleaning begins.
    """
    if path is None:
        return Dataset.from_frame(_validate_frame(load_penguins(), BUNDLED_SOURCE), source=BUNDLED_SOURCE)

    if not path.exists():
        raise FileNotFoundError(f"Dataset not found: {path}")

    source = str(path)
    try:
        df = pd.read_csv(path, na_values=_NA_VALUES, keep_default_na=True)
    except pd.errors.EmptyDataError as e:
        raise DatasetError(f"Dataset {source} is empty.") from e
    except pd.errors.ParserError as e:
        raise DatasetError(f"Dataset {source} is not a well-formed CSV: {e}") from e

    return Dataset.from_frame(_validate_frame(df, source), source=source)


def dataset_profile(dataset: Dataset) -> Dict[str, Any]:
    """
    Row/column counts and per-column missingness of the loaded (uncleaned) table.
    """
    df = dataset.frame()
    profile: Dict[str, Any] = {
        "source": dataset.source,
        "row_count": int(df.shape[0]),
        "column_count": int(df.shape[1]),
        "missingness": {c: int(df[c].isna().sum()) for c in df.columns},
        "species_counts": {str(k): int(v) for k, v in df["species"].value_counts().sort_index().items()},
    }
    src = Path(dataset.source)
    if dataset.source != BUNDLED_SOURCE and src.is_file():
        profile["sha256"] = sha256_file(src)
    return profile
