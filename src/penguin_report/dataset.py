from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

import pandas as pd

from .models import COLUMNS, Observation


def _missing_to_none(value: Any) -> Any:
    return None if pd.isna(value) else value


@dataclass(frozen=True, eq=False)
class Dataset:
    """Ordered, read-only table of penguin observations.

    The wrapped DataFrame is private; every accessor hands out a copy so
    derived results can never mutate the loaded data in place.
    """

    _frame: pd.DataFrame = field(repr=False)
    source: str = ""

    @classmethod
    def from_frame(cls, df: pd.DataFrame, *, source: str = "") -> "Dataset":
        frame = df.loc[:, list(COLUMNS)].reset_index(drop=True).copy()
        return cls(_frame=frame, source=source)

    def __len__(self) -> int:
        return int(self._frame.shape[0])

    @property
    def columns(self) -> list[str]:
        return list(self._frame.columns)

    def frame(self) -> pd.DataFrame:
        return self._frame.copy()

    def column(self, name: str) -> pd.Series:
        return self._frame[name].copy()

    def observations(self) -> Iterator[Observation]:
        for row in self._frame.itertuples(index=False):
            values = {c: _missing_to_none(v) for c, v in zip(self._frame.columns, row)}
            if values["year"] is not None:
                values["year"] = int(values["year"])
            yield Observation(**values)

    def distinct(self, name: str) -> list[str]:
        """Sorted distinct non-missing values of a text column."""
        return sorted(str(v) for v in self._frame[name].dropna().unique())
