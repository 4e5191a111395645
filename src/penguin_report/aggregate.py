from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Sequence

import pandas as pd

from .dataset import Dataset
from .models import KEY_COLUMNS, MEASUREMENT_COLUMNS, Observation


class GroupKey(NamedTuple):
    species: str
    island: str
    sex: str


@dataclass(frozen=True)
class GroupSummary:
    key: GroupKey
    n: int
    bill_length_mm: float
    bill_depth_mm: float
    flipper_length_mm: float
    body_mass_g: float

    def as_row(self) -> dict[str, object]:
        row: dict[str, object] = dict(self.key._asdict())
        row["n"] = self.n
        for col in MEASUREMENT_COLUMNS:
            row[col] = getattr(self, col)
        return row


@dataclass
class _Accumulator:
    values: dict[str, list[float]] = field(default_factory=lambda: {c: [] for c in MEASUREMENT_COLUMNS})

    @property
    def count(self) -> int:
        return len(self.values[MEASUREMENT_COLUMNS[0]])

    def add(self, obs: Observation) -> None:
        for col in MEASUREMENT_COLUMNS:
            self.values[col].append(float(getattr(obs, col)))

    def means(self) -> dict[str, float]:
        return {col: math.fsum(vals) / len(vals) for col, vals in self.values.items()}


def _group_key(obs: Observation) -> Optional[GroupKey]:
    if any(getattr(obs, c) is None for c in KEY_COLUMNS + MEASUREMENT_COLUMNS):
        return None
    return GroupKey(species=obs.species, island=obs.island, sex=obs.sex)


def summarize_groups(dataset: Dataset) -> list[GroupSummary]:
    """Mean measurements per (species, island, sex).

    Rows missing a key or a measurement do not qualify. Groups are emitted in
    sorted key order, so the output is the same for any row order.
    """
    groups: dict[GroupKey, _Accumulator] = {}
    for obs in dataset.observations():
        key = _group_key(obs)
        if key is None:
            continue
        groups.setdefault(key, _Accumulator()).add(obs)

    return [GroupSummary(key=key, n=groups[key].count, **groups[key].means()) for key in sorted(groups)]


def summary_frame(summaries: Sequence[GroupSummary]) -> pd.DataFrame:
    columns = list(KEY_COLUMNS) + ["n"] + list(MEASUREMENT_COLUMNS)
    return pd.DataFrame([s.as_row() for s in summaries], columns=columns)
