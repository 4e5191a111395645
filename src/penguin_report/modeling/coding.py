from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence

import numpy as np

from ..models import ModelFitError

INTERCEPT = "Intercept"


@dataclass(frozen=True)
class CategoryCoding:
    """Treatment (baseline) coding of a categorical predictor.

    `levels[0]` is the reference level: it has no indicator column and its
    mean is the intercept. Every other level gets one indicator column, in
    level order, named `<name>[T.<level>]`.
    """

    name: str
    levels: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.levels:
            raise ModelFitError(f"cannot fit model: '{self.name}' has no levels")
        if len(set(self.levels)) != len(self.levels):
            raise ModelFitError(f"cannot fit model: '{self.name}' levels are not unique: {list(self.levels)}")

    @classmethod
    def from_values(
        cls,
        name: str,
        values: Iterable[str],
        levels: Optional[Sequence[str]] = None,
    ) -> "CategoryCoding":
        observed = sorted({str(v) for v in values})
        if levels is None:
            return cls(name=name, levels=tuple(observed))
        unknown = [v for v in observed if v not in levels]
        if unknown:
            raise ModelFitError(f"cannot fit model: '{name}' values {unknown} are not among levels {list(levels)}")
        return cls(name=name, levels=tuple(str(l) for l in levels))

    @property
    def reference(self) -> str:
        return self.levels[0]

    @property
    def index(self) -> Mapping[str, int]:
        return {level: i for i, level in enumerate(self.levels)}

    def index_of(self, level: str) -> int:
        try:
            return self.index[level]
        except KeyError:
            raise ModelFitError(f"'{level}' is not a level of '{self.name}'") from None

    def term(self, level: str) -> str:
        return f"{self.name}[T.{level}]"

    @property
    def terms(self) -> tuple[str, ...]:
        return tuple(self.term(level) for level in self.levels[1:])

    def design_matrix(self, values: Sequence[str]) -> np.ndarray:
        """Intercept column followed by one indicator column per non-reference level."""
        idx = np.array([self.index_of(str(v)) for v in values], dtype=int)
        X = np.zeros((idx.size, len(self.levels)), dtype=float)
        X[:, 0] = 1.0
        for j in range(1, len(self.levels)):
            X[:, j] = (idx == j).astype(float)
        return X
