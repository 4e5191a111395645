"""Ordinary least squares fits of body mass.

Two models are fitted over the cleaned (ungrouped) table:

- the null model, an intercept only, whose estimate is the mean body mass;
- the species model, an intercept plus one indicator per non-reference
  species, so each species mean is recovered from the coefficients.

Both are solved with statsmodels using the QR decomposition. Degenerate
inputs raise `ModelFitError` instead of producing NaN estimates.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd
import statsmodels.api as sm

from ..dataset import Dataset
from ..models import PREDICTOR, RESPONSE, ModelFitError
from .coding import INTERCEPT, CategoryCoding


@dataclass(frozen=True)
class Coefficient:
    term: str
    estimate: float
    std_error: float
    t_value: float
    p_value: float


@dataclass(frozen=True, eq=False)
class ModelFit:
    response: str
    coefficients: tuple[Coefficient, ...]
    residuals: np.ndarray
    fitted: np.ndarray
    nobs: int
    df_model: int
    df_resid: int
    rss: float
    r_squared: float
    adj_r_squared: float
    coding: Optional[CategoryCoding] = None

    @property
    def n_params(self) -> int:
        return len(self.coefficients)

    @property
    def terms(self) -> tuple[str, ...]:
        return tuple(c.term for c in self.coefficients)

    @property
    def residual_std_error(self) -> float:
        return float(np.sqrt(self.rss / self.df_resid))

    @property
    def intercept(self) -> float:
        return self.coefficient(INTERCEPT).estimate

    def coefficient(self, term: str) -> Coefficient:
        for c in self.coefficients:
            if c.term == term:
                return c
        raise KeyError(f"Model has no term '{term}'. Terms: {list(self.terms)}")

    def coefficients_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "term": c.term,
                    "estimate": c.estimate,
                    "std_error": c.std_error,
                    "t_value": c.t_value,
                    "p_value": c.p_value,
                }
                for c in self.coefficients
            ],
            columns=["term", "estimate", "std_error", "t_value", "p_value"],
        )


def _response(dataset: Dataset, response: str) -> np.ndarray:
    y = pd.to_numeric(dataset.column(response), errors="coerce").to_numpy(dtype=float)
    if y.size == 0:
        raise ModelFitError("cannot fit model: dataset has no observations")
    if np.isnan(y).any():
        raise ModelFitError(f"cannot fit model: '{response}' has missing values; clean the dataset first")
    return y


def _fit_ols(
    y: np.ndarray,
    X: np.ndarray,
    terms: Sequence[str],
    *,
    response: str,
    coding: Optional[CategoryCoding],
) -> ModelFit:
    n, p = X.shape
    if n <= p:
        raise ModelFitError(
            f"cannot fit model: {n} observations leave no residual degrees of freedom for {p} parameters"
        )
    if np.linalg.matrix_rank(X) < p:
        raise ModelFitError(f"cannot fit model: design matrix for {list(terms)} is singular")

    res = sm.OLS(y, X).fit(method="qr")
    rss = float(res.ssr)
    # Residuals at rounding level mean an exact fit.
    if rss <= np.finfo(float).eps * float(np.dot(y, y)):
        raise ModelFitError(f"cannot fit model: '{response}' is fitted exactly, standard errors are undefined")

    tss = float(np.sum((y - y.mean()) ** 2))
    df_resid = n - p
    r_squared = 1.0 - rss / tss
    adj_r_squared = 1.0 - (1.0 - r_squared) * (n - 1) / df_resid

    coefficients = tuple(
        Coefficient(
            term=term,
            estimate=float(est),
            std_error=float(se),
            t_value=float(t),
            p_value=float(pv),
        )
        for term, est, se, t, pv in zip(terms, res.params, res.bse, res.tvalues, res.pvalues)
    )
    if not all(np.isfinite([c.estimate, c.std_error]).all() for c in coefficients):
        raise ModelFitError(f"cannot fit model: non-finite estimates for {list(terms)}")

    residuals = np.asarray(res.resid, dtype=float)
    fitted = np.asarray(res.fittedvalues, dtype=float)
    residuals.setflags(write=False)
    fitted.setflags(write=False)

    return ModelFit(
        response=response,
        coefficients=coefficients,
        residuals=residuals,
        fitted=fitted,
        nobs=n,
        df_model=p - 1,
        df_resid=df_resid,
        rss=rss,
        r_squared=float(r_squared),
        adj_r_squared=float(adj_r_squared),
        coding=coding,
    )


def fit_null(dataset: Dataset, response: str = RESPONSE) -> ModelFit:
    """Intercept-only model; the intercept estimate is the mean response."""
    y = _response(dataset, response)
    X = np.ones((y.size, 1), dtype=float)
    return _fit_ols(y, X, (INTERCEPT,), response=response, coding=None)


def fit_species(
    dataset: Dataset,
    levels: Optional[Sequence[str]] = None,
    *,
    response: str = RESPONSE,
    predictor: str = PREDICTOR,
) -> ModelFit:
    """Body mass on species with baseline coding.

    `levels` fixes the level order (first is the reference); by default the
    sorted distinct species are used. A declared level without rows makes its
    coefficient undefined and is fatal.
    """
    y = _response(dataset, response)
    values = dataset.column(predictor)
    if values.isna().any():
        raise ModelFitError(f"cannot fit model: '{predictor}' has missing values; clean the dataset first")
    values = [str(v) for v in values]

    coding = CategoryCoding.from_values(predictor, values, levels)
    if len(coding.levels) < 2:
        raise ModelFitError(
            f"cannot fit model: need at least 2 distinct '{predictor}' levels, found {list(coding.levels)}"
        )
    counts = Counter(values)
    empty = [level for level in coding.levels if counts.get(level, 0) == 0]
    if empty:
        raise ModelFitError(f"cannot fit model: '{predictor}' levels {empty} have no observations")

    X = coding.design_matrix(values)
    return _fit_ols(y, X, (INTERCEPT,) + coding.terms, response=response, coding=coding)
