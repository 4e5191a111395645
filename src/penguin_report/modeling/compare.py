from __future__ import annotations

from dataclasses import dataclass

import pandas as pd
from scipy import stats

from ..models import ModelFitError
from .coding import INTERCEPT
from .fit import ModelFit


@dataclass(frozen=True)
class ModelComparison:
    """Nested-model F-test of a null fit against a fuller fit."""

    f_statistic: float
    df_num: int
    df_den: int
    p_value: float
    rss_null: float
    rss_full: float
    df_resid_null: int
    df_resid_full: int

    def anova_frame(self) -> pd.DataFrame:
        """Two-row ANOVA table in the layout of R's anova(null, full)."""
        return pd.DataFrame(
            [
                {"model": "null", "res_df": self.df_resid_null, "rss": self.rss_null,
                 "df": None, "sum_of_sq": None, "f": None, "p_value": None},
                {"model": "species", "res_df": self.df_resid_full, "rss": self.rss_full,
                 "df": self.df_num, "sum_of_sq": self.rss_null - self.rss_full,
                 "f": self.f_statistic, "p_value": self.p_value},
            ],
            columns=["model", "res_df", "rss", "df", "sum_of_sq", "f", "p_value"],
        )


def compare_models(null: ModelFit, full: ModelFit) -> ModelComparison:
    """
    F = [(RSS_null - RSS_full) / (p_full - p_null)] / [RSS_full / (n - p_full)]
    """
    if null.nobs != full.nobs:
        raise ModelFitError(f"cannot compare models fitted on {null.nobs} and {full.nobs} observations")
    if null.response != full.response:
        raise ModelFitError(f"cannot compare models of '{null.response}' and '{full.response}'")
    missing = [t for t in null.terms if t not in full.terms]
    if missing or INTERCEPT not in null.terms:
        raise ModelFitError(f"models are not nested: {list(null.terms)} vs {list(full.terms)}")

    df_num = full.n_params - null.n_params
    if df_num <= 0:
        raise ModelFitError("models are not nested: the full model adds no terms")
    df_den = full.nobs - full.n_params

    f_statistic = ((null.rss - full.rss) / df_num) / (full.rss / df_den)
    p_value = float(stats.f.sf(f_statistic, df_num, df_den))

    return ModelComparison(
        f_statistic=float(f_statistic),
        df_num=int(df_num),
        df_den=int(df_den),
        p_value=p_value,
        rss_null=null.rss,
        rss_full=full.rss,
        df_resid_null=null.df_resid,
        df_resid_full=full.df_resid,
    )


def species_means(fit: ModelFit) -> dict[str, float]:
    """Per-level mean response reconstructed from baseline-coded coefficients.

    The reference level's mean is the intercept; every other level's mean is
    intercept + its indicator coefficient. Raises if the fit does not carry
    exactly that coding.
    """
    coding = fit.coding
    if coding is None:
        raise ModelFitError("model has no categorical predictor to reconstruct means from")

    terms = fit.terms
    if not terms or terms[0] != INTERCEPT:
        raise ModelFitError(f"model terms {list(terms)} do not start with an intercept")
    if coding.term(coding.reference) in terms:
        raise ModelFitError(f"reference level '{coding.reference}' has its own coefficient; coding is not baseline")
    if tuple(terms[1:]) != coding.terms:
        raise ModelFitError(f"model terms {list(terms[1:])} do not match the coding {list(coding.terms)}")

    intercept = fit.intercept
    means: dict[str, float] = {}
    for level in coding.levels:
        if level == coding.reference:
            means[level] = intercept
        else:
            means[level] = intercept + fit.coefficient(coding.term(level)).estimate
    return means
