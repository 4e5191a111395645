"""Linear models of body mass.

The null model and the species model are fitted over the cleaned table and
compared with a nested-model F-test.
"""

from .coding import INTERCEPT, CategoryCoding
from .compare import ModelComparison, compare_models, species_means
from .fit import Coefficient, ModelFit, fit_null, fit_species

__all__ = [
    "INTERCEPT",
    "CategoryCoding",
    "Coefficient",
    "ModelComparison",
    "ModelFit",
    "compare_models",
    "fit_null",
    "fit_species",
    "species_means",
]
