from pyvariate.distributions import AliasTable, Categorical, Wishart
from pyvariate.exceptions import (
    DimensionMismatch,
    DomainError,
    InvalidDistributionError,
)
from pyvariate.linalg import PDiagMat, PDMat, ScalMat

__version__ = "0.1.0"

__all__ = [
    "AliasTable",
    "Categorical",
    "Wishart",
    "PDMat",
    "PDiagMat",
    "ScalMat",
    "InvalidDistributionError",
    "DomainError",
    "DimensionMismatch",
]
