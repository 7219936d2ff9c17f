from pyvariate.distributions.categorical import Categorical
from pyvariate.distributions.continuous_multivariate import Wishart
from pyvariate.distributions.continuous_univariate import Chi, Gamma, Normal
from pyvariate.distributions.discrete_univariate import DiscreteUniform
from pyvariate.distributions.distribution import Distribution, ExponentialFamily
from pyvariate.distributions.samplers import AliasTable

__all__ = [
    "AliasTable",
    "Categorical",
    "Chi",
    "DiscreteUniform",
    "Distribution",
    "ExponentialFamily",
    "Gamma",
    "Normal",
    "Wishart",
]
