from typing import Dict

import numpy as np
from numpy.random import RandomState

from pyvariate.constants import ArrayLike, Parameter, Shape, Variate
from pyvariate.distributions.constraints import Constraint, integer, integer_interval
from pyvariate.distributions.distribution import Distribution
from pyvariate.distributions.utils import broadcast_shapes, promote_shapes
from pyvariate.exceptions import InvalidDistributionError


class DiscreteUniform(Distribution):
    """
    Uniform distribution over the integers lower, lower + 1, ..., upper.
    """

    _constraints: Dict[str, Constraint] = {"lower": integer, "upper": integer}

    def __init__(
        self,
        lower: Parameter,
        upper: Parameter,
        check_parameters: bool = True,
        check_support: bool = True,
    ):
        batch_shape = broadcast_shapes(np.shape(lower), np.shape(upper))
        rv_shape = ()

        self.lower, self.upper = promote_shapes(np.asarray(lower), np.asarray(upper))

        if not np.all(self.lower <= self.upper):
            raise InvalidDistributionError(
                "All the lower bounds must not exceed the upper bounds."
            )

        super().__init__(
            batch_shape=batch_shape,
            rv_shape=rv_shape,
            check_parameters=check_parameters,
            check_support=check_support,
        )

    @property
    def support(self) -> Constraint:
        return integer_interval(
            self.lower, self.upper, include_lower=True, include_upper=True
        )

    @property
    def mean(self) -> Parameter:
        return (self.lower + self.upper) / 2.0

    @property
    def variance(self) -> Parameter:
        return (np.square(self.upper - self.lower + 1.0) - 1.0) / 12.0

    def _log_prob(self, x: Variate) -> ArrayLike:
        log_prob = -np.log(self.upper - self.lower + 1.0)
        return np.where(self.support(x), log_prob, -np.inf)

    def _sample(self, sample_shape: Shape, random_state: RandomState) -> Variate:
        return random_state.randint(
            low=self.lower,
            high=self.upper + 1,
            size=sample_shape + self.batch_shape,
            dtype=np.int64,
        )
