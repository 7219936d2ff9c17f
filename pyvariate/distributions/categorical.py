from typing import Dict

import numpy as np
from numpy.random import RandomState
from scipy.special import entr

from pyvariate.constants import ArrayLike, Parameter, Shape, Variate
from pyvariate.distributions.constraints import Constraint, integer_interval, simplex
from pyvariate.distributions.distribution import Distribution
from pyvariate.distributions.samplers import AliasTable


class Categorical(Distribution):
    """
    Distribution over the categories 0, ..., n - 1 with the given
    probabilities. Sampling goes through an alias table, so drawing is
    O(1) per sample after an O(n) setup.
    """

    _constraints: Dict[str, Constraint] = {"probs": simplex}

    def __init__(
        self,
        probs: Parameter,
        check_parameters: bool = True,
        check_support: bool = True,
    ):
        probs = np.asarray(probs, dtype=float)

        if probs.ndim != 1:
            raise ValueError(
                "The probabilities must be a vector; batches of categorical "
                "distributions are not supported."
            )

        batch_shape = ()
        rv_shape = ()

        self.probs = probs

        super().__init__(
            batch_shape=batch_shape,
            rv_shape=rv_shape,
            check_parameters=check_parameters,
            check_support=check_support,
        )

        self._alias_table = AliasTable(probs, check_parameters=check_parameters)

    @property
    def n_categories(self) -> int:
        return self.probs.shape[0]

    @property
    def support(self) -> Constraint:
        return integer_interval(
            0, self.n_categories - 1, include_lower=True, include_upper=True
        )

    @property
    def mean(self) -> Parameter:
        return np.sum(np.arange(self.n_categories) * self.probs)

    @property
    def variance(self) -> Parameter:
        categories = np.arange(self.n_categories)
        return np.sum(np.square(categories - self.mean) * self.probs)

    def entropy(self) -> Parameter:
        return np.sum(entr(self.probs))

    def _log_prob(self, x: Variate) -> ArrayLike:
        within = self.support(x)
        index = np.where(within, x, 0).astype(np.int64)

        with np.errstate(divide="ignore"):
            log_probs = np.log(self.probs)

        return np.where(within, log_probs[index], -np.inf)

    def _sample(self, sample_shape: Shape, random_state: RandomState) -> Variate:
        return self._alias_table.sample(sample_shape, random_state)
