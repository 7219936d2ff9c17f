from typing import Dict, Tuple

import numpy as np
from numpy.random import RandomState
from scipy.special import digamma, gammaln

from pyvariate.constants import ArrayLike, Parameter, Shape, Variate
from pyvariate.distributions.constraints import (
    Constraint,
    non_negative,
    positive,
    real,
    zero_one,
)
from pyvariate.distributions.distribution import Distribution, ExponentialFamily
from pyvariate.distributions.utils import broadcast_shapes, promote_shapes


class Chi(ExponentialFamily):
    """
    The distribution of the Euclidean norm of `df` independent standard
    normal variables. The degrees of freedom need not be integral.
    """

    _constraints: Dict[str, Constraint] = {"df": positive}
    _support: Constraint = non_negative

    def __init__(
        self, df: Parameter, check_parameters: bool = True, check_support: bool = True
    ):
        batch_shape = np.shape(df)
        rv_shape = ()

        self.df = df

        super().__init__(
            batch_shape=batch_shape,
            rv_shape=rv_shape,
            check_parameters=check_parameters,
            check_support=check_support,
        )

    @property
    def mean(self) -> Parameter:
        return np.sqrt(2.0) * np.exp(
            gammaln((self.df + 1.0) / 2.0) - gammaln(self.df / 2.0)
        )

    @property
    def variance(self) -> Parameter:
        return self.df - np.square(self.mean)

    def _log_prob(self, x: Variate) -> ArrayLike:
        return (self.df - 1.0) * np.log(x) - np.square(x) / 2.0 - self.log_normalizer

    def _sample(self, sample_shape: Shape, random_state: RandomState) -> Variate:
        chi2 = random_state.chisquare(df=self.df, size=sample_shape + self.batch_shape)
        return np.sqrt(chi2)

    @property
    def natural_parameter(self) -> Tuple[Parameter, ...]:
        return (self.df - 1.0,)

    @property
    def log_normalizer(self) -> Parameter:
        return (self.df / 2.0 - 1.0) * np.log(2.0) + gammaln(self.df / 2.0)

    def base_measure(self, x: Variate) -> ArrayLike:
        return np.exp(-np.square(x) / 2.0)

    def sufficient_statistic(self, x: Variate) -> Tuple[ArrayLike, ...]:
        return (np.log(x),)


class Gamma(ExponentialFamily):
    _constraints: Dict[str, Constraint] = {"shape": positive, "rate": positive}
    _support: Constraint = positive

    def __init__(
        self,
        shape: Parameter,
        rate: Parameter = None,
        scale: Parameter = None,
        check_parameters: bool = True,
        check_support: bool = True,
    ):
        if (rate is not None) + (scale is not None) != 1:
            raise ValueError("Provide exactly one of the rate or scale parameters.")

        if rate is None:
            rate = np.reciprocal(np.asarray(scale, dtype=float))

        batch_shape = broadcast_shapes(np.shape(shape), np.shape(rate))
        rv_shape = ()

        self.shape, self.rate = promote_shapes(shape, rate)

        super().__init__(
            batch_shape=batch_shape,
            rv_shape=rv_shape,
            check_parameters=check_parameters,
            check_support=check_support,
        )

    @property
    def scale(self) -> Parameter:
        return np.reciprocal(self.rate)

    @property
    def mean(self) -> Parameter:
        return self.shape / self.rate

    @property
    def variance(self) -> Parameter:
        return self.shape / np.square(self.rate)

    def entropy(self) -> Parameter:
        return (
            self.shape
            - np.log(self.rate)
            + gammaln(self.shape)
            + (1.0 - self.shape) * digamma(self.shape)
        )

    def _log_prob(self, x: Variate) -> ArrayLike:
        normalizer = self.shape * np.log(self.rate) - gammaln(self.shape)
        return (self.shape - 1.0) * np.log(x) - self.rate * x + normalizer

    def _sample(self, sample_shape: Shape, random_state: RandomState) -> Variate:
        epsilon = random_state.standard_gamma(
            self.shape, sample_shape + self.batch_shape
        )
        return epsilon / self.rate

    @property
    def natural_parameter(self) -> Tuple[Parameter, ...]:
        return self.shape - 1.0, -self.rate

    @property
    def log_normalizer(self) -> Parameter:
        return gammaln(self.shape) - self.shape * np.log(self.rate)

    def base_measure(self, x: Variate) -> ArrayLike:
        return 1.0

    def sufficient_statistic(self, x: Variate) -> Tuple[ArrayLike, ...]:
        return np.log(x), x


class Normal(ExponentialFamily):
    _constraints: Dict[str, Constraint] = {"loc": real, "scale": positive}
    _support: Constraint = real

    def __init__(
        self,
        loc: Parameter = 0.0,
        scale: Parameter = 1.0,
        check_parameters: bool = True,
        check_support: bool = True,
    ):
        batch_shape = broadcast_shapes(np.shape(loc), np.shape(scale))
        rv_shape = ()

        self.loc, self.scale = promote_shapes(loc, scale)

        super().__init__(
            batch_shape=batch_shape,
            rv_shape=rv_shape,
            check_parameters=check_parameters,
            check_support=check_support,
        )

    @property
    def mean(self) -> Parameter:
        return np.broadcast_to(self.loc, self.batch_shape)

    @property
    def variance(self) -> Parameter:
        return np.broadcast_to(np.square(self.scale), self.batch_shape)

    def _log_prob(self, x: Variate) -> ArrayLike:
        normalizer = -0.5 * np.log(2.0 * np.pi) - np.log(self.scale)
        return -0.5 * np.square((x - self.loc) / self.scale) + normalizer

    def _sample(self, sample_shape: Shape, random_state: RandomState) -> Variate:
        epsilon = random_state.standard_normal(sample_shape + self.batch_shape)
        return self.loc + self.scale * epsilon

    @property
    def natural_parameter(self) -> Tuple[Parameter, ...]:
        precision = np.reciprocal(np.square(self.scale))
        return self.loc * precision, -0.5 * precision

    @property
    def log_normalizer(self) -> Parameter:
        return np.square(self.loc / self.scale) * 0.5 + np.log(self.scale)

    def base_measure(self, x: Variate) -> ArrayLike:
        return np.power(2.0 * np.pi, -0.5)

    def sufficient_statistic(self, x: Variate) -> Tuple[ArrayLike, ...]:
        return x, np.square(x)


class _StandardUniform(Distribution):
    """
    Uniform distribution on the half-open interval [0, 1).
    """

    _support: Constraint = zero_one

    def __init__(
        self,
        batch_shape: Shape = (),
        check_parameters: bool = True,
        check_support: bool = True,
    ):
        rv_shape = ()

        super().__init__(
            batch_shape=batch_shape,
            rv_shape=rv_shape,
            check_parameters=check_parameters,
            check_support=check_support,
        )

    @property
    def mean(self) -> Parameter:
        return np.full(shape=self.batch_shape, fill_value=0.5)

    @property
    def variance(self) -> Parameter:
        return np.full(shape=self.batch_shape, fill_value=1.0 / 12.0)

    def _log_prob(self, x: Variate) -> ArrayLike:
        batch_shape = broadcast_shapes(self.batch_shape, np.shape(x))
        return np.zeros(batch_shape)

    def _sample(self, sample_shape: Shape, random_state: RandomState) -> Variate:
        return random_state.random_sample(sample_shape + self.batch_shape)
