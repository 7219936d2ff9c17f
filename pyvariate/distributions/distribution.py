import abc
from typing import Dict, Optional, Tuple

import numpy as np
from numpy.random import RandomState

from pyvariate.constants import ArrayLike, Parameter, Shape, Variate
from pyvariate.distributions.constraints import Constraint
from pyvariate.exceptions import InvalidDistributionError
from pyvariate.utils import check_random_state


def check_constraint(
    constraint: Constraint, parameter: str, parameter_value: Parameter
):
    if not np.all(constraint(parameter_value)):
        raise InvalidDistributionError(
            f"Invalid value for {parameter}: {parameter_value}. "
            f"The parameter must satisfy the constraint '{constraint}'."
        )


class Distribution(abc.ABC):
    _constraints: Dict[str, Constraint] = {}
    _support: Optional[Constraint] = None

    def __init__(
        self,
        batch_shape: Shape,
        rv_shape: Shape,
        check_parameters: bool = True,
        check_support: bool = True,
    ):
        self.batch_shape = batch_shape
        self.rv_shape = rv_shape
        self.check_parameters = check_parameters
        self.check_support = check_support

        if self.check_parameters:
            for parameter, constraint in self._constraints.items():
                check_constraint(constraint, parameter, getattr(self, parameter))

    @property
    def support(self) -> Optional[Constraint]:
        return self._support

    @property
    @abc.abstractmethod
    def mean(self) -> Parameter:
        pass

    @property
    @abc.abstractmethod
    def variance(self) -> Parameter:
        pass

    @property
    def std(self) -> Parameter:
        return np.sqrt(self.variance)

    def insupport(self, x: Variate) -> ArrayLike:
        support = self.support

        if support is None:
            return np.ones(np.shape(x)[: np.ndim(x) - len(self.rv_shape)], dtype=bool)

        return support(x)

    def log_prob(self, x: Variate) -> ArrayLike:
        if self.check_support and not np.all(self.insupport(x)):
            raise ValueError(
                f"The value {x} is outside the support '{self.support}' of {self}."
            )

        return self._log_prob(x)

    def sample(
        self, sample_shape: Shape = (), random_state: Optional[RandomState] = None
    ) -> Variate:
        random_state = check_random_state(random_state)
        return self._sample(sample_shape, random_state)

    def __call__(
        self, sample_shape: Shape = (), random_state: Optional[RandomState] = None
    ) -> Variate:
        return self.sample(sample_shape, random_state)

    def __repr__(self) -> str:
        parameters = ", ".join(
            f"{parameter}={getattr(self, parameter)!r}"
            for parameter in self._constraints
        )
        return f"{self.__class__.__name__}({parameters})"

    @abc.abstractmethod
    def _log_prob(self, x: Variate) -> ArrayLike:
        pass

    @abc.abstractmethod
    def _sample(self, sample_shape: Shape, random_state: RandomState) -> Variate:
        pass


class ExponentialFamily(Distribution):
    """
    A distribution whose density can be written as
    log p(x) = log h(x) + <eta, T(x)> - A(eta).
    """

    @property
    @abc.abstractmethod
    def natural_parameter(self) -> Tuple[Parameter, ...]:
        pass

    @property
    @abc.abstractmethod
    def log_normalizer(self) -> Parameter:
        pass

    @abc.abstractmethod
    def base_measure(self, x: Variate) -> ArrayLike:
        pass

    @abc.abstractmethod
    def sufficient_statistic(self, x: Variate) -> Tuple[ArrayLike, ...]:
        pass
