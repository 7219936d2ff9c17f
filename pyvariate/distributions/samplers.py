from typing import Optional
from warnings import warn

import numpy as np
from numpy.random import RandomState

from pyvariate.constants import PROBABILITY_TOLERANCE, Parameter, Shape, Variate
from pyvariate.distributions.continuous_univariate import _StandardUniform
from pyvariate.distributions.discrete_univariate import DiscreteUniform
from pyvariate.exceptions import InvalidDistributionError
from pyvariate.utils import check_random_state

__all__ = ["AliasTable"]


def _check_probabilities(probs: np.ndarray):
    if probs.ndim != 1 or probs.shape[0] == 0:
        raise InvalidDistributionError(
            f"The probabilities must be a non-empty vector, got shape {probs.shape}."
        )

    if not np.all(np.isfinite(probs)) or np.any(probs < 0.0):
        raise InvalidDistributionError(
            f"The probabilities must be finite and non-negative, got {probs}."
        )

    total = np.sum(probs)

    if abs(total - 1.0) > PROBABILITY_TOLERANCE * probs.shape[0]:
        raise InvalidDistributionError(
            f"The probabilities must sum to 1, got a total of {total}."
        )


class AliasTable:
    """
    Walker's alias method for sampling from a fixed discrete distribution
    over the categories 0, ..., n - 1.

    The construction scales the probabilities by n and pairs every category
    whose scaled probability falls short of 1 with a category that exceeds
    it. Category i is then drawn by picking i uniformly and keeping it with
    probability `accept[i]`, otherwise returning `alias[i]`. Building the
    table takes O(n) and every draw takes O(1).
    """

    def __init__(self, probs: Parameter, check_parameters: bool = True):
        probs = np.asarray(probs, dtype=float)

        if check_parameters:
            _check_probabilities(probs)

        n = probs.shape[0]
        accept = (probs * n).tolist()
        alias = list(range(n))

        larges = []
        smalls = []

        for i, acc in enumerate(accept):
            if acc > 1.0:
                larges.append(i)
            elif acc < 1.0:
                smalls.append(i)

        # Both lists are used as stacks. The order of popping only decides
        # which pairs are formed, not the distribution of the samples.
        while larges and smalls:
            s = smalls.pop()
            l = larges.pop()  # noqa: E741

            alias[s] = l
            accept[l] = (accept[l] - 1.0) + accept[s]

            if accept[l] > 1.0:
                larges.append(l)
            elif accept[l] < 1.0:
                smalls.append(l)

        # Whatever is left over is rounding error, in exact arithmetic
        # both stacks empty at the same time.
        residual = smalls + larges
        discrepancy = sum(abs(1.0 - accept[i]) for i in residual)

        if discrepancy > PROBABILITY_TOLERANCE * n:
            warn(
                f"The alias table absorbed a probability mass of {discrepancy} "
                "into rounding. The probabilities are likely not normalized.",
                RuntimeWarning,
            )

        for i in residual:
            accept[i] = 1.0

        self._accept = np.array(accept, dtype=float)
        self._alias = np.array(alias, dtype=np.int64)
        self._accept.setflags(write=False)
        self._alias.setflags(write=False)

        self._index_sampler = DiscreteUniform(lower=0, upper=n - 1)
        self._standard_uniform = _StandardUniform()

    @property
    def accept(self) -> np.ndarray:
        return self._accept

    @property
    def alias(self) -> np.ndarray:
        return self._alias

    @property
    def probabilities(self) -> np.ndarray:
        """
        The distribution encoded by the table.
        """
        n = len(self)
        probs = self._accept / n
        np.add.at(probs, self._alias, (1.0 - self._accept) / n)
        return probs

    def sample(
        self, sample_shape: Shape = (), random_state: Optional[RandomState] = None
    ) -> Variate:
        random_state = check_random_state(random_state)

        i = self._index_sampler.sample(sample_shape, random_state)
        u = self._standard_uniform.sample(sample_shape, random_state)

        return np.where(u < self._accept[i], i, self._alias[i])[()]

    def __call__(
        self, sample_shape: Shape = (), random_state: Optional[RandomState] = None
    ) -> Variate:
        return self.sample(sample_shape, random_state)

    def __len__(self) -> int:
        return self._accept.shape[0]

    def __repr__(self) -> str:
        return f"AliasTable with {len(self)} entries"
