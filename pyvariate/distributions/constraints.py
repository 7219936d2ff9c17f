import abc

import numpy as np
import numpy.linalg as la

from pyvariate.constants import PROBABILITY_TOLERANCE, SYMMETRY_TOLERANCE, Variate

__all__ = [
    "Constraint",
    "Real",
    "Interval",
    "Positive",
    "NonNegative",
    "ZeroOne",
    "Integer",
    "IntegerInterval",
    "NonNegativeVector",
    "Simplex",
    "PositiveDefinite",
    "LowerCholesky",
    "real",
    "interval",
    "positive",
    "non_negative",
    "zero_one",
    "integer",
    "integer_interval",
    "non_negative_vector",
    "simplex",
    "positive_definite",
    "lower_cholesky",
]


class Constraint(abc.ABC):
    """
    A predicate over the values of a parameter or a random variable.

    Calling the constraint evaluates it elementwise over the scalar part
    of the value, reducing over the trailing `event_dim` axes.
    """

    event_dim = 0

    @abc.abstractmethod
    def __call__(self, x: Variate) -> np.ndarray:
        pass

    def __str__(self) -> str:
        name = self.__class__.__name__
        return "".join(
            "_" + c.lower() if c.isupper() and i > 0 else c.lower()
            for i, c in enumerate(name)
        )


class Real(Constraint):
    def __call__(self, x: Variate) -> np.ndarray:
        return np.isfinite(x)


class Interval(Constraint):
    def __init__(
        self,
        lower: Variate,
        upper: Variate,
        include_lower: bool = True,
        include_upper: bool = True,
    ):
        self.lower = lower
        self.upper = upper
        self.include_lower = include_lower
        self.include_upper = include_upper

    def __call__(self, x: Variate) -> np.ndarray:
        above = x >= self.lower if self.include_lower else x > self.lower
        below = x <= self.upper if self.include_upper else x < self.upper
        return above & below

    def __str__(self) -> str:
        left = "[" if self.include_lower else "("
        right = "]" if self.include_upper else ")"
        return f"interval{left}{self.lower}, {self.upper}{right}"


class Positive(Constraint):
    def __call__(self, x: Variate) -> np.ndarray:
        return np.isfinite(x) & (x > 0.0)


class NonNegative(Constraint):
    def __call__(self, x: Variate) -> np.ndarray:
        return np.isfinite(x) & (x >= 0.0)


class ZeroOne(Interval):
    def __init__(self):
        super().__init__(lower=0.0, upper=1.0)

    def __str__(self) -> str:
        return "zero_one"


class Integer(Constraint):
    def __call__(self, x: Variate) -> np.ndarray:
        return np.isfinite(x) & (np.floor(x) == x)


class IntegerInterval(Interval):
    def __call__(self, x: Variate) -> np.ndarray:
        return integer(x) & super().__call__(x)

    def __str__(self) -> str:
        return "integer_" + super().__str__()


class NonNegativeVector(Constraint):
    event_dim = 1

    def __call__(self, x: Variate) -> np.ndarray:
        return np.all(non_negative(x), axis=-1)


class Simplex(Constraint):
    event_dim = 1

    def __call__(self, x: Variate) -> np.ndarray:
        n = np.shape(x)[-1]
        total = np.sum(x, axis=-1)
        return non_negative_vector(x) & (
            np.abs(total - 1.0) <= PROBABILITY_TOLERANCE * max(n, 1)
        )


class PositiveDefinite(Constraint):
    event_dim = 2

    def __call__(self, x: Variate) -> np.ndarray:
        x = np.asarray(x)

        if x.ndim < 2 or x.shape[-1] != x.shape[-2]:
            return np.zeros(x.shape[:-2], dtype=bool)

        finite = np.all(np.isfinite(x), axis=(-2, -1))
        x = np.where(finite[..., np.newaxis, np.newaxis], x, 0.0)
        # The tolerance PDMat applies to its input.
        eps = np.finfo(np.promote_types(x.dtype, np.float32)).eps
        tolerance = max(SYMMETRY_TOLERANCE, 100.0 * eps)
        asymmetry = np.abs(x - np.swapaxes(x, -2, -1))
        symmetric = np.all(asymmetry <= tolerance * (1.0 + np.abs(x)), axis=(-2, -1))
        # Symmetric matrices are positive definite iff all eigenvalues are.
        eigenvalues = la.eigvalsh(x)
        return finite & symmetric & np.all(eigenvalues > 0.0, axis=-1)


class LowerCholesky(Constraint):
    event_dim = 2

    def __call__(self, x: Variate) -> np.ndarray:
        x = np.asarray(x)

        if x.ndim < 2 or x.shape[-1] != x.shape[-2]:
            return np.zeros(x.shape[:-2], dtype=bool)

        lower_triangular = np.all(np.triu(x, k=1) == 0.0, axis=(-2, -1))
        diagonal = np.diagonal(x, axis1=-2, axis2=-1)
        positive_diagonal = np.all(positive(diagonal), axis=-1)
        return lower_triangular & positive_diagonal


real = Real()
interval = Interval
positive = Positive()
non_negative = NonNegative()
zero_one = ZeroOne()
integer = Integer()
integer_interval = IntegerInterval
non_negative_vector = NonNegativeVector()
simplex = Simplex()
positive_definite = PositiveDefinite()
lower_cholesky = LowerCholesky()
