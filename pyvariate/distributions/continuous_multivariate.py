import operator
from typing import Dict, Tuple

import numpy as np
import numpy.linalg as la  # Not SciPy, NumPy works for batches of matrices.
from numpy.random import RandomState

from pyvariate.constants import ArrayLike, Parameter, Shape, Variate
from pyvariate.distributions.constraints import (
    Constraint,
    positive,
    positive_definite,
)
from pyvariate.distributions.continuous_univariate import Chi, Gamma, Normal
from pyvariate.distributions.distribution import ExponentialFamily
from pyvariate.distributions.utils import (
    log_multivariate_gamma,
    multivariate_digamma,
    vectorize_matrix,
)
from pyvariate.exceptions import (
    DimensionMismatch,
    DomainError,
    InvalidDistributionError,
)
from pyvariate.linalg import PDMat, PositiveDefiniteMatrix, as_pdmat


def _log_det(x: np.ndarray):
    try:
        cholesky_tril = la.cholesky(x)
    except la.LinAlgError as e:
        raise DomainError(
            "The log-density is only defined for positive-definite matrices."
        ) from e

    return 2.0 * np.sum(
        np.log(np.diagonal(cholesky_tril, axis1=-2, axis2=-1)), axis=-1
    )


def _wishart_logc0(df: Parameter, scale: PositiveDefiniteMatrix) -> Parameter:
    half_df = df / 2.0
    p = scale.dim
    return -half_df * (scale.logdet() + p * np.log(2.0)) - log_multivariate_gamma(
        p, half_df
    )


class Wishart(ExponentialFamily):
    """
    Wishart distribution over p x p positive-definite matrices, parametrized
    by the degrees of freedom `df > p - 1` and a positive-definite scale
    matrix S. The density is

        p(X) = |X|^((df - p - 1) / 2) exp(-tr(S^{-1} X) / 2)
               / (2^(df p / 2) |S|^(df / 2) Gamma_p(df / 2)).

    The scale matrix may be given as a `PositiveDefiniteMatrix`, as a dense
    array or through its lower triangular Cholesky factor. Samples are
    generated by the Bartlett decomposition, which also works for
    non-integral degrees of freedom.
    """

    _constraints: Dict[str, Constraint] = {"df": positive}
    _support: Constraint = positive_definite

    def __init__(
        self,
        df: Parameter,
        scale=None,
        cholesky_tril: Parameter = None,
        check_parameters: bool = True,
        check_support: bool = True,
    ):
        if (scale is not None) + (cholesky_tril is not None) != 1:
            raise ValueError(
                "Provide either the scale matrix or its lower "
                "triangular Cholesky decomposition."
            )

        if np.ndim(df) != 0:
            raise ValueError(
                "The degrees of freedom must be a scalar; batches of Wishart "
                "distributions are not supported."
            )

        if scale is not None:
            scale = as_pdmat(scale)
        else:
            scale = PDMat.from_cholesky(cholesky_tril)

        p = scale.dim

        if not df > p - 1:
            raise InvalidDistributionError(
                f"The degrees of freedom must be greater than dim - 1 = {p - 1}, "
                f"got {df}."
            )

        # A single floating type for the whole distribution, resolved here
        # and used by every evaluation and sample afterwards.
        dtype = np.promote_types(np.asarray(df).dtype, scale.dtype)
        dtype = np.promote_types(dtype, np.float32)

        self.df = np.asarray(df, dtype=dtype)[()]
        self.scale = scale.astype(dtype)
        self.dtype = dtype

        super().__init__(
            batch_shape=(),
            rv_shape=(p, p),
            check_parameters=check_parameters,
            check_support=check_support,
        )

        self.logc0 = dtype.type(_wishart_logc0(self.df, self.scale))

        self._bartlett_diagonal = Chi(
            df=self.df - np.arange(p), check_parameters=check_parameters
        )
        self._bartlett_lower = Normal(loc=0.0, scale=1.0)

    @property
    def dim(self) -> int:
        return self.scale.dim

    @property
    def params(self) -> Tuple[Parameter, PositiveDefiniteMatrix]:
        return self.df, self.scale

    @property
    def mean(self) -> Parameter:
        return self.df * self.scale.to_dense()

    @property
    def mode(self) -> Parameter:
        r = self.df - self.dim - 1.0

        if not r > 0.0:
            raise DomainError("The mode is only defined when df > dim + 1.")

        return r * self.scale.to_dense()

    @property
    def variance(self) -> Parameter:
        scale = self.scale.to_dense()
        diagonal = np.diagonal(scale)
        return self.df * (np.outer(diagonal, diagonal) + np.square(scale))

    @property
    def meanlogdet(self) -> Parameter:
        """
        The expected log-determinant of a sampled matrix.
        """
        p = self.dim
        return (
            self.scale.logdet()
            + p * np.log(2.0)
            + multivariate_digamma(p, self.df / 2.0)
        )

    def entropy(self) -> Parameter:
        p = self.dim
        return (
            -self.logc0
            - 0.5 * (self.df - p - 1.0) * self.meanlogdet
            + 0.5 * self.df * p
        )

    def cov(self, i: int, j: int, k: int, l: int) -> Parameter:  # noqa: E741
        """
        Covariance of the entries X[i, j] and X[k, l], following
        Gupta & Nagar (1999), Theorem 3.3.15.i.
        """
        i, j, k, l = self._check_indices(i, j, k, l)  # noqa: E741
        scale = self.scale.to_dense()
        return self.df * (scale[i, k] * scale[j, l] + scale[i, l] * scale[j, k])

    def var(self, i: int, j: int) -> Parameter:
        i, j = self._check_indices(i, j)
        scale = self.scale.to_dense()
        return self.df * (scale[i, i] * scale[j, j] + np.square(scale[i, j]))

    def univariate(self) -> Gamma:
        """
        The equivalent gamma distribution of a 1 x 1 Wishart distribution.
        """
        if self.dim != 1:
            raise ValueError(
                f"Only a 1-dimensional Wishart distribution is univariate, "
                f"this one has dimension {self.dim}."
            )

        return Gamma(shape=self.df / 2.0, scale=2.0 * self.scale.to_dense()[0, 0])

    def insupport(self, x: Variate) -> ArrayLike:
        x = np.asarray(x)

        if (
            not np.issubdtype(x.dtype, np.number)
            or x.ndim < 2
            or x.shape[-2:] != self.rv_shape
        ):
            return False

        return positive_definite(x)

    def log_prob(self, x: Variate) -> ArrayLike:
        x = np.asarray(x)

        if x.ndim < 2 or x.shape[-2:] != self.rv_shape:
            raise DimensionMismatch(
                f"Expected matrices of shape {self.rv_shape}, got {x.shape}."
            )

        return super().log_prob(x)

    def logkernel(self, x: Variate) -> ArrayLike:
        """
        The logarithm of the unnormalized density. Matrices without a
        Cholesky decomposition raise a `DomainError`, which only happens
        when the support check is disabled.
        """
        log_det = _log_det(x)
        trace = self.scale.trace_solve(x)
        return 0.5 * ((self.df - self.dim - 1.0) * log_det - trace)

    def _log_prob(self, x: Variate) -> ArrayLike:
        return self.logkernel(x) + self.logc0

    def _sample(self, sample_shape: Shape, random_state: RandomState) -> Variate:
        # Bartlett decomposition: A is lower triangular with
        #   A[i, i] ~ Chi(df - i)  (zero-based i),
        #   A[i, j] ~ Normal(0, 1) for i > j,
        # and L A (L A)^T ~ Wishart(df, L L^T).
        p = self.dim
        a = np.zeros(sample_shape + self.rv_shape, dtype=self.dtype)

        diagonal = np.arange(p)
        a[..., diagonal, diagonal] = self._bartlett_diagonal.sample(
            sample_shape, random_state
        )

        rows, cols = np.tril_indices(p, k=-1)
        a[..., rows, cols] = self._bartlett_lower.sample(
            sample_shape + rows.shape, random_state
        )

        self.scale.unwhiten(a)
        x = a @ np.swapaxes(a, -2, -1)

        # Make the result exactly symmetric.
        return 0.5 * (x + np.swapaxes(x, -2, -1))

    @property
    def natural_parameter(self) -> Tuple[Parameter, ...]:
        precision = self.scale.solve(np.identity(self.dim, dtype=self.dtype))

        # The matrix is vectorized so that the Frobenius product can be written
        # as an ordinary dot product.
        return vectorize_matrix(-0.5 * precision), 0.5 * (self.df - self.dim - 1.0)

    @property
    def log_normalizer(self) -> Parameter:
        return -self.logc0

    def base_measure(self, x: Variate) -> ArrayLike:
        return 1.0

    def sufficient_statistic(self, x: Variate) -> Tuple[ArrayLike, ...]:
        log_det = _log_det(x)
        return vectorize_matrix(x), log_det

    def _check_indices(self, *indices: int) -> Tuple[int, ...]:
        indices = tuple(operator.index(index) for index in indices)

        for index in indices:
            if not 0 <= index < self.dim:
                raise IndexError(
                    f"Index {index} is out of bounds for dimension {self.dim}."
                )

        return indices

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(df={self.df!r}, "
            f"scale={self.scale.to_dense().tolist()!r})"
        )
