"""
Positive-definite matrices behind a common interface.

Matrix-variate distributions only need a handful of operations on their
scale matrices: the log-determinant, solves against the matrix and the
(un)whitening maps given by its lower Cholesky factor L, where
S = L L^T. Each representation implements them in the way that is cheap
for its structure.
"""
import abc
from typing import Union

import numpy as np
import numpy.linalg as la  # Not SciPy, NumPy works for batches of matrices.
from scipy.linalg import cho_solve, solve_triangular

from pyvariate.constants import SYMMETRY_TOLERANCE
from pyvariate.exceptions import InvalidDistributionError

__all__ = [
    "PositiveDefiniteMatrix",
    "PDMat",
    "PDiagMat",
    "ScalMat",
    "as_pdmat",
]


def _float_dtype(dtype) -> np.dtype:
    return np.promote_types(dtype, np.float32)


def _as_column(diag: np.ndarray, x: np.ndarray) -> np.ndarray:
    # A vector is scaled elementwise, a matrix (or a batch of them) row-wise.
    return diag if np.ndim(x) < 2 else diag[:, np.newaxis]


class PositiveDefiniteMatrix(abc.ABC):
    @property
    @abc.abstractmethod
    def dim(self) -> int:
        pass

    @property
    @abc.abstractmethod
    def dtype(self) -> np.dtype:
        pass

    @property
    @abc.abstractmethod
    def cholesky_tril(self) -> np.ndarray:
        pass

    @abc.abstractmethod
    def logdet(self) -> float:
        pass

    @abc.abstractmethod
    def to_dense(self) -> np.ndarray:
        pass

    @abc.abstractmethod
    def unwhiten(self, a: np.ndarray) -> np.ndarray:
        """
        Overwrite `a` with L @ a, broadcasting over the leading axes.
        """

    @abc.abstractmethod
    def whiten(self, a: np.ndarray) -> np.ndarray:
        """
        Overwrite `a` with L^{-1} @ a, broadcasting over the leading axes.
        """

    @abc.abstractmethod
    def solve(self, x: np.ndarray) -> np.ndarray:
        pass

    @abc.abstractmethod
    def trace_solve(self, x: np.ndarray) -> Union[float, np.ndarray]:
        """
        Calculate tr(S^{-1} x) for a (batch of) square matrices x.
        """

    @abc.abstractmethod
    def astype(self, dtype) -> "PositiveDefiniteMatrix":
        pass

    @property
    def shape(self):
        return self.dim, self.dim

    def __array__(self, dtype=None, copy=None):
        dense = self.to_dense()
        return dense if dtype is None else dense.astype(dtype)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(dim={self.dim}, dtype={self.dtype})"


class PDMat(PositiveDefiniteMatrix):
    """
    A dense positive-definite matrix together with its Cholesky factor.
    """

    def __init__(self, matrix, cholesky_tril=None):
        matrix = np.array(matrix, dtype=_float_dtype(np.asarray(matrix).dtype))

        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise InvalidDistributionError(
                f"A positive-definite matrix must be square, got shape {matrix.shape}."
            )

        if not np.all(np.isfinite(matrix)):
            raise InvalidDistributionError(
                "A positive-definite matrix must have finite entries."
            )

        tolerance = max(SYMMETRY_TOLERANCE, 100.0 * np.finfo(matrix.dtype).eps)

        if not np.allclose(matrix, matrix.T, rtol=tolerance, atol=tolerance):
            raise InvalidDistributionError(
                "A positive-definite matrix must be symmetric."
            )

        if cholesky_tril is None:
            try:
                cholesky_tril = la.cholesky(matrix)
            except la.LinAlgError as e:
                raise InvalidDistributionError(
                    "The matrix is not positive definite."
                ) from e

        self._matrix = matrix
        self._cholesky_tril = np.array(cholesky_tril, dtype=matrix.dtype)

        identity = np.identity(self.dim, dtype=matrix.dtype)
        cholesky_inv = solve_triangular(self._cholesky_tril, identity, lower=True)
        self._inverse = np.array(cholesky_inv.T @ cholesky_inv, dtype=matrix.dtype)

        self._matrix.setflags(write=False)
        self._cholesky_tril.setflags(write=False)
        self._inverse.setflags(write=False)

    @classmethod
    def from_cholesky(cls, cholesky_tril) -> "PDMat":
        cholesky_tril = np.asarray(cholesky_tril)
        cholesky_tril = cholesky_tril.astype(_float_dtype(cholesky_tril.dtype))

        if (
            cholesky_tril.ndim != 2
            or cholesky_tril.shape[0] != cholesky_tril.shape[1]
            or np.any(np.triu(cholesky_tril, k=1) != 0.0)
            or not np.all(np.diagonal(cholesky_tril) > 0.0)
        ):
            raise InvalidDistributionError(
                "The Cholesky factor must be a square lower triangular "
                "matrix with a positive diagonal."
            )

        return cls(cholesky_tril @ cholesky_tril.T, cholesky_tril=cholesky_tril)

    @property
    def dim(self) -> int:
        return self._matrix.shape[0]

    @property
    def dtype(self) -> np.dtype:
        return self._matrix.dtype

    @property
    def cholesky_tril(self) -> np.ndarray:
        return self._cholesky_tril

    @property
    def inverse(self) -> np.ndarray:
        return self._inverse

    def logdet(self) -> float:
        return 2.0 * np.sum(np.log(np.diagonal(self._cholesky_tril)))

    def to_dense(self) -> np.ndarray:
        return self._matrix.copy()

    def unwhiten(self, a: np.ndarray) -> np.ndarray:
        a[...] = self._cholesky_tril @ a
        return a

    def whiten(self, a: np.ndarray) -> np.ndarray:
        if a.ndim <= 2:
            a[...] = solve_triangular(self._cholesky_tril, a, lower=True)
        else:
            a[...] = la.solve(self._cholesky_tril, a)

        return a

    def solve(self, x: np.ndarray) -> np.ndarray:
        if np.ndim(x) <= 2:
            return cho_solve((self._cholesky_tril, True), x)
        else:
            return self._inverse @ x

    def trace_solve(self, x: np.ndarray) -> Union[float, np.ndarray]:
        # tr(A B) = sum_ij A_ij B_ji, which broadcasts over the batch of x.
        return np.sum(self._inverse * np.swapaxes(x, -2, -1), axis=(-2, -1))

    def astype(self, dtype) -> "PDMat":
        if np.dtype(dtype) == self.dtype:
            return self

        return PDMat(
            self._matrix.astype(dtype), cholesky_tril=self._cholesky_tril.astype(dtype)
        )


class PDiagMat(PositiveDefiniteMatrix):
    """
    A diagonal positive-definite matrix stored by its diagonal.
    """

    def __init__(self, diag):
        diag = np.array(diag, dtype=_float_dtype(np.asarray(diag).dtype))

        if diag.ndim != 1 or not np.all(np.isfinite(diag) & (diag > 0.0)):
            raise InvalidDistributionError(
                "The diagonal of a positive-definite matrix must be a vector "
                "of positive finite numbers."
            )

        self._diag = diag
        self._sqrt_diag = np.sqrt(diag)
        self._diag.setflags(write=False)
        self._sqrt_diag.setflags(write=False)

    @property
    def dim(self) -> int:
        return self._diag.shape[0]

    @property
    def dtype(self) -> np.dtype:
        return self._diag.dtype

    @property
    def diag(self) -> np.ndarray:
        return self._diag

    @property
    def cholesky_tril(self) -> np.ndarray:
        return np.diag(self._sqrt_diag)

    def logdet(self) -> float:
        return np.sum(np.log(self._diag))

    def to_dense(self) -> np.ndarray:
        return np.diag(self._diag)

    def unwhiten(self, a: np.ndarray) -> np.ndarray:
        a *= _as_column(self._sqrt_diag, a)
        return a

    def whiten(self, a: np.ndarray) -> np.ndarray:
        a /= _as_column(self._sqrt_diag, a)
        return a

    def solve(self, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x)
        return x / _as_column(self._diag, x)

    def trace_solve(self, x: np.ndarray) -> Union[float, np.ndarray]:
        return np.sum(np.diagonal(x, axis1=-2, axis2=-1) / self._diag, axis=-1)

    def astype(self, dtype) -> "PDiagMat":
        if np.dtype(dtype) == self.dtype:
            return self

        return PDiagMat(self._diag.astype(dtype))


class ScalMat(PositiveDefiniteMatrix):
    """
    A positive multiple of the identity matrix.
    """

    def __init__(self, dim: int, value: float):
        if dim < 1:
            raise InvalidDistributionError(
                f"The dimension must be a positive integer, got {dim}."
            )

        if not (np.isfinite(value) and value > 0.0):
            raise InvalidDistributionError(
                "The scalar of a positive-definite matrix must be positive, "
                f"got {value}."
            )

        self._dim = int(dim)
        self._value = np.asarray(value)
        self._value = self._value.astype(_float_dtype(self._value.dtype))[()]

    @property
    def dim(self) -> int:
        return self._dim

    @property
    def dtype(self) -> np.dtype:
        return np.asarray(self._value).dtype

    @property
    def value(self):
        return self._value

    @property
    def cholesky_tril(self) -> np.ndarray:
        return np.sqrt(self._value) * np.identity(self._dim, dtype=self.dtype)

    def logdet(self) -> float:
        return self._dim * np.log(self._value)

    def to_dense(self) -> np.ndarray:
        return self._value * np.identity(self._dim, dtype=self.dtype)

    def unwhiten(self, a: np.ndarray) -> np.ndarray:
        a *= np.sqrt(self._value)
        return a

    def whiten(self, a: np.ndarray) -> np.ndarray:
        a /= np.sqrt(self._value)
        return a

    def solve(self, x: np.ndarray) -> np.ndarray:
        return np.asarray(x) / self._value

    def trace_solve(self, x: np.ndarray) -> Union[float, np.ndarray]:
        return np.trace(x, axis1=-2, axis2=-1) / self._value

    def astype(self, dtype) -> "ScalMat":
        if np.dtype(dtype) == self.dtype:
            return self

        return ScalMat(self._dim, np.asarray(self._value, dtype=dtype))


def as_pdmat(matrix) -> PositiveDefiniteMatrix:
    if isinstance(matrix, PositiveDefiniteMatrix):
        return matrix
    elif np.ndim(matrix) == 0:
        return PDMat(np.reshape(matrix, (1, 1)))
    else:
        return PDMat(matrix)
