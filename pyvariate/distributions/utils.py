from typing import Iterable

import numpy as np
from scipy.special import digamma, gammaln

from pyvariate.constants import ArrayLike, Parameter, Shape


def broadcast_shapes(*shapes: Shape) -> Shape:
    if len(shapes) == 1:
        return shapes[0]

    ndim = max(len(shape) for shape in shapes)
    shapes = np.array([(1,) * (ndim - len(shape)) + shape for shape in shapes])

    min_shape = np.min(shapes, axis=0)
    max_shape = np.max(shapes, axis=0)

    result_shape = np.where(min_shape == 0, 0, max_shape)

    if not np.all((shapes == result_shape) | (shapes == 1)):
        raise ValueError(
            f"Incompatible shapes for broadcasting: {tuple(map(tuple, shapes))}."
        )

    return tuple(int(size) for size in result_shape)


def promote_shapes(*arrays: np.ndarray, shape: Shape = ()) -> Iterable[np.ndarray]:
    if len(arrays) < 2 and not shape:
        return arrays
    else:
        shapes = [np.shape(array) for array in arrays]
        n_dims = len(broadcast_shapes(shape, *shapes))
        return [
            np.reshape(array, (1,) * (n_dims - len(s)) + s)
            if len(s) < n_dims
            else array
            for array, s in zip(arrays, shapes)
        ]


def log_multivariate_gamma(p: int, a: Parameter) -> ArrayLike:
    """
    Logarithm of the multivariate gamma function
    Gamma_p(a) = pi^(p(p-1)/4) prod_{i=1}^{p} Gamma(a - (i-1)/2).
    """
    half_offsets = np.arange(p) / 2.0
    return p * (p - 1) / 4.0 * np.log(np.pi) + np.sum(
        gammaln(np.expand_dims(a, axis=-1) - half_offsets), axis=-1
    )


def multivariate_digamma(p: int, a: Parameter) -> ArrayLike:
    """
    Derivative of `log_multivariate_gamma` with respect to `a`.
    """
    half_offsets = np.arange(p) / 2.0
    return np.sum(digamma(np.expand_dims(a, axis=-1) - half_offsets), axis=-1)


def vectorize_matrix(x: np.ndarray) -> np.ndarray:
    # Row-major flattening of the last two axes, so that the Frobenius
    # product of two matrices becomes an ordinary dot product.
    return np.reshape(x, np.shape(x)[:-2] + (-1,))
