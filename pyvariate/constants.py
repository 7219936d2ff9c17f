from typing import Tuple, Union

import numpy as np

# Return type of a probability evaluation.
ArrayLike = Union[float, np.ndarray]

# Parameters of probability distributions.
Parameter = Union[float, np.ndarray]

# Return type of distribution sampling.
Variate = Union[int, float, np.ndarray]

# Either an empty tuple (scalar) or a tuple of dimensions (array).
Shape = Tuple[int, ...]

# Absolute tolerance on the total mass of a probability vector, per category.
PROBABILITY_TOLERANCE = 1e-8

# Absolute tolerance used when checking that a matrix is symmetric.
SYMMETRY_TOLERANCE = 1e-8
