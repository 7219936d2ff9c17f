import numbers

import numpy as np
from numpy.random import RandomState


def check_random_state(seed) -> RandomState:
    """
    Turn `seed` into a `RandomState` instance.

    `None` (or the `np.random` module) resolves to the global generator,
    an integer seeds a fresh generator and an existing `RandomState` is
    passed through, so that the caller keeps ownership of its state.
    """
    if seed is None or seed is np.random:
        return np.random.mtrand._rand
    elif isinstance(seed, (numbers.Integral, np.integer)):
        return RandomState(seed)
    elif isinstance(seed, RandomState):
        return seed
    else:
        raise ValueError(
            f"Invalid random seed {seed}. Expected None, an integer or a RandomState."
        )
