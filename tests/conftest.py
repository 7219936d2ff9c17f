import random

import numpy as np


def pytest_runtest_setup(item):
    random.seed(123)
    np.random.seed(123)
