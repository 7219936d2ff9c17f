from typing import Dict, List, Optional, Union

import numpy as np
import scipy.stats as stats
from numpy.testing import assert_allclose
from pytest import approx, raises

from pyvariate.constants import Parameter, Shape
from pyvariate.distributions import Chi, Gamma, Normal
from pyvariate.utils import check_random_state


def generate(
    random_state: np.random.RandomState,
    shape: Union[None, Shape],
    positive: Optional[Union[str, List[str]]] = None,
    real: Optional[Union[str, List[str]]] = None,
    **limits: float,
) -> Dict[str, Parameter]:
    parameters = {}

    limits_default = {
        "positive_low": 0.001,
        "positive_high": 10.0,
        "real_low": -10.0,
        "real_high": 10.0,
    }

    limits = {**limits_default, **limits}

    if positive is not None:
        if isinstance(positive, str):
            positive = [positive]

        for p in positive:
            parameters[p] = random_state.uniform(
                low=limits["positive_low"], high=limits["positive_high"], size=shape
            )

    if real is not None:
        if isinstance(real, str):
            real = [real]

        for p in real:
            parameters[p] = random_state.uniform(
                low=limits["real_low"], high=limits["real_high"], size=shape
            )

    return parameters


random_state = check_random_state(123)

DISTRIBUTIONS = [
    Chi(**generate(random_state, shape=(), positive="df", positive_low=0.5)),
    Chi(**generate(random_state, shape=(2,), positive="df", positive_low=0.5)),
    Chi(**generate(random_state, shape=(2, 3), positive="df", positive_low=0.5)),
    Gamma(
        **generate(
            random_state, shape=(), positive=["shape", "rate"], positive_low=0.5
        )
    ),
    Gamma(
        **generate(
            random_state, shape=(2,), positive=["shape", "rate"], positive_low=0.5
        )
    ),
    Gamma(
        **generate(
            random_state, shape=(2, 3), positive=["shape", "rate"], positive_low=0.5
        )
    ),
    Gamma(
        **generate(
            random_state, shape=(), positive=["shape", "scale"], positive_low=0.5
        )
    ),
    Normal(**generate(random_state, shape=(), positive="scale", real="loc")),
    Normal(**generate(random_state, shape=(2,), positive="scale", real="loc")),
    Normal(**generate(random_state, shape=(2, 3), positive="scale", real="loc")),
]


class TestBroadcasting:
    random_state = check_random_state(123)

    distributions = {
        Gamma: ["shape", "rate"],
        Normal: ["loc", "scale"],
    }

    n_samples = 100
    atol = 1e-6
    rtol = 1e-6

    def test_broadcasting(self):
        for distribution_cls, params in self.distributions.items():
            # Try setting each parameter to X and the others to aranges.
            # X == one distribution gets [[1.0]], the other [[1.0, 1.0], [1.0, 1.0]].
            fst_params = {}
            snd_params = {}

            for p1 in params:
                fst_params[p1] = np.full(shape=(2, 2), fill_value=1.0)
                snd_params[p1] = np.array(1.0).reshape(1, 1)

                for p2 in params:
                    if p1 == p2:
                        continue

                    fst_params[p2] = np.arange(2, 6, dtype=float).reshape(2, 2)
                    snd_params[p2] = np.arange(2, 6, dtype=float).reshape(2, 2)

                fst = distribution_cls(**fst_params)
                snd = distribution_cls(**snd_params)

                samples = fst.sample(
                    sample_shape=(self.n_samples,), random_state=self.random_state
                )

                assert_allclose(
                    fst.log_prob(samples),
                    snd.log_prob(samples),
                    atol=self.atol,
                    rtol=self.rtol,
                    err_msg=f"log_prob of {fst}",
                )


class TestExponentialFamilies:
    random_state = check_random_state(123)

    n_samples = 100
    atol = 1e-6
    rtol = 1e-6

    def test_base_measure_positive_within_support(self):
        for distribution in filter(lambda dist: dist.batch_shape == (), DISTRIBUTIONS):
            samples = distribution.sample(
                sample_shape=(self.n_samples,), random_state=self.random_state
            )

            assert np.all(
                distribution.base_measure(samples) > 0
            ), f"base measure of {distribution}"

    def test_log_probs_equal(self):
        for distribution in filter(lambda dist: dist.batch_shape == (), DISTRIBUTIONS):
            samples = distribution.sample(
                sample_shape=(self.n_samples,), random_state=self.random_state
            )

            h_x = distribution.base_measure(samples)
            eta = distribution.natural_parameter
            t_x = distribution.sufficient_statistic(samples)
            a_eta = distribution.log_normalizer

            dot_product = sum(e * t for e, t in zip(eta, t_x))
            expected_log_prob = np.log(h_x) + dot_product - a_eta

            assert_allclose(
                distribution.log_prob(samples),
                expected_log_prob,
                atol=self.atol,
                rtol=self.rtol,
                err_msg=f"log_prob of {distribution}",
            )


class TestFirstTwoMoments:
    random_state = check_random_state(123)

    n_samples = 200000
    atol = 0.1
    rtol = 0.05

    def test_mean_and_variance(self):
        for distribution in DISTRIBUTIONS:
            samples = distribution.sample(
                sample_shape=(self.n_samples,), random_state=self.random_state
            )

            assert_allclose(
                np.mean(samples, axis=0),
                distribution.mean,
                atol=self.atol,
                rtol=self.rtol,
                err_msg=f"mean of {distribution}",
            )
            assert_allclose(
                np.std(samples, axis=0),
                distribution.std,
                atol=self.atol,
                rtol=self.rtol,
                err_msg=f"variance of {distribution}",
            )


class TestLogProb:
    random_state = check_random_state(123)

    dist2scipy = {
        Chi: lambda dist: stats.chi(df=dist.df),
        Gamma: lambda dist: stats.gamma(a=dist.shape, scale=np.reciprocal(dist.rate)),
        Normal: lambda dist: stats.norm(loc=dist.loc, scale=dist.scale),
    }

    n_samples = 100
    atol = 1e-6
    rtol = 1e-6

    def test_log_prob(self):
        for distribution in DISTRIBUTIONS:
            scipy_distribution = self.dist2scipy[type(distribution)](distribution)

            samples = distribution.sample(
                sample_shape=(self.n_samples,), random_state=self.random_state
            )
            assert_allclose(
                distribution.log_prob(samples),
                scipy_distribution.logpdf(samples),
                atol=self.atol,
                rtol=self.rtol,
                err_msg=f"log_prob of {distribution}",
            )

    def test_moments(self):
        for distribution in DISTRIBUTIONS:
            scipy_distribution = self.dist2scipy[type(distribution)](distribution)

            assert_allclose(
                distribution.mean,
                scipy_distribution.mean(),
                atol=self.atol,
                rtol=self.rtol,
                err_msg=f"mean of {distribution}",
            )
            assert_allclose(
                distribution.variance,
                scipy_distribution.var(),
                atol=self.atol,
                rtol=self.rtol,
                err_msg=f"variance of {distribution}",
            )

    def test_gamma_entropy(self):
        for distribution in filter(lambda dist: type(dist) is Gamma, DISTRIBUTIONS):
            scipy_distribution = self.dist2scipy[Gamma](distribution)

            assert_allclose(
                distribution.entropy(),
                scipy_distribution.entropy(),
                atol=self.atol,
                rtol=self.rtol,
                err_msg=f"entropy of {distribution}",
            )

    def test_outside_support(self):
        with raises(ValueError, match=r".*outside the support.*"):
            Gamma(shape=1.0, rate=1.0).log_prob(-1.0)
        with raises(ValueError, match=r".*outside the support.*"):
            Chi(df=2.0).log_prob(-1.0)


class TestGammaParametrization:
    def test_scale_is_reciprocal_rate(self):
        fst = Gamma(shape=2.0, rate=4.0)
        snd = Gamma(shape=2.0, scale=0.25)

        assert snd.rate == approx(4.0)
        assert fst.scale == approx(0.25)
        assert fst.log_prob(1.5) == approx(snd.log_prob(1.5))

    def test_exactly_one_of_rate_and_scale(self):
        with raises(ValueError, match=r".*exactly one.*"):
            Gamma(shape=1.0)
        with raises(ValueError, match=r".*exactly one.*"):
            Gamma(shape=1.0, rate=1.0, scale=1.0)


class TestParameterConstraints:
    def test_chi(self):
        with raises(ValueError, match=r".*positive.*"):
            Chi(df=-1.0)
        with raises(ValueError, match=r".*positive.*"):
            Chi(df=0.0)
        with raises(ValueError, match=r".*positive.*"):
            Chi(df=np.inf)

    def test_gamma(self):
        with raises(ValueError, match=r".*positive.*"):
            Gamma(shape=-1.0, rate=1.0)
        with raises(ValueError, match=r".*positive.*"):
            Gamma(shape=1.0, rate=-1.0)
        with raises(ValueError, match=r".*positive.*"):
            Gamma(shape=0.0, rate=1.0)
        with raises(ValueError, match=r".*positive.*"):
            Gamma(shape=1.0, rate=0.0)
        with raises(ValueError, match=r".*positive.*"):
            Gamma(shape=1.0, scale=0.0)

    def test_normal(self):
        with raises(ValueError, match=r".*real.*"):
            Normal(loc=np.nan, scale=1.0)
        with raises(ValueError, match=r".*real.*"):
            Normal(loc=-np.inf, scale=1.0)
        with raises(ValueError, match=r".*real.*"):
            Normal(loc=np.inf, scale=1.0)

        with raises(ValueError, match=r".*positive.*"):
            Normal(loc=1.0, scale=-1.0)
        with raises(ValueError, match=r".*positive.*"):
            Normal(loc=1.0, scale=0.0)

    def test_unchecked(self):
        distribution = Chi(df=-1.0, check_parameters=False)

        assert distribution.df == -1.0
