import numpy as np
import pandas as pd
import pytest

from goals_regression.errors import ConfigurationError, FitError
from goals_regression.model import fit_linear
from goals_regression.optimize import (
    cross_validate_ridge,
    fit_ridge,
    fit_ridge_cv,
)


@pytest.fixture
def noisy_frame() -> pd.DataFrame:
    """TG = 1 + 2 xG + 0.1 Sh + noise, plus an irrelevant SoT column."""
    rng = np.random.default_rng(3)
    n = 200
    df = pd.DataFrame({
        "xG": rng.uniform(0, 3, n),
        "xGA": rng.uniform(0, 3, n),
        "Sh": rng.integers(0, 20, n).astype(float),
        "SoT": rng.integers(0, 8, n).astype(float),
    })
    df["TG"] = 1 + 2 * df["xG"] + 0.1 * df["Sh"] + rng.normal(0, 0.8, n)
    return df


FEATURES = ["xG", "xGA", "Sh", "SoT"]


# ---------------------------------------------------------------------------
# Fixed-penalty ridge
# ---------------------------------------------------------------------------


def test_small_penalty_matches_ols(noisy_frame):
    """As alpha -> 0 ridge converges to ordinary least squares."""
    ols = fit_linear(noisy_frame, FEATURES)
    ridge = fit_ridge(noisy_frame, FEATURES, alpha=1e-8)

    assert ridge.intercept == pytest.approx(ols.intercept, abs=1e-6)
    np.testing.assert_allclose(ridge.coefficients, ols.coefficients, atol=1e-6)


def test_huge_penalty_shrinks_to_zero(noisy_frame):
    """As alpha -> inf every slope goes to 0 and the intercept to mean TG."""
    ridge = fit_ridge(noisy_frame, FEATURES, alpha=1e12)

    np.testing.assert_allclose(ridge.coefficients, 0.0, atol=1e-6)
    assert ridge.intercept == pytest.approx(noisy_frame["TG"].mean(), abs=1e-4)


def test_penalty_shrinks_monotonically(noisy_frame):
    """The standardized coefficient norm falls as the penalty grows."""
    scales = noisy_frame[FEATURES].std(ddof=0).to_numpy()
    norms = [
        np.linalg.norm(np.asarray(fit_ridge(noisy_frame, FEATURES, alpha=a).coefficients) * scales)
        for a in [0.1, 10.0, 1000.0, 100000.0]
    ]
    assert norms == sorted(norms, reverse=True)


def test_intercept_is_not_penalized(noisy_frame):
    """Shifting TG by a constant only moves the intercept."""
    base = fit_ridge(noisy_frame, FEATURES, alpha=50.0)
    shifted = fit_ridge(noisy_frame.assign(TG=noisy_frame["TG"] + 10), FEATURES, alpha=50.0)

    assert shifted.intercept == pytest.approx(base.intercept + 10)
    np.testing.assert_allclose(shifted.coefficients, base.coefficients)


def test_ridge_constant_feature_raises(noisy_frame):
    with pytest.raises(FitError, match="constant"):
        fit_ridge(noisy_frame.assign(SoT=1.0), FEATURES, alpha=1.0)


def test_ridge_negative_penalty_raises(noisy_frame):
    with pytest.raises(ConfigurationError):
        fit_ridge(noisy_frame, FEATURES, alpha=-1.0)


def test_ridge_needs_features(noisy_frame):
    with pytest.raises(ConfigurationError):
        fit_ridge(noisy_frame, [], alpha=1.0)


# ---------------------------------------------------------------------------
# Cross-validation
# ---------------------------------------------------------------------------


def test_cv_uses_every_fold_on_uneven_rows(noisy_frame):
    """23 rows still split into 10 usable folds."""
    cv = cross_validate_ridge(noisy_frame.head(23), FEATURES, alphas=[1.0], n_folds=10, seed=1)

    assert cv.n_folds == 10
    assert cv.n_valid_folds == 10


def test_cv_is_reproducible(noisy_frame):
    """The selected penalty is identical across runs with the same seed."""
    a = cross_validate_ridge(noisy_frame, FEATURES, n_folds=10, seed=1)
    b = cross_validate_ridge(noisy_frame, FEATURES, n_folds=10, seed=1)

    assert a.best_alpha == b.best_alpha
    assert a.cv_rmse == b.cv_rmse


def test_cv_picks_grid_minimum(noisy_frame):
    cv = cross_validate_ridge(noisy_frame, FEATURES, alphas=[1e5, 0.01, 1.0], n_folds=5, seed=1)

    # Grid is sorted ascending
    assert cv.alphas == (0.01, 1.0, 1e5)
    assert cv.best_cv_rmse == min(cv.cv_rmse)
    # Heavy shrinkage throws away a real signal
    assert cv.best_alpha != 1e5
    assert cv.n_valid_folds == 5


def test_cv_duplicate_penalties_collapse(noisy_frame):
    cv = cross_validate_ridge(noisy_frame, FEATURES, alphas=[2.0, 2.0], n_folds=5, seed=1)
    assert cv.alphas == (2.0,)
    assert cv.best_alpha == 2.0


def test_cv_empty_grid_raises(noisy_frame):
    with pytest.raises(ConfigurationError, match="empty"):
        cross_validate_ridge(noisy_frame, FEATURES, alphas=[])


@pytest.mark.parametrize("n_folds", [0, 1, 201])
def test_cv_bad_fold_count_raises(noisy_frame, n_folds):
    with pytest.raises(ConfigurationError, match="n_folds"):
        cross_validate_ridge(noisy_frame, FEATURES, n_folds=n_folds)


def test_cv_all_folds_degenerate_raises(noisy_frame):
    """A constant feature makes every fold degenerate."""
    with pytest.raises(ConfigurationError, match="degenerate"):
        cross_validate_ridge(noisy_frame.assign(SoT=0.0), FEATURES, n_folds=5)


def test_fit_ridge_cv_refits_with_best_alpha(noisy_frame):
    model, cv = fit_ridge_cv(noisy_frame, FEATURES, n_folds=10, seed=1, name="Ridge")

    assert model.name == "Ridge"
    assert model.alpha == cv.best_alpha
    assert model.cv == cv
    assert model == fit_ridge_cv(noisy_frame, FEATURES, n_folds=10, seed=1, name="Ridge")[0]

    refit = fit_ridge(noisy_frame, FEATURES, alpha=cv.best_alpha)
    np.testing.assert_allclose(model.coefficients, refit.coefficients)


def test_injected_generator_matches_seed(noisy_frame):
    a = cross_validate_ridge(noisy_frame, FEATURES, n_folds=5, seed=9)
    b = cross_validate_ridge(noisy_frame, FEATURES, n_folds=5, rng=np.random.RandomState(9))
    assert a == b
