"""
Ridge regression with a cross-validated penalty.

Approach:
- Standardize features on the training rows, so one penalty means the
  same thing for every feature, then map coefficients back to raw units
- Intercept is never penalized
- Seeded k-fold CV over a penalty grid, minimizing mean fold MSE
- Refit on all training rows with the winning penalty
"""
from dataclasses import replace

import numpy as np
from sklearn.linear_model import Ridge
from sklearn.model_selection import KFold
from sklearn.preprocessing import StandardScaler

from .config import TARGET, CV_FOLDS, RANDOM_SEED, RIDGE_ALPHAS
from .errors import FitError, ConfigurationError
from .model import FittedModel, RidgeCVResult, _feature_matrix


def _ridge_coefficients(X, y, alpha):
    """
    Raw-unit (intercept, coefficients) of a ridge fit on standardized X.

    sklearn's Ridge minimizes ||y - Xw - b||^2 + alpha * ||w||^2 and
    centers the data itself, leaving the intercept unpenalized.
    """
    scaler = StandardScaler()
    X_std = scaler.fit_transform(X)
    ridge = Ridge(alpha=alpha)
    ridge.fit(X_std, y)

    coef = ridge.coef_ / scaler.scale_
    intercept = ridge.intercept_ - coef @ scaler.mean_
    return float(intercept), coef


def _is_degenerate(X, y):
    """True if any feature or the target is constant."""
    return len(y) < 2 or np.any(np.ptp(X, axis=0) == 0) or np.ptp(y) == 0


def _check_alphas(alphas):
    alphas = np.asarray(alphas, dtype=float).ravel()
    if alphas.size == 0:
        raise ConfigurationError("Ridge penalty grid is empty")
    if not np.all(np.isfinite(alphas)) or np.any(alphas < 0):
        raise ConfigurationError(f"Ridge penalties must be finite and >= 0, got {alphas}")
    return np.unique(alphas)


def fit_ridge(df, features, alpha, target=TARGET, name=None):
    """
    Fit ridge regression with a fixed penalty.

    Args:
        df: Training rows
        features: Ordered feature column names
        alpha: Penalty strength (>= 0) on the standardized coefficients
        target: Target column
        name: Model name

    Returns:
        FittedModel with coefficients in raw feature units

    Raises:
        ConfigurationError: If there are no features or alpha is invalid
        FitError: If a feature is constant on the training rows
    """
    features = tuple(features)
    if name is None:
        name = f"Ridge {target} ~ {' + '.join(features)}"
    if not features:
        raise ConfigurationError(f"{name}: ridge needs at least one feature")
    alpha = float(_check_alphas([alpha])[0])

    X = _feature_matrix(df, features)
    y = df[target].to_numpy(dtype=float)

    constant = [f for f, spread in zip(features, np.ptp(X, axis=0)) if spread == 0]
    if constant:
        raise FitError(f"{name}: constant features {constant}")

    intercept, coef = _ridge_coefficients(X, y, alpha)
    if not (np.isfinite(intercept) and np.all(np.isfinite(coef))):
        raise FitError(f"{name}: non-finite coefficients at alpha={alpha}")

    return FittedModel(
        name=name,
        kind='ridge',
        features=features,
        intercept=intercept,
        coefficients=tuple(float(c) for c in coef),
        target=target,
        alpha=alpha,
    )


def cross_validate_ridge(df, features, alphas=None, n_folds=None, target=TARGET,
                         seed=None, rng=None):
    """
    Score each penalty in ``alphas`` by k-fold cross-validation.

    For every penalty and fold, fit on the other folds and record the mean
    squared error on the held-out fold. A penalty's score is the mean of
    its fold MSEs. Folds whose training part has a constant feature or
    target are skipped for every penalty. Ties go to the smallest penalty.

    Args:
        df: Training rows (never the holdout)
        features: Ordered feature column names
        alphas: Penalty grid (default: RIDGE_ALPHAS)
        n_folds: Number of folds (default: 10)
        target: Target column
        seed: Seed for fold assignment (default: 1)
        rng: Optional numpy RandomState for the fold shuffle, overrides ``seed``

    Returns:
        RidgeCVResult

    Raises:
        ConfigurationError: Empty or invalid grid, bad fold count, or no
            usable fold
    """
    if alphas is None:
        alphas = RIDGE_ALPHAS
    if n_folds is None:
        n_folds = CV_FOLDS
    if rng is None:
        rng = np.random.RandomState(RANDOM_SEED if seed is None else seed)

    alphas = _check_alphas(alphas)
    features = tuple(features)
    if not features:
        raise ConfigurationError("Ridge cross-validation needs at least one feature")

    X = _feature_matrix(df, features)
    y = df[target].to_numpy(dtype=float)

    if not 2 <= n_folds <= len(y):
        raise ConfigurationError(f"n_folds must be between 2 and {len(y)}, got {n_folds}")

    kfold = KFold(n_splits=n_folds, shuffle=True, random_state=rng)

    fold_mse = []
    for train_idx, val_idx in kfold.split(X):
        X_train, y_train = X[train_idx], y[train_idx]

        if _is_degenerate(X_train, y_train):
            continue

        X_val, y_val = X[val_idx], y[val_idx]
        errors = []
        for alpha in alphas:
            intercept, coef = _ridge_coefficients(X_train, y_train, alpha)
            residuals = y_val - (intercept + X_val @ coef)
            errors.append(np.mean(residuals ** 2))
        fold_mse.append(errors)

    if not fold_mse:
        raise ConfigurationError(
            f"All {n_folds} cross-validation folds are degenerate (constant feature or target)"
        )

    mean_mse = np.mean(fold_mse, axis=0)
    # argmin returns the first (smallest) alpha on ties
    best = int(np.argmin(mean_mse))

    return RidgeCVResult(
        alphas=tuple(float(a) for a in alphas),
        cv_rmse=tuple(float(v) for v in np.sqrt(mean_mse)),
        best_alpha=float(alphas[best]),
        n_folds=n_folds,
        n_valid_folds=len(fold_mse),
    )


def fit_ridge_cv(df, features, alphas=None, n_folds=None, target=TARGET,
                 seed=None, rng=None, name=None):
    """
    Choose the ridge penalty by cross-validation, then refit on all rows.

    Returns:
        (FittedModel, RidgeCVResult)
    """
    cv = cross_validate_ridge(
        df, features, alphas=alphas, n_folds=n_folds, target=target,
        seed=seed, rng=rng,
    )
    print(f"  Ridge CV ({cv.n_valid_folds}/{cv.n_folds} folds, {len(cv.alphas)} penalties): "
          f"best alpha {cv.best_alpha:.4g}, CV RMSE {cv.best_cv_rmse:.4f}")

    model = fit_ridge(df, features, cv.best_alpha, target=target, name=name)
    model = replace(model, cv=cv)
    return model, cv
