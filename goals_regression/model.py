"""
Linear models for total goals: fitted model artifacts and the OLS model bank.

Every candidate is "regress TG on feature set F" with kind 'ols' or
'ridge'. Ridge fitting and its penalty search live in optimize.py.
"""
from dataclasses import dataclass
from typing import Optional

import joblib
import numpy as np
import pandas as pd

from .config import MODEL_DIR, TARGET, MODEL_SPECS
from .errors import FitError


@dataclass(frozen=True)
class RidgeCVResult:
    """Cross-validation curve of a ridge penalty search."""

    alphas: tuple
    cv_rmse: tuple
    best_alpha: float
    n_folds: int
    n_valid_folds: int

    @property
    def best_cv_rmse(self):
        return self.cv_rmse[self.alphas.index(self.best_alpha)]


@dataclass(frozen=True)
class FittedModel:
    """
    An immutable linear model: TG = intercept + sum(w_i * feature_i).

    Coefficients are in the raw units of the features, whatever scaling
    was used while fitting.
    """

    name: str
    kind: str
    features: tuple
    intercept: float
    coefficients: tuple
    target: str = TARGET
    alpha: Optional[float] = None
    cv: Optional[RidgeCVResult] = None

    def predict(self, df):
        """Predict the target for every row of ``df``."""
        if not self.features:
            return np.full(len(df), self.intercept)
        X = _feature_matrix(df, self.features)
        return self.intercept + X @ np.asarray(self.coefficients)


def _feature_matrix(df, features):
    missing = [f for f in features if f not in df.columns]
    if missing:
        raise FitError(f"Missing feature columns: {missing}")
    return df[list(features)].to_numpy(dtype=float)


def fit_linear(df, features, target=TARGET, name=None):
    """
    Fit ordinary least squares of ``target`` on ``features``.

    Solved with numpy's SVD-based lstsq on the design matrix [1, X].
    Collinear features are rejected rather than handed to a
    pseudo-inverse. With no features this is the global average model.

    Args:
        df: Training rows
        features: Ordered feature column names
        target: Target column
        name: Model name (defaults to the formula)

    Returns:
        FittedModel

    Raises:
        FitError: If the design matrix is rank-deficient
    """
    features = tuple(features)
    if name is None:
        name = f"{target} ~ {' + '.join(features) or '1'}"

    X = _feature_matrix(df, features)
    y = df[target].to_numpy(dtype=float)
    design = np.column_stack([np.ones(len(y)), X])

    rank = np.linalg.matrix_rank(design)
    if rank < design.shape[1]:
        raise FitError(
            f"{name}: design matrix is rank-deficient "
            f"(rank {rank} < {design.shape[1]} columns) for features {list(features)}"
        )

    beta, _, _, _ = np.linalg.lstsq(design, y, rcond=None)
    if not np.all(np.isfinite(beta)):
        raise FitError(f"{name}: non-finite coefficients")

    return FittedModel(
        name=name,
        kind='ols',
        features=features,
        intercept=float(beta[0]),
        coefficients=tuple(float(b) for b in beta[1:]),
        target=target,
    )


def fit_model(df, kind, features, target=TARGET, name=None, **kwargs):
    """
    Fit one regression of the given kind over a feature set.

    Args:
        df: Training rows
        kind: 'ols' or 'ridge'
        features: Ordered feature column names
        target: Target column
        name: Model name
        **kwargs: Passed to ``fit_ridge_cv`` for ridge models
            (alphas, n_folds, seed, rng)

    Returns:
        FittedModel
    """
    if kind == 'ols':
        return fit_linear(df, features, target=target, name=name)
    if kind == 'ridge':
        from .optimize import fit_ridge_cv
        model, _ = fit_ridge_cv(df, features, target=target, name=name, **kwargs)
        return model
    raise ValueError(f"Unknown model kind: {kind!r}")


def fit_model_bank(df, specs=None, target=TARGET, **ridge_kwargs):
    """
    Fit every candidate model on the training rows.

    A model that fails to fit is recorded and skipped so the remaining
    candidates are still fit.

    Args:
        df: Training rows
        specs: Sequence of (name, kind, features) (default: MODEL_SPECS)
        target: Target column
        **ridge_kwargs: Cross-validation settings for ridge models

    Returns:
        (models, failures): fitted models in the order given, and a dict of
        model name -> FitError for the ones that failed
    """
    if specs is None:
        specs = MODEL_SPECS

    models = []
    failures = {}
    for name, kind, features in specs:
        print(f"Fitting {name} ({kind}: {', '.join(features) or 'intercept only'})...")
        try:
            model = fit_model(df, kind, features, target=target, name=name, **ridge_kwargs)
        except FitError as e:
            print(f"  FAILED: {e}")
            failures[name] = e
            continue
        models.append(model)

    return models, failures


def get_coefficients(model):
    """Coefficient table (intercept first) for a fitted model."""
    return pd.DataFrame({
        'term': ['(Intercept)'] + list(model.features),
        'estimate': [model.intercept] + list(model.coefficients),
    })


def save_model(model, filename="ridge_model.joblib", directory=None):
    """Save model to disk."""
    path = (MODEL_DIR if directory is None else directory) / filename
    joblib.dump(model, path)
    print(f"Model saved to {path}")
    return path


def load_model(filename="ridge_model.joblib", directory=None):
    """Load model from disk."""
    path = (MODEL_DIR if directory is None else directory) / filename
    model = joblib.load(path)
    print(f"Model loaded from {path}")
    return model
