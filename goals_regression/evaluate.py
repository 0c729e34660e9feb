"""
Evaluation metrics and visualization for the total goals models.
"""
import json
from dataclasses import dataclass

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from sklearn.metrics import mean_squared_error

from .config import OUTPUT_DIR


@dataclass(frozen=True)
class RMSEResult:
    """RMSE of one model on one partition."""

    model: str
    partition: str
    rmse: float
    n: int

    @property
    def label(self):
        if self.partition == 'train':
            return self.model
        return f"{self.model} ({self.partition})"


def rmse(predictions, actuals):
    """
    Root mean squared error, sqrt(mean((prediction - actual)^2)).

    Raises:
        ValueError: On empty or mismatched inputs, or non-finite values
    """
    predictions = np.asarray(predictions, dtype=float)
    actuals = np.asarray(actuals, dtype=float)

    if predictions.shape != actuals.shape:
        raise ValueError(
            f"predictions and actuals differ in shape: {predictions.shape} vs {actuals.shape}"
        )
    if predictions.size == 0:
        raise ValueError("Cannot compute RMSE of empty inputs")
    if not (np.all(np.isfinite(predictions)) and np.all(np.isfinite(actuals))):
        raise ValueError("RMSE inputs contain non-finite values")

    return float(np.sqrt(mean_squared_error(actuals, predictions)))


def evaluate_model(model, df, partition='train'):
    """
    Score a fitted model on one partition.

    Args:
        model: FittedModel
        df: Rows of the partition
        partition: 'train' or 'holdout'

    Returns:
        RMSEResult
    """
    score = rmse(model.predict(df), df[model.target])
    print(f"  {model.name:<28} {partition:<8} RMSE {score:.4f}  (n={len(df)})")
    return RMSEResult(model=model.name, partition=partition, rmse=score, n=len(df))


def comparison_table(results):
    """
    Comparison table in evaluation order (not sorted by score).

    Returns:
        pd.DataFrame with columns Model, RMSE
    """
    return pd.DataFrame({
        'Model': [r.label for r in results],
        'RMSE': [r.rmse for r in results],
    })


def plot_cv_curve(cv, save=True, output_dir=None):
    """Plot cross-validated RMSE against the ridge penalty."""
    fig, ax = plt.subplots(figsize=(8, 6))

    ax.plot(cv.alphas, cv.cv_rmse, 'o-', markersize=4)
    ax.axvline(x=cv.best_alpha, color='red', linestyle='--',
               label=f'Best alpha = {cv.best_alpha:.3g}')

    ax.set_xscale('log')
    ax.set_xlabel('Penalty (alpha)')
    ax.set_ylabel(f'{cv.n_folds}-fold CV RMSE')
    ax.set_title('Ridge Penalty Selection')
    ax.legend()
    ax.grid(True, alpha=0.3)

    if save:
        path = (OUTPUT_DIR if output_dir is None else output_dir) / "cv_curve.png"
        fig.savefig(path, dpi=150, bbox_inches='tight')
        print(f"Saved CV curve to {path}")

    return fig


def plot_predictions(y_true, y_pred, label="Holdout", save=True, output_dir=None):
    """
    Scatter predicted against actual total goals.

    Points on the diagonal are perfect predictions.
    """
    fig, ax = plt.subplots(figsize=(8, 8))

    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)

    ax.scatter(y_true, y_pred, alpha=0.6, edgecolor='black')
    lo = min(y_true.min(), y_pred.min())
    hi = max(y_true.max(), y_pred.max())
    ax.plot([lo, hi], [lo, hi], 'k--', label='Perfect')

    ax.set_xlabel('Actual Total Goals')
    ax.set_ylabel('Predicted Total Goals')
    ax.set_title(f'{label}: RMSE = {rmse(y_pred, y_true):.3f}')
    ax.legend()
    ax.grid(True, alpha=0.3)

    if save:
        path = (OUTPUT_DIR if output_dir is None else output_dir) / "holdout_predictions.png"
        fig.savefig(path, dpi=150, bbox_inches='tight')
        print(f"Saved prediction plot to {path}")

    return fig


def plot_model_comparison(table, save=True, output_dir=None):
    """Horizontal bar chart of the comparison table."""
    fig, ax = plt.subplots(figsize=(10, 6))

    # First evaluated model at the top
    ax.barh(table['Model'][::-1], table['RMSE'][::-1], edgecolor='black', alpha=0.7)
    for i, value in enumerate(table['RMSE'][::-1]):
        ax.text(value, i, f' {value:.3f}', va='center')

    ax.set_xlabel('RMSE (total goals)')
    ax.set_title('Model Comparison')
    ax.grid(True, axis='x', alpha=0.3)

    if save:
        path = (OUTPUT_DIR if output_dir is None else output_dir) / "model_comparison.png"
        fig.savefig(path, dpi=150, bbox_inches='tight')
        print(f"Saved model comparison to {path}")

    return fig


def save_results_table(table, filename="results.csv", output_dir=None):
    """Save the comparison table to CSV."""
    path = (OUTPUT_DIR if output_dir is None else output_dir) / filename
    table.to_csv(path, index=False)
    print(f"Saved results table to {path}")
    return path


def save_metrics(metrics, filename="metrics.json", output_dir=None):
    """Save metrics to JSON file."""
    path = (OUTPUT_DIR if output_dir is None else output_dir) / filename
    with open(path, 'w') as f:
        json.dump(metrics, f, indent=2)
    print(f"Saved metrics to {path}")
    return path
