"""
Main pipeline for the total goals regression.

Run this script to:
1. Load (and cache) the match data
2. Derive total goals / total xG and validate the rows
3. Stratified 90/10 train/holdout split
4. Fit the candidate linear models and the cross-validated ridge model
5. Score every model on the training rows
6. Score the final ridge model once on the holdout
7. Save the comparison table, metrics, plots and model

Usage:
    python -m goals_regression.main                  # Download/cached data
    python -m goals_regression.main --data matches.csv
    python -m goals_regression.main --seed 7 --folds 5
"""
import argparse
from dataclasses import dataclass

import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend for saving plots

import pandas as pd

from .config import (
    TARGET, HOLDOUT_FRACTION, RANDOM_SEED, CV_FOLDS, MODEL_SPECS, OUTPUT_DIR
)
from .data import load_matches
from .errors import ConfigurationError
from .features import derive_features, describe_dataset
from .split import Split, stratified_split
from .model import FittedModel, fit_model_bank, get_coefficients, save_model
from .evaluate import (
    evaluate_model, comparison_table, save_metrics, save_results_table,
    plot_cv_curve, plot_predictions, plot_model_comparison
)
import matplotlib.pyplot as plt


@dataclass(frozen=True)
class PipelineResult:
    """Everything one run produces."""

    table: pd.DataFrame
    split: Split
    models: list
    failures: dict
    final_model: FittedModel
    train_results: list
    holdout_result: object
    summary: dict


def _final_model_name(specs):
    ridge_names = [name for name, kind, _ in specs if kind == 'ridge']
    if not ridge_names:
        raise ConfigurationError("Model specs need a ridge model to evaluate on the holdout")
    return ridge_names[-1]


def run_pipeline(df, holdout_fraction=None, seed=None, n_folds=None, alphas=None,
                 specs=None, make_plots=True, output_dir=None):
    """
    Run split, fits and evaluation on raw match rows.

    The holdout rows are only touched after every model is fit, and only
    to score the final ridge model.

    Args:
        df: Raw match rows (canonical column names)
        holdout_fraction: Share of rows held out (default: 0.10)
        seed: Seed for the split and the CV folds (default: 1)
        n_folds: Cross-validation folds for ridge (default: 10)
        alphas: Ridge penalty grid (default: RIDGE_ALPHAS)
        specs: Candidate models (default: MODEL_SPECS)
        make_plots: Whether to save diagnostic plots
        output_dir: Where plots go (default: OUTPUT_DIR)

    Returns:
        PipelineResult
    """
    if holdout_fraction is None:
        holdout_fraction = HOLDOUT_FRACTION
    if seed is None:
        seed = RANDOM_SEED
    if n_folds is None:
        n_folds = CV_FOLDS
    if specs is None:
        specs = MODEL_SPECS
    final_name = _final_model_name(specs)

    # 1. Derive features (fails fast on bad rows)
    print("\n[1/5] Deriving features...")
    df = derive_features(df)
    summary = describe_dataset(df)

    # 2. Split
    print("\n[2/5] Stratified train/holdout split...")
    split = stratified_split(
        df, target=TARGET, holdout_fraction=holdout_fraction, seed=seed,
    )

    # 3. Fit candidates on the training rows only
    print("\n[3/5] Fitting models...")
    models, failures = fit_model_bank(
        split.train, specs, target=TARGET,
        alphas=alphas, n_folds=n_folds, seed=seed,
    )
    if final_name in failures:
        raise failures[final_name]
    final_model = next(m for m in models if m.name == final_name)

    # 4. Training RMSE for every model
    print("\n[4/5] Evaluating on training rows...")
    train_results = [evaluate_model(m, split.train, 'train') for m in models]

    # 5. Holdout RMSE for the final model only
    print("\n[5/5] Evaluating final model on holdout...")
    holdout_result = evaluate_model(final_model, split.holdout, 'holdout')

    table = comparison_table(train_results + [holdout_result])

    if make_plots:
        plot_cv_curve(final_model.cv, output_dir=output_dir)
        plot_predictions(
            split.holdout[TARGET], final_model.predict(split.holdout),
            label=f"{final_name} holdout", output_dir=output_dir,
        )
        plot_model_comparison(table, output_dir=output_dir)
        plt.close('all')  # Close all figures to free memory

    return PipelineResult(
        table=table,
        split=split,
        models=models,
        failures=failures,
        final_model=final_model,
        train_results=train_results,
        holdout_result=holdout_result,
        summary=summary,
    )


def build_metrics(result):
    """JSON-friendly summary of a pipeline run."""
    best_train = min(result.train_results, key=lambda r: r.rmse)
    final = result.final_model
    return {
        'n_rows': result.summary['n_rows'],
        'n_train': len(result.split.train),
        'n_holdout': len(result.split.holdout),
        'seed': result.split.seed,
        'holdout_fraction': result.split.holdout_fraction,
        'train_rmse': {r.model: r.rmse for r in result.train_results},
        'best_train_model': best_train.model,
        'final_model': final.name,
        'holdout_rmse': result.holdout_result.rmse,
        'ridge_alpha': final.alpha,
        'ridge_cv_rmse': final.cv.best_cv_rmse,
        'ridge_coefficients': dict(zip(('(Intercept)',) + final.features,
                                       (final.intercept,) + final.coefficients)),
        'failed_models': {name: str(e) for name, e in result.failures.items()},
        'correlations': result.summary['correlations'],
    }


def main(data_path=None, url=None, seed=None, holdout_fraction=None, n_folds=None,
         make_plots=True):
    """Run the full pipeline and save its outputs."""
    print("="*60)
    print("Total Goals Regression")
    print("="*60)

    print("\nLoading match data...")
    df = load_matches(path=data_path, url=url)

    result = run_pipeline(
        df, holdout_fraction=holdout_fraction, seed=seed, n_folds=n_folds,
        make_plots=make_plots,
    )

    print("\nFinal model coefficients:")
    print(get_coefficients(result.final_model).to_string(index=False))

    print("\nSaving outputs...")
    save_model(result.final_model)
    save_results_table(result.table)
    save_metrics(build_metrics(result))

    print("\n" + "="*60)
    print("Results")
    print("="*60)
    print(result.table.to_string(index=False, float_format=lambda v: f"{v:.4f}"))
    if result.failures:
        print(f"\nModels that failed to fit: {', '.join(result.failures)}")
    print(f"\nOutputs saved to: {OUTPUT_DIR}")

    return result


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Total goals linear regression')
    parser.add_argument('--data', default=None,
                        help='Path to matches CSV (default: cached download)')
    parser.add_argument('--url', default=None,
                        help='URL to download the CSV from if it is not cached')
    parser.add_argument('--seed', type=int, default=RANDOM_SEED,
                        help=f'Random seed for split and CV folds (default: {RANDOM_SEED})')
    parser.add_argument('--holdout', type=float, default=HOLDOUT_FRACTION,
                        help=f'Holdout fraction (default: {HOLDOUT_FRACTION})')
    parser.add_argument('--folds', type=int, default=CV_FOLDS,
                        help=f'Cross-validation folds for ridge (default: {CV_FOLDS})')
    parser.add_argument('--no-plots', action='store_true',
                        help='Skip diagnostic plots')
    args = parser.parse_args()

    main(
        data_path=args.data,
        url=args.url,
        seed=args.seed,
        holdout_fraction=args.holdout,
        n_folds=args.folds,
        make_plots=not args.no_plots,
    )
