"""
Feature derivation for the total goals model.

Each row is a single team-match entry, so totals are built from the
team's own and conceded numbers:
- TG  = GF + GA   (total goals, the target)
- TxG = xG + xGA  (total expected goals)

Totals are always recomputed here, never read from the source file.
"""
import numpy as np
import pandas as pd

from .config import (
    REQUIRED_COLUMNS, COUNT_COLUMNS, CONTEXT_COLUMNS, WORKING_COLUMNS, TARGET
)
from .errors import DataQualityError


def validate_matches(df):
    """
    Check raw match rows before any totals are derived.

    Checks:
    - All required source columns are present
    - No missing values in the required columns
    - Required columns are numeric and finite
    - Counts (goals, shots, set pieces) are non-negative whole numbers
    - Expected goals are non-negative
    - Shots on target never exceed shots

    Raises:
        DataQualityError: Describing every failed check
    """
    missing_cols = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing_cols:
        raise DataQualityError(f"Missing required columns: {missing_cols}")

    if len(df) == 0:
        raise DataQualityError("Dataset is empty")

    null_counts = df[REQUIRED_COLUMNS].isnull().sum()
    null_counts = null_counts[null_counts > 0]
    if len(null_counts):
        raise DataQualityError(f"Missing values: {null_counts.to_dict()}")

    non_numeric = [
        c for c in REQUIRED_COLUMNS
        if not pd.api.types.is_numeric_dtype(df[c])
    ]
    if non_numeric:
        raise DataQualityError(f"Non-numeric values in columns: {non_numeric}")

    non_finite = [
        c for c in REQUIRED_COLUMNS
        if not np.isfinite(df[c].to_numpy(dtype=float)).all()
    ]
    if non_finite:
        raise DataQualityError(f"Non-finite values in columns: {non_finite}")

    errors = []
    for col in COUNT_COLUMNS:
        values = df[col]
        if (values < 0).any():
            errors.append(f"Negative values in {col}")
        if ((values % 1).abs() > 1e-9).any():
            errors.append(f"Non-integer counts in {col}")

    for col in ['xG', 'xGA']:
        if (df[col] < 0).any():
            errors.append(f"Negative values in {col}")

    bad_sot = df['SoT'] > df['Sh']
    if bad_sot.any():
        rows = df.index[bad_sot].tolist()[:10]
        errors.append(f"SoT > Sh in {int(bad_sot.sum())} rows (e.g. {rows})")

    if errors:
        raise DataQualityError("; ".join(errors))


def derive_features(df):
    """
    Validate raw rows, add TG and TxG, and keep only the working columns.

    Context columns (Round, Venue, ...) are kept when the source has them.

    Args:
        df: Raw match rows with canonical column names

    Returns:
        pd.DataFrame: New frame with the working column set

    Raises:
        DataQualityError: If validation fails
    """
    validate_matches(df)

    df = df.copy()
    for col in COUNT_COLUMNS:
        df[col] = df[col].astype(int)
    for col in ['xG', 'xGA']:
        df[col] = df[col].astype(float)

    df['TG'] = df['GF'] + df['GA']
    df['TxG'] = df['xG'] + df['xGA']

    columns = [c for c in WORKING_COLUMNS if c in df.columns]
    return df[columns].reset_index(drop=True)


def describe_dataset(df, target=TARGET):
    """
    Summarise the working dataset.

    Returns:
        dict with row count, target distribution and the correlation of
        each numeric feature with the target
    """
    numeric = [
        c for c in df.columns
        if c != target and c not in CONTEXT_COLUMNS
        and pd.api.types.is_numeric_dtype(df[c])
    ]
    correlations = df[numeric].corrwith(df[target]).sort_values(ascending=False)

    summary = {
        'n_rows': len(df),
        'target_mean': float(df[target].mean()),
        'target_std': float(df[target].std()),
        'target_counts': {int(k): int(v) for k, v in df[target].value_counts().sort_index().items()},
        'correlations': {k: float(v) for k, v in correlations.items() if np.isfinite(v)},
    }

    print(f"Rows: {summary['n_rows']}")
    print(f"{target}: mean {summary['target_mean']:.3f}, sd {summary['target_std']:.3f}")
    print(f"Correlation with {target}:")
    for col, r in summary['correlations'].items():
        print(f"  {col:<6} {r:+.3f}")

    return summary
