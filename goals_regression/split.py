"""
Stratified train/holdout split on the target distribution.
"""
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from .config import TARGET, HOLDOUT_FRACTION, RANDOM_SEED
from .errors import ConfigurationError


@dataclass(frozen=True)
class Split:
    """Disjoint training and holdout partitions of one dataset."""

    train: pd.DataFrame
    holdout: pd.DataFrame
    seed: Optional[int]
    holdout_fraction: float


def holdout_counts(group_sizes, holdout_fraction):
    """
    Number of holdout rows to draw from each target group.

    The overall holdout size is p * N rounded half up. Every group first
    gets floor(p * n_g) rows; the slots left over go to the groups with
    the largest fractional remainders, ties broken by group order. A group
    never gives up more than ceil(p * n_g) rows, so groups smaller than
    1 / p contribute at most one row.

    Args:
        group_sizes: Row count of each group, in a fixed order
        holdout_fraction: p, the share of rows to hold out

    Returns:
        np.ndarray of per-group holdout counts
    """
    sizes = np.asarray(group_sizes, dtype=int)
    quotas = holdout_fraction * sizes
    counts = np.floor(quotas).astype(int)

    total = int(np.floor(holdout_fraction * sizes.sum() + 0.5))
    leftover = total - counts.sum()

    remainders = quotas - counts
    # Stable sort keeps group order among equal remainders
    order = np.argsort(-remainders, kind='stable')
    counts[order[:leftover]] += 1

    return counts


def stratified_split(df, target=TARGET, holdout_fraction=None, seed=None, rng=None):
    """
    Split rows into training and holdout sets, stratified by target value.

    Rows are grouped by their exact target value (total goals is a small
    integer) and each group is sampled separately, so the holdout keeps the
    target's distribution. Sampling uses ``rng`` when given, otherwise a
    fresh generator seeded with ``seed``; the same data in the same order
    always gives the same split.

    Args:
        df: Working dataset
        target: Column to stratify on
        holdout_fraction: Share of rows to hold out (default: 0.10)
        seed: Seed for the sampling generator (default: 1)
        rng: Optional numpy Generator, overrides ``seed``

    Returns:
        Split with both partitions in the original row order
    """
    if holdout_fraction is None:
        holdout_fraction = HOLDOUT_FRACTION
    if rng is None:
        if seed is None:
            seed = RANDOM_SEED
        rng = np.random.default_rng(seed)

    if not 0 < holdout_fraction < 1:
        raise ConfigurationError(f"holdout_fraction must be in (0, 1), got {holdout_fraction}")
    if target not in df.columns:
        raise ConfigurationError(f"Target column '{target}' not in dataset")
    if len(df) == 0:
        raise ConfigurationError("Cannot split an empty dataset")

    df = df.reset_index(drop=True)
    groups = [
        np.flatnonzero(df[target].to_numpy() == value)
        for value in np.sort(df[target].unique())
    ]
    counts = holdout_counts([len(g) for g in groups], holdout_fraction)

    holdout_idx = []
    for rows, n_holdout in zip(groups, counts):
        if n_holdout:
            holdout_idx.extend(rng.permutation(rows)[:n_holdout])

    is_holdout = np.zeros(len(df), dtype=bool)
    is_holdout[holdout_idx] = True

    if is_holdout.all() or not is_holdout.any():
        raise ConfigurationError(
            f"Split of {len(df)} rows at p={holdout_fraction} leaves a partition empty"
        )

    df_train = df[~is_holdout].copy()
    df_holdout = df[is_holdout].copy()

    print(f"Stratified split on {target} (p={holdout_fraction}, seed={seed}):")
    print(f"  Train:   {len(df_train)} rows (mean {target} {df_train[target].mean():.3f})")
    print(f"  Holdout: {len(df_holdout)} rows (mean {target} {df_holdout[target].mean():.3f})")

    return Split(
        train=df_train,
        holdout=df_holdout,
        seed=seed,
        holdout_fraction=holdout_fraction,
    )
