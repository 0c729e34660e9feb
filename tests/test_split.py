import numpy as np
import pandas as pd
import pytest

from goals_regression.errors import ConfigurationError
from goals_regression.features import derive_features
from goals_regression.split import holdout_counts, stratified_split


@pytest.fixture
def matches(raw_matches) -> pd.DataFrame:
    return derive_features(raw_matches)


# ---------------------------------------------------------------------------
# Rounding rule
# ---------------------------------------------------------------------------


def test_holdout_counts_floor_then_largest_remainder():
    """Floors first, leftover slots to the largest remainders."""
    # quotas 2.3, 1.8, 0.4, 0.5 -> floors 2, 1, 0, 0; total round(5.0) = 5
    counts = holdout_counts([23, 18, 4, 5], 0.1)
    assert counts.tolist() == [2, 2, 0, 1]


def test_holdout_counts_ties_go_to_earlier_groups():
    counts = holdout_counts([5, 5, 5, 5], 0.1)
    assert counts.tolist() == [1, 1, 0, 0]


def test_small_groups_give_at_most_one_row():
    """Groups smaller than 1/p contribute zero or one row."""
    sizes = [1, 2, 3, 4, 5, 6, 7, 8, 9]
    counts = holdout_counts(sizes, 0.1)
    assert counts.max() <= 1
    assert counts.sum() == int(np.floor(0.1 * sum(sizes) + 0.5))


def test_holdout_counts_total_rounds_half_up():
    assert holdout_counts([25], 0.1).tolist() == [3]
    assert holdout_counts([24], 0.1).tolist() == [2]


# ---------------------------------------------------------------------------
# Split
# ---------------------------------------------------------------------------


def test_split_sizes(matches):
    """100 rows at p=0.10 give exactly 90 training and 10 holdout rows."""
    split = stratified_split(matches, holdout_fraction=0.10, seed=1)

    assert len(split.train) == 90
    assert len(split.holdout) == 10


def test_partitions_are_disjoint_and_cover_all_rows(matches):
    split = stratified_split(matches, seed=1)

    train_idx = set(split.train.index)
    holdout_idx = set(split.holdout.index)

    assert not (train_idx & holdout_idx)
    assert train_idx | holdout_idx == set(range(len(matches)))
    assert len(split.train) + len(split.holdout) == len(matches)


def test_split_is_reproducible(matches):
    """Same seed, same rows -> identical partitions."""
    a = stratified_split(matches, seed=1)
    b = stratified_split(matches, seed=1)

    pd.testing.assert_frame_equal(a.train, b.train)
    pd.testing.assert_frame_equal(a.holdout, b.holdout)


def test_injected_generator_matches_seed(matches):
    a = stratified_split(matches, seed=5)
    b = stratified_split(matches, rng=np.random.default_rng(5))

    pd.testing.assert_frame_equal(a.holdout, b.holdout)
    assert b.seed is None


def test_different_seeds_differ(matches):
    a = stratified_split(matches, seed=1)
    b = stratified_split(matches, seed=2)

    assert list(a.holdout.index) != list(b.holdout.index)


def test_holdout_follows_target_distribution(matches):
    """Each TG value is held out in proportion to its frequency."""
    split = stratified_split(matches, seed=1)

    values = np.sort(matches["TG"].unique())
    sizes = [int((matches["TG"] == v).sum()) for v in values]
    expected = dict(zip(values, holdout_counts(sizes, 0.1)))

    observed = split.holdout["TG"].value_counts()
    for value, count in expected.items():
        assert observed.get(value, 0) == count


def test_partitions_keep_row_order(matches):
    split = stratified_split(matches, seed=1)

    assert split.train.index.is_monotonic_increasing
    assert split.holdout.index.is_monotonic_increasing


def test_split_is_frozen(matches):
    split = stratified_split(matches, seed=1)

    with pytest.raises(AttributeError):
        split.holdout = split.train


@pytest.mark.parametrize("p", [0.0, 1.0, -0.1, 1.5])
def test_invalid_fraction_rejected(matches, p):
    with pytest.raises(ConfigurationError):
        stratified_split(matches, holdout_fraction=p)


def test_too_few_rows_rejected(matches):
    """Three rows at p=0.1 would leave the holdout empty."""
    with pytest.raises(ConfigurationError, match="empty"):
        stratified_split(matches.head(3), holdout_fraction=0.1)


def test_missing_target_rejected(matches):
    with pytest.raises(ConfigurationError, match="Target"):
        stratified_split(matches.drop(columns=["TG"]))
