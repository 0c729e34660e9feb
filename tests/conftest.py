import numpy as np
import pandas as pd
import pytest


def make_matches(n=100, seed=0, noise=0.5):
    """
    Synthetic FBref-style team-match rows.

    Total goals follow TG = 2 * xG + Sh + noise (rounded, floored at 0),
    split between GF and GA.
    """
    rng = np.random.default_rng(seed)
    xg = rng.uniform(0.1, 2.5, n).round(1)
    xga = rng.uniform(0.1, 2.5, n).round(1)
    sh = rng.integers(0, 6, n)
    sot = np.array([rng.integers(0, s + 1) for s in sh])
    tg = np.clip(np.rint(2 * xg + sh + rng.normal(0, noise, n)), 0, None).astype(int)
    gf = rng.integers(0, tg + 1)

    return pd.DataFrame({
        'Round': [f"Matchweek {i % 38 + 1}" for i in range(n)],
        'Venue': np.where(np.arange(n) % 2 == 0, 'Home', 'Away'),
        'Result': np.where(gf > tg - gf, 'W', np.where(gf == tg - gf, 'D', 'L')),
        'GF': gf,
        'GA': tg - gf,
        'Opponent': [f"Team {i % 20}" for i in range(n)],
        'xG': xg,
        'xGA': xga,
        'Poss': rng.integers(30, 71, n),
        'Sh': sh,
        'SoT': sot,
        'FK': rng.integers(0, 3, n),
        'PKatt': rng.integers(0, 2, n),
        'Team': [f"Team {(i + 7) % 20}" for i in range(n)],
        'Attendance': rng.integers(10000, 60000, n),
    })


@pytest.fixture
def raw_matches() -> pd.DataFrame:
    """100 synthetic match rows with canonical column names."""
    return make_matches()


@pytest.fixture
def linear_frame() -> pd.DataFrame:
    """Rows where TG is an exact linear function of xG and Sh."""
    rng = np.random.default_rng(42)
    n = 60
    df = pd.DataFrame({
        'xG': rng.uniform(0, 3, n),
        'Sh': rng.integers(0, 20, n).astype(float),
        'SoT': rng.integers(0, 8, n).astype(float),
    })
    df['TG'] = 1.5 + 2.0 * df['xG'] - 0.25 * df['Sh']
    return df
