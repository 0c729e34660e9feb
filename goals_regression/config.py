"""
Configuration constants for the total goals regression.
"""
from pathlib import Path

import numpy as np

# FBref Premier League match logs (one row per team per match)
DATA_URL = (
    "https://raw.githubusercontent.com/dataquestio/project-walkthroughs/"
    "master/football_matches/matches.csv"
)
DATA_FILENAME = "matches.csv"

# Target
TARGET = 'TG'

# Train/holdout split
HOLDOUT_FRACTION = 0.10
RANDOM_SEED = 1

# Ridge cross-validation
CV_FOLDS = 10
# Penalty on standardized features; sklearn's Ridge scales with the
# residual sum of squares, so the grid reaches well past n_samples
RIDGE_ALPHAS = np.logspace(-3, 5, 81)
RIDGE_FEATURES = ['xG', 'xGA', 'Sh', 'SoT']

# Source columns required to derive the working set
REQUIRED_COLUMNS = ['GF', 'GA', 'xG', 'xGA', 'Sh', 'SoT', 'FK', 'PKatt']
COUNT_COLUMNS = ['GF', 'GA', 'Sh', 'SoT', 'FK', 'PKatt']
CONTEXT_COLUMNS = ['Round', 'Venue', 'Result', 'Opponent', 'Team', 'Poss']

WORKING_COLUMNS = [
    'TG', 'GF', 'GA',
    'TxG', 'xG', 'xGA',
    'Sh', 'SoT', 'FK', 'PKatt',
] + CONTEXT_COLUMNS

# FBref exports use lowercase headers
COLUMN_ALIASES = {
    'gf': 'GF',
    'ga': 'GA',
    'xg': 'xG',
    'xga': 'xGA',
    'sh': 'Sh',
    'sot': 'SoT',
    'fk': 'FK',
    'pkatt': 'PKatt',
    'round': 'Round',
    'venue': 'Venue',
    'result': 'Result',
    'opponent': 'Opponent',
    'team': 'Team',
    'poss': 'Poss',
}

# Candidate models, in reporting order: (name, kind, features)
# An empty feature list is the global average (intercept only)
MODEL_SPECS = [
    ('Global Average', 'ols', []),
    ('Total xG', 'ols', ['TxG']),
    ('xG + xGA', 'ols', ['xG', 'xGA']),
    ('Shots', 'ols', ['Sh', 'SoT']),
    ('xG + Shots + Set Pieces', 'ols', ['xG', 'xGA', 'Sh', 'SoT', 'FK', 'PKatt']),
    ('Ridge (CV)', 'ridge', RIDGE_FEATURES),
]

# Directories
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = BASE_DIR / "data"
OUTPUT_DIR = BASE_DIR / "output"
MODEL_DIR = BASE_DIR / "models"

# Ensure directories exist
DATA_DIR.mkdir(exist_ok=True)
OUTPUT_DIR.mkdir(exist_ok=True)
MODEL_DIR.mkdir(exist_ok=True)
