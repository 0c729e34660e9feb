"""
Data loading and caching for the FBref match logs.
"""
import urllib.error
import urllib.request
from pathlib import Path

import pandas as pd

from .config import DATA_URL, DATA_FILENAME, DATA_DIR, COLUMN_ALIASES
from .errors import AcquisitionError, DataQualityError


def load_matches(path=None, url=None, use_cache=True):
    """
    Load team-match rows, downloading the CSV on first use.

    The file is cached under ``data/`` so later runs read it locally.

    Args:
        path: Local CSV path. Defaults to the cached copy in DATA_DIR.
        url: Remote location used when the file is absent (default: DATA_URL)
        use_cache: If False, always re-download

    Returns:
        pd.DataFrame: Raw match rows with canonical column names

    Raises:
        AcquisitionError: If the file is missing and cannot be downloaded,
            or cannot be read
        DataQualityError: If the file has malformed rows
    """
    cache_path = DATA_DIR / DATA_FILENAME if path is None else Path(path)
    url = DATA_URL if url is None else url

    if use_cache and cache_path.exists():
        print("Loading matches from cache...")
    else:
        download_matches(url, cache_path)

    try:
        df = pd.read_csv(cache_path)
    except pd.errors.ParserError as e:
        raise DataQualityError(f"Malformed rows in {cache_path}: {e}") from e
    except (OSError, pd.errors.EmptyDataError) as e:
        raise AcquisitionError(f"Could not read {cache_path}: {e}") from e

    df = normalize_columns(df)
    print(f"Loaded {len(df)} match rows")
    return df


def download_matches(url, dest):
    """Fetch the CSV at ``url`` into ``dest``."""
    print(f"Downloading matches from {url}...")
    try:
        urllib.request.urlretrieve(url, dest)
    except (urllib.error.URLError, OSError) as e:
        Path(dest).unlink(missing_ok=True)
        raise AcquisitionError(f"Could not download {url}: {e}") from e
    print(f"Cached to {dest}")
    return dest


def normalize_columns(df):
    """Map lowercase FBref headers onto the canonical column names."""
    renames = {
        col: COLUMN_ALIASES[col]
        for col in df.columns
        if col in COLUMN_ALIASES and COLUMN_ALIASES[col] not in df.columns
    }
    return df.rename(columns=renames)
