"""Dataset loaders.

This module provides the MovieLens 100k loader used in examples and tests,
and a CSV loader for local interaction data. Both return plain interaction
records ready for Recommender.fit().
"""

import csv
import hashlib
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd
import requests

from latentrec.recommender.dataset import ITEM_FIELD, RATING_FIELD, USER_FIELD, as_records
from latentrec.recommender.exceptions import ChecksumError

# Configure module logger
logger = logging.getLogger(__name__)

# Cache location, overridable through the environment
CACHE_DIR_ENV = "LATENTREC_DATA_HOME"
DEFAULT_CACHE_DIR = Path.home() / ".latentrec"
DOWNLOAD_TIMEOUT = 60

MOVIELENS_BASE_URL = "https://files.grouplens.org/datasets/movielens"
MOVIELENS_FILES = {
    "ml-100k/u.item": "553841ebc7de3a0fd0d6b62a204ea30c1e651aacfb2814c7a6584ac52f2c5701",
    "ml-100k/u.data": "06416e597f82b7342361e41163890c81036900f418ad91315590814211dca490",
}
# u.item is ISO-8859-1 encoded
MOVIELENS_ITEM_ENCODING = "latin-1"


def get_cache_dir(cache_dir: Optional[str] = None) -> Path:
    if cache_dir is not None:
        return Path(cache_dir)
    env_dir = os.environ.get(CACHE_DIR_ENV)
    return Path(env_dir) if env_dir else DEFAULT_CACHE_DIR


def download_file(
    filename: str,
    url: str,
    sha256: str,
    cache_dir: Optional[str] = None,
) -> Path:
    """Download a file into the cache unless it is already there.

    Args:
        filename: Path of the file relative to the cache directory.
        url: Where to fetch it from.
        sha256: Expected hex digest of the payload.
        cache_dir: Cache directory (default: ~/.latentrec or $LATENTREC_DATA_HOME).

    Returns:
        Path of the cached file.

    Raises:
        ChecksumError: If the payload does not match the expected digest.
        requests.HTTPError: If the server answers with an error status.
    """
    dest = get_cache_dir(cache_dir) / filename
    if dest.exists():
        logger.debug(f"Using cached {dest}")
        return dest

    dest.parent.mkdir(parents=True, exist_ok=True)

    logger.info(f"Downloading data from {url}")
    response = requests.get(url, timeout=DOWNLOAD_TIMEOUT)
    response.raise_for_status()
    contents = response.content

    checksum = hashlib.sha256(contents).hexdigest()
    if checksum != sha256:
        raise ChecksumError(url, checksum)

    # a partial file must never sit at dest, the cache check trusts it
    partial = dest.with_name(dest.name + ".part")
    partial.write_bytes(contents)
    partial.replace(dest)
    logger.info(f"Saved {dest}")

    return dest


def load_movielens(cache_dir: Optional[str] = None) -> List[Dict]:
    """Load the MovieLens 100k ratings with movie titles as item ids.

    Returns:
        Records of the form {"user_id": int, "item_id": str, "rating": int}
        in file order.

    Example:
        >>> data = load_movielens()
        >>> len(data)
        100000
    """
    paths = {
        filename: download_file(
            filename,
            f"{MOVIELENS_BASE_URL}/{filename}",
            sha256,
            cache_dir=cache_dir,
        )
        for filename, sha256 in MOVIELENS_FILES.items()
    }

    movies = pd.read_csv(
        paths["ml-100k/u.item"],
        sep="|",
        header=None,
        usecols=[0, 1],
        names=["movie_id", "title"],
        encoding=MOVIELENS_ITEM_ENCODING,
        quoting=csv.QUOTE_NONE,
    )
    titles = dict(zip(movies["movie_id"].tolist(), movies["title"].tolist()))

    ratings = pd.read_csv(
        paths["ml-100k/u.data"],
        sep="\t",
        header=None,
        names=["user_id", "movie_id", "rating", "timestamp"],
    )

    records = [
        {USER_FIELD: user_id, ITEM_FIELD: titles[movie_id], RATING_FIELD: rating}
        for user_id, movie_id, rating in zip(
            ratings["user_id"].tolist(),
            ratings["movie_id"].tolist(),
            ratings["rating"].tolist(),
        )
    ]
    logger.info(f"Loaded {len(records)} MovieLens ratings for {len(titles)} movies")
    return records


def load_csv_records(
    csv_path: str,
    user_col: str = USER_FIELD,
    item_col: str = ITEM_FIELD,
    rating_col: Optional[str] = RATING_FIELD,
) -> List[Dict]:
    """Load interaction records from a CSV file.

    Args:
        csv_path: Path to CSV file containing interaction data.
        user_col: Name of the column containing user identifiers.
        item_col: Name of the column containing item identifiers.
        rating_col: Name of the rating column. If None, or if the file has no
            such column, the records are implicit.

    Returns:
        Interaction records keyed by user_id, item_id and (explicit only)
        rating.

    Raises:
        FileNotFoundError: If CSV file does not exist.
        ValueError: If CSV is missing required columns or is empty.
    """
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    logger.info(f"Loading CSV from {csv_path}")
    df = pd.read_csv(csv_path)

    required_columns = {user_col, item_col}
    if not required_columns.issubset(df.columns):
        missing = required_columns - set(df.columns)
        raise ValueError(f"CSV missing required columns: {missing}")

    if df.empty:
        raise ValueError("Cannot load records from empty CSV")

    columns = {user_col: USER_FIELD, item_col: ITEM_FIELD}
    if rating_col is not None and rating_col in df.columns:
        columns[rating_col] = RATING_FIELD
    else:
        logger.info("No rating column, loading implicit feedback")

    # rows with an empty rating cell come back without the key
    records = list(as_records(df[list(columns)].rename(columns=columns)))
    logger.info(f"Loaded {len(records)} interaction records")
    return records
