"""CLI script for querying recommendations.

Models are not persisted, so the script fits on the given data first and then
prints the requested recommendations to the console. Useful for testing and
eyeballing results.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from latentrec.recommender import (
    Recommender,
    RecommenderError,
    load_csv_records,
    load_movielens,
)
from latentrec.recommender.config import DEFAULT_FACTORS

# Setup logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)


def parse_id(value: str):
    """Ids given on the command line are ints when they look like ints."""
    try:
        return int(value)
    except ValueError:
        return value


def run_query(recommender: Recommender, mode: str, entity_id, count) -> List[dict]:
    if mode == "user":
        return recommender.user_recs(entity_id, count)
    if mode == "item":
        return recommender.item_recs(entity_id, count)
    return recommender.similar_users(entity_id, count)


def main(argv=None) -> int:
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Fit a recommender and print recommendations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/predict_cli.py 42 --csv data/ratings.csv
  python scripts/predict_cli.py 42 --movielens --count 10
  python scripts/predict_cli.py "Star Wars (1977)" --movielens --mode item
  python scripts/predict_cli.py 1 --movielens --mode similar-users
        """
    )

    parser.add_argument(
        "entity_id",
        type=parse_id,
        help="User id (modes user, similar-users) or item id (mode item)"
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--csv", type=str, help="CSV file with interactions")
    source.add_argument("--movielens", action="store_true", help="Use MovieLens 100k")

    parser.add_argument(
        "--mode",
        type=str,
        choices=["user", "item", "similar-users"],
        default="user",
        help="Query to run (default: user)"
    )

    parser.add_argument(
        "--count",
        type=int,
        default=5,
        help="Number of results, 0 or less for all (default: 5)"
    )

    parser.add_argument(
        "--factors",
        type=int,
        default=DEFAULT_FACTORS,
        help=f"Number of latent factors (default: {DEFAULT_FACTORS})"
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    count = args.count if args.count > 0 else None

    try:
        records = load_movielens() if args.movielens else load_csv_records(args.csv)
        recommender = Recommender(factors=args.factors).fit(records)
        results = run_query(recommender, args.mode, args.entity_id, count)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except RecommenderError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    key = "user_id" if args.mode == "similar-users" else "item_id"
    print(f"\nResults for {args.entity_id!r} (mode: {args.mode}):")
    if not results:
        print("  (none, unknown id or nothing left to recommend)")
    for rank, result in enumerate(results, start=1):
        print(f"  {rank:>3}. {result[key]!r}  score={result['score']:.4f}")
    print()

    return 0


if __name__ == "__main__":
    sys.exit(main())
