"""Command-line interface for fitting a latentrec recommender.

Fits a model on a CSV file of interactions (or on MovieLens 100k) and prints
a training summary. With --holdout, part of the data is kept aside as a
validation set and scored after training.

Example:
    Fit on a CSV file with default settings:
        $ python scripts/train_model.py data/ratings.csv

    Fit on MovieLens with a 20% validation split:
        $ python scripts/train_model.py --movielens \\
            --factors 20 \\
            --holdout 0.2
"""

import argparse
import logging
import random
import sys
from pathlib import Path

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from latentrec.recommender import (
    Recommender,
    RecommenderError,
    load_csv_records,
    load_movielens,
    rmse,
)
from latentrec.recommender.config import DEFAULT_EPOCHS, DEFAULT_FACTORS
from latentrec.recommender.factorization import DEFAULT_RANDOM_STATE


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the script.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise, use INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Namespace object containing parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Fit a latent factor recommender on interaction data.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fit on a CSV file with user_id,item_id[,rating] columns
  python scripts/train_model.py data/ratings.csv

  # Fit on MovieLens 100k and report validation RMSE
  python scripts/train_model.py --movielens --factors 20 --holdout 0.2
        """,
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "csv_path",
        type=str,
        nargs="?",
        help="Path to CSV file with columns user_id, item_id and optionally rating",
    )
    source.add_argument(
        "--movielens",
        action="store_true",
        help="Use the MovieLens 100k ratings (downloaded and cached on first use)",
    )

    parser.add_argument(
        "--factors",
        type=int,
        default=DEFAULT_FACTORS,
        help=f"Number of latent factors (default: {DEFAULT_FACTORS})",
    )
    parser.add_argument(
        "--epochs",
        type=int,
        default=DEFAULT_EPOCHS,
        help=f"Number of training epochs (default: {DEFAULT_EPOCHS})",
    )
    parser.add_argument(
        "--holdout",
        type=float,
        default=0.0,
        help="Fraction of records held out as validation set (default: 0)",
    )
    parser.add_argument(
        "--implicit",
        action="store_true",
        help="Drop ratings and fit on implicit feedback",
    )
    parser.add_argument(
        "--random-state",
        type=int,
        default=DEFAULT_RANDOM_STATE,
        help=f"Random seed for the split and the solver (default: {DEFAULT_RANDOM_STATE})",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )

    args = parser.parse_args(argv)
    if not 0.0 <= args.holdout < 1.0:
        parser.error("--holdout must be in [0, 1)")
    return args


def split_records(records, holdout: float, random_state: int):
    """Shuffle records and split off the last `holdout` fraction."""
    records = list(records)
    random.Random(random_state).shuffle(records)
    n_valid = int(len(records) * holdout)
    if n_valid == 0:
        return records, None
    return records[:-n_valid], records[-n_valid:]


def main(argv=None) -> int:
    """Main entry point for the training script.

    Returns:
        Exit code: 0 on success, 1 on error.
    """
    try:
        args = parse_arguments(argv)

        setup_logging(verbose=args.verbose)
        logger = logging.getLogger(__name__)

        records = load_movielens() if args.movielens else load_csv_records(args.csv_path)
        if args.implicit:
            records = [{k: v for k, v in r.items() if k != "rating"} for r in records]

        train_set, validation_set = split_records(records, args.holdout, args.random_state)

        logger.info("=" * 70)
        logger.info("Training Configuration")
        logger.info("=" * 70)
        logger.info(f"Source:           {'MovieLens 100k' if args.movielens else args.csv_path}")
        logger.info(f"Train records:    {len(train_set)}")
        logger.info(f"Valid records:    {len(validation_set) if validation_set else 0}")
        logger.info(f"Factors:          {args.factors}")
        logger.info(f"Epochs:           {args.epochs}")
        logger.info("=" * 70)

        recommender = Recommender(
            factors=args.factors,
            epochs=args.epochs,
            random_state=args.random_state,
        )
        recommender.fit(train_set, validation_set)

        logger.info("=" * 70)
        logger.info("Training Summary")
        logger.info("=" * 70)
        logger.info(f"Feedback:         {'implicit' if recommender.implicit else 'explicit'}")
        logger.info(f"Number of users:  {len(recommender.user_ids())}")
        logger.info(f"Number of items:  {len(recommender.item_ids())}")
        logger.info(f"Global mean:      {recommender.global_mean():.4f}")
        if validation_set and not recommender.implicit:
            predictions = recommender.predict(validation_set)
            actual = [r["rating"] for r in validation_set]
            logger.info(f"Validation RMSE:  {rmse(actual, predictions):.4f}")
        logger.info("=" * 70)

        return 0

    except FileNotFoundError as e:
        logging.error(f"File error: {e}")
        return 1
    except (ValueError, RecommenderError) as e:
        logging.error(f"Validation error: {e}")
        return 1
    except KeyboardInterrupt:
        logging.warning("Training interrupted by user")
        return 130
    except Exception as e:
        logging.error(f"Unexpected error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
