"""End-to-end tests for the command-line scripts.

Tests the full cycle from a CSV file on disk through fitting to printed
recommendations, calling the scripts' main() functions directly.
"""

import random
import sys
from pathlib import Path

import pandas as pd
import pytest

# Add scripts directory to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "scripts"))

import predict_cli  # noqa: E402
import train_model  # noqa: E402


@pytest.fixture(scope="module")
def ratings_csv(tmp_path_factory) -> Path:
    """Write synthetic ratings for 20 users and 30 items to a CSV file."""
    random.seed(42)

    rows = []
    for _ in range(200):
        rows.append({
            "user_id": random.randint(1, 20),
            "item_id": f"item_{random.randint(1, 30)}",
            "rating": random.randint(1, 5),
        })

    csv_path = tmp_path_factory.mktemp("scripts") / "ratings.csv"
    pd.DataFrame(rows).to_csv(csv_path, index=False)
    return csv_path


def test_train_model(ratings_csv):
    assert train_model.main([str(ratings_csv), "--epochs", "3"]) == 0


def test_train_model_with_holdout(ratings_csv):
    assert train_model.main([str(ratings_csv), "--epochs", "3", "--holdout", "0.2"]) == 0


def test_train_model_implicit(ratings_csv):
    assert train_model.main([str(ratings_csv), "--epochs", "3", "--implicit"]) == 0


def test_train_model_missing_file(tmp_path):
    assert train_model.main([str(tmp_path / "missing.csv")]) == 1


def test_split_records():
    records = [{"user_id": i, "item_id": i} for i in range(10)]

    train_set, validation_set = train_model.split_records(records, 0.3, random_state=0)

    assert len(train_set) == 7
    assert len(validation_set) == 3
    assert sorted(r["user_id"] for r in train_set + validation_set) == list(range(10))
    assert train_model.split_records(records, 0.0, random_state=0)[1] is None


def test_predict_cli_user(ratings_csv, capsys):
    assert predict_cli.main(["1", "--csv", str(ratings_csv), "--count", "3"]) == 0

    out = capsys.readouterr().out
    assert "Results for 1 (mode: user)" in out
    assert "item_" in out


def test_predict_cli_item(ratings_csv, capsys):
    assert predict_cli.main(["item_1", "--csv", str(ratings_csv), "--mode", "item"]) == 0

    out = capsys.readouterr().out
    assert "Results for 'item_1' (mode: item)" in out


def test_predict_cli_unknown_user(ratings_csv, capsys):
    assert predict_cli.main(["999", "--csv", str(ratings_csv)]) == 0

    assert "(none" in capsys.readouterr().out


def test_parse_id():
    assert predict_cli.parse_id("42") == 42
    assert predict_cli.parse_id("Star Wars (1977)") == "Star Wars (1977)"
