"""Pytest fixtures for ChiMerge tests."""

import numpy as np
import pytest


@pytest.fixture
def two_runs_rows():
    """Values 1-4 are all class 'a', values 5-8 all class 'b'."""
    return [(float(v), "a") for v in range(1, 5)] + [(float(v), "b") for v in range(5, 9)]


@pytest.fixture
def separated_rows():
    """Three values, five examples each, alternating classes."""
    rows = []
    for value, label in [(1.0, "a"), (2.0, "b"), (3.0, "a")]:
        rows.extend([(value, label)] * 5)
    return rows


@pytest.fixture
def random_rows():
    """Noisy three-class data with repeated values, two attributes."""
    rng = np.random.RandomState(42)
    labels = rng.choice(["setosa", "versicolor", "virginica"], 150)
    offsets = {"setosa": 0.0, "versicolor": 1.5, "virginica": 3.0}
    rows = []
    for label in labels:
        first = round(offsets[label] + rng.normal(0, 0.8), 1)
        second = round(rng.uniform(0, 5), 1)
        rows.append((first, second, label))
    return rows


@pytest.fixture
def iris_like_csv(tmp_path):
    """Header-less CSV in the IRIS layout, with a trailing blank line."""
    lines = [
        "1.0,2.0,Iris-a",
        "2.0,2.0,Iris-a",
        "3.0,2.0,Iris-a",
        "4.0,2.0,Iris-a",
        "5.0,1.0,Iris-b",
        "6.0,1.0,Iris-b",
        "",
        "7.0,1.0,Iris-b",
        "8.0,1.0,Iris-b",
        "",
    ]
    path = tmp_path / "iris.data"
    path.write_text("\n".join(lines), encoding="utf-8")
    return path
