"""Shared test fixtures for the latent-explorer test suite."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import structlog

from latent_explorer import EmbeddingsAssembler, EmbeddingStorage, InMemorySource, Representation

FULL = Representation.of("full")
PCA = Representation.of("pca")


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop logging configuration bound to streams of a finished test."""
    yield
    structlog.reset_defaults()


def build_storage(full: dict[str, list[float]], pca: dict[str, list[float]] | None = None) -> EmbeddingStorage:
    """Assemble a store from plain lists; pca defaults to the first two components."""
    if pca is None:
        pca = {id: v[:2] for id, v in full.items()}
    return EmbeddingsAssembler().assemble([
        InMemorySource(FULL, full),
        InMemorySource(PCA, pca),
    ])


@pytest.fixture
def make_storage() -> Callable[..., EmbeddingStorage]:
    return build_storage


@pytest.fixture
def line_storage() -> EmbeddingStorage:
    """q, a, b, c on the x axis at 0, 1, 2 and 10."""
    return build_storage({
        "q": [0.0, 0.0],
        "a": [1.0, 0.0],
        "b": [2.0, 0.0],
        "c": [10.0, 0.0],
    })


@pytest.fixture
def analogy_storage() -> EmbeddingStorage:
    return build_storage({
        "king": [10.0, 1.0],
        "man": [2.0, 0.0],
        "woman": [2.0, 1.0],
        "queen": [10.0, 2.0],
        "apple": [-5.0, 7.0],
    })


@pytest.fixture
def scale_storage() -> EmbeddingStorage:
    """Anchors poor/rich on the x axis, with on-axis and off-axis words."""
    return build_storage({
        "poor": [0.0, 0.0, 0.0],
        "rich": [10.0, 0.0, 0.0],
        "modest": [3.0, 0.5, 0.0],
        "middle": [5.0, 0.0, 0.0],
        "wealthy": [8.0, 0.2, 0.0],
        "banana": [5.0, 9.0, 4.0],
        "cloud": [2.0, -6.0, 7.0],
    })


@pytest.fixture
def write_json(tmp_path: Path) -> Callable[[str, Any], Path]:
    """Factory fixture writing a JSON document into tmp_path."""

    def _write(name: str, data: Any) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return path

    return _write


@pytest.fixture
def dataset_dir(tmp_path: Path) -> Path:
    """A folder with full_vectors.json and pca_vectors.json."""
    full = {
        "king": [10.0, 1.0, 0.5],
        "man": [2.0, 0.0, 0.1],
        "woman": [2.0, 1.0, 0.1],
        "queen": [10.0, 2.0, 0.5],
        "poor": [0.0, 0.0, 3.0],
        "rich": [6.0, 0.0, 3.0],
        "cat": [-4.0, 3.0, 1.0],
        "dog": [-4.0, 3.5, 1.2],
    }
    (tmp_path / "full_vectors.json").write_text(
        json.dumps([{"word": w, "vector": v} for w, v in full.items()])
    )
    (tmp_path / "pca_vectors.json").write_text(
        json.dumps([{"word": w, "vector": v[:2]} for w, v in full.items()])
    )
    return tmp_path
