"""
Load representation sources from files.

Supported formats:
- .json: array of objects, e.g. [{"word": "the", "vector": [0.1, ...]}, ...]
- .jsonl: one such object per line
- .npz: NumPy archive with an "ids" array and a "vectors" (or "embeddings") matrix
- .csv: an id column plus numeric columns
"""

import csv
import json
import threading
from abc import abstractmethod
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional

import numpy as np

from .assembler import EmbeddingsAssembler, RepresentationSource
from .errors import InvalidArgumentError, MissingDependencyError, SourceFormatError
from .logging import get_logger
from .model import EmbeddingStorage
from .representation import Representation, RepresentationLike, as_representation
from .vector import Vector

logger = get_logger(__name__)

FULL = Representation.of("full")
PCA = Representation.of("pca")

FULL_FILENAME = "full_vectors.json"
PCA_FILENAME = "pca_vectors.json"


@dataclass(frozen=True)
class JsonFormat:
    """Field names holding the id and the vector in each record."""
    id_field: str = "word"
    vector_field: str = "vector"

    def __post_init__(self) -> None:
        if self.id_field is None or not str(self.id_field).strip():
            raise InvalidArgumentError("id_field must be non-empty")
        if self.vector_field is None or not str(self.vector_field).strip():
            raise InvalidArgumentError("vector_field must be non-empty")


class CachedSource(RepresentationSource[Any]):
    """
    A source that reads its data once and caches a read-only mapping.

    Subclasses implement ``_read``; the first ``load`` call runs it under a
    lock, later calls return the same mapping object.
    """

    def __init__(self, representation: RepresentationLike):
        self._representation = as_representation(representation)
        self._cached: Optional[Mapping[Any, Vector]] = None
        self._dim: Optional[int] = None
        self._lock = threading.Lock()

    @property
    def representation(self) -> Representation:
        return self._representation

    def load(self) -> Mapping[Any, Vector]:
        cached = self._cached
        if cached is not None:
            return cached

        with self._lock:
            if self._cached is None:
                vectors = self._read()
                if not vectors:
                    raise SourceFormatError(f"No vectors found for representation '{self._representation}'")
                self._dim = next(iter(vectors.values())).dim
                self._cached = MappingProxyType(vectors)
            return self._cached

    def dimension(self) -> Optional[int]:
        return self._dim

    @abstractmethod
    def _read(self) -> dict[Any, Vector]:
        pass


class FileSource(CachedSource):
    """Base for sources backed by a file on disk."""

    def __init__(
        self,
        representation: RepresentationLike,
        path: str | Path,
        id_parser: Callable[[str], Any] = str,
    ):
        super().__init__(representation)
        if path is None:
            raise InvalidArgumentError("path must not be None")
        if id_parser is None:
            raise InvalidArgumentError("id_parser must not be None")
        self.path = Path(path)
        self._id_parser = id_parser

    def _read(self) -> dict[Any, Vector]:
        if not self.path.exists():
            raise FileNotFoundError(f"File not found: {self.path}")
        vectors = self._read_file()
        logger.info(
            "representation_loaded",
            representation=self._representation.name,
            path=str(self.path),
            size=len(vectors),
        )
        return vectors

    @abstractmethod
    def _read_file(self) -> dict[Any, Vector]:
        pass

    def _error(self, message: str) -> SourceFormatError:
        return SourceFormatError(f"{message} ({self.path})", path=str(self.path))

    def _parse_id(self, raw: Any, field: str) -> Any:
        if raw is None or not str(raw).strip():
            raise self._error(f"Missing/blank id field '{field}'")
        parsed = self._id_parser(str(raw))
        if parsed is None:
            raise self._error(f"Parsed id is null for raw id: {raw}")
        return parsed

    def _add(self, out: dict[Any, Vector], id: Any, values: Any, raw_id: Any) -> None:
        """Validate one record and add it to ``out``."""
        if not isinstance(values, (list, tuple, np.ndarray)):
            raise self._error(f"Vector field must be a JSON array of numbers for id: {raw_id}")
        if len(values) == 0:
            raise self._error(f"Vector must not be empty for id: {raw_id}")
        for x in values:
            if isinstance(x, bool) or not isinstance(x, (int, float, np.integer, np.floating)):
                raise self._error(f"Vector array must contain numbers only for id: {raw_id}")

        vector = Vector(values)
        if out:
            dim = next(iter(out.values())).dim
            if vector.dim != dim:
                raise self._error(
                    f"Inconsistent vector dimension in representation '{self._representation}': "
                    f"expected {dim} but got {vector.dim} for id: {raw_id}"
                )
        if id in out:
            raise self._error(f"Duplicate id in representation '{self._representation}': {raw_id}")
        out[id] = vector

    def __repr__(self) -> str:
        return f"{type(self).__name__}(representation={self._representation}, path={str(self.path)!r})"


class JsonSource(FileSource):
    """A JSON array of objects, each holding an id field and a vector field."""

    def __init__(
        self,
        representation: RepresentationLike,
        path: str | Path,
        format: Optional[JsonFormat] = None,
        id_parser: Callable[[str], Any] = str,
    ):
        super().__init__(representation, path, id_parser)
        self.format = format or JsonFormat()

    def _read_file(self) -> dict[Any, Vector]:
        with open(self.path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise self._error(f"Invalid JSON: {e}") from e

        if not isinstance(data, list):
            raise self._error("JSON must start with an array of objects")

        out: dict[Any, Vector] = {}
        for item in data:
            self._add_record(out, item)

        if not out:
            raise self._error(f"JSON array is empty for representation '{self._representation}'")
        return out

    def _add_record(self, out: dict[Any, Vector], item: Any) -> None:
        if not isinstance(item, dict):
            raise self._error("Expected an object inside the array")

        raw_id = item.get(self.format.id_field)
        id = self._parse_id(raw_id, self.format.id_field)
        if self.format.vector_field not in item:
            raise self._error(f"Missing vector field '{self.format.vector_field}' for id: {raw_id}")
        self._add(out, id, item[self.format.vector_field], raw_id)


class JsonlSource(JsonSource):
    """One JSON object per line (blank lines are skipped)."""

    def _read_file(self) -> dict[Any, Vector]:
        out: dict[Any, Vector] = {}
        with open(self.path) as f:
            for lineno, line in enumerate(f, 1):
                if not line.strip():
                    continue
                try:
                    item = json.loads(line)
                except json.JSONDecodeError as e:
                    raise self._error(f"Invalid JSON on line {lineno}: {e}") from e
                self._add_record(out, item)

        if not out:
            raise self._error(f"JSONL file is empty for representation '{self._representation}'")
        return out


class NpzSource(FileSource):
    """NumPy archive with an "ids" array and a 2-D vector matrix."""

    VECTOR_KEYS = ("vectors", "embeddings", "data")

    def _read_file(self) -> dict[Any, Vector]:
        with np.load(self.path, allow_pickle=False) as data:
            for key in self.VECTOR_KEYS:
                if key in data:
                    matrix = data[key]
                    break
            else:
                raise self._error(f"No vectors found; expected one of {list(self.VECTOR_KEYS)}")

            if "ids" not in data:
                raise self._error("Missing 'ids' array")
            raw_ids = data["ids"].tolist()

        if matrix.ndim != 2:
            raise self._error(f"Vector matrix must be 2-D, got shape {matrix.shape}")
        if len(raw_ids) != matrix.shape[0]:
            raise self._error(f"Got {len(raw_ids)} ids for {matrix.shape[0]} vectors")

        out: dict[Any, Vector] = {}
        for raw_id, row in zip(raw_ids, matrix):
            self._add(out, self._parse_id(raw_id, "ids"), row.astype(np.float64), raw_id)
        return out


class CsvSource(FileSource):
    """CSV with an id column; every other column is a vector component."""

    def __init__(
        self,
        representation: RepresentationLike,
        path: str | Path,
        id_column: str = "word",
        id_parser: Callable[[str], Any] = str,
    ):
        super().__init__(representation, path, id_parser)
        self.id_column = id_column

    def _read_file(self) -> dict[Any, Vector]:
        out: dict[Any, Vector] = {}
        with open(self.path, newline="") as f:
            reader = csv.DictReader(f)
            headers = reader.fieldnames or []
            if self.id_column not in headers:
                raise self._error(f"Missing id column '{self.id_column}'")
            vector_cols = [h for h in headers if h != self.id_column]

            for row in reader:
                raw_id = row.get(self.id_column)
                try:
                    values = [float(row[c]) for c in vector_cols]
                except (TypeError, ValueError) as e:
                    raise self._error(f"Vector array must contain numbers only for id: {raw_id}") from e
                self._add(out, self._parse_id(raw_id, self.id_column), values, raw_id)
        return out


class PcaSource(CachedSource):
    """
    Derives a reduced representation from another source with PCA.

    Requires scikit-learn (the ``reduce`` extra).
    """

    def __init__(
        self,
        base: RepresentationSource[Any],
        representation: RepresentationLike = PCA,
        n_components: int = 3,
    ):
        super().__init__(representation)
        if base is None:
            raise InvalidArgumentError("base must not be None")
        if n_components < 1:
            raise InvalidArgumentError(f"n_components must be >= 1, got {n_components}")
        self.base = base
        self.n_components = n_components

    def _read(self) -> dict[Any, Vector]:
        try:
            from sklearn.decomposition import PCA as SklearnPCA
        except ImportError:
            raise MissingDependencyError("scikit-learn is required for PCA: pip install scikit-learn")

        vectors = self.base.load()
        ids = list(vectors)
        matrix = np.vstack([vectors[id].to_numpy() for id in ids])

        n_components = min(self.n_components, matrix.shape[0], matrix.shape[1])
        reducer = SklearnPCA(n_components=n_components, random_state=42)
        reduced = reducer.fit_transform(matrix)

        logger.info(
            "pca_derived",
            base=self.base.representation.name,
            representation=self._representation.name,
            components=n_components,
            explained_variance=float(np.sum(reducer.explained_variance_ratio_)),
        )
        return {id: Vector(row) for id, row in zip(ids, reduced)}


def source_for_path(
    representation: RepresentationLike,
    path: str | Path,
    format: Optional[JsonFormat] = None,
    id_parser: Callable[[str], Any] = str,
) -> FileSource:
    """
    Pick a file source by suffix.

    Raises:
        InvalidArgumentError: If the suffix is not supported
    """
    path = Path(path)
    format = format or JsonFormat()
    suffix = path.suffix.lower()

    if suffix == ".json":
        return JsonSource(representation, path, format, id_parser)
    elif suffix == ".jsonl":
        return JsonlSource(representation, path, format, id_parser)
    elif suffix == ".npz":
        return NpzSource(representation, path, id_parser)
    elif suffix == ".csv":
        return CsvSource(representation, path, format.id_field, id_parser)
    else:
        raise InvalidArgumentError(f"Unsupported file format: {path}")


def discover_pair(path: str | Path) -> tuple[Path, Optional[Path]]:
    """
    Find the full/pca files for a dataset given any file in its folder.

    Returns ``(full, pca)``; ``pca`` is None when the folder has no PCA file.
    A path that is not one of the conventional names is used as the full file.
    """
    path = Path(path)
    folder = path.parent
    full = folder / FULL_FILENAME
    pca = folder / PCA_FILENAME

    if path.name in (FULL_FILENAME, PCA_FILENAME) and full.exists():
        return full, pca if pca.exists() else None
    return path, None


def load_pair(
    full_path: str | Path,
    pca_path: Optional[str | Path] = None,
    format: Optional[JsonFormat] = None,
    pca_components: int = 3,
    extra: Iterable[RepresentationSource[Any]] = (),
    derive_pca: bool = True,
) -> EmbeddingStorage:
    """
    Assemble a storage with "full" and "pca" representations.

    Args:
        full_path: File with the full embeddings
        pca_path: File with the reduced embeddings; derived with PCA if omitted
        format: Record field names for JSON inputs
        pca_components: Components when deriving PCA
        extra: Further sources to merge
        derive_pca: Derive "pca" when no PCA file is given; otherwise the
            storage holds only "full" (plus extra)

    Returns:
        The assembled EmbeddingStorage

    Raises:
        MissingDependencyError: If PCA must be derived and scikit-learn is
            not installed
    """
    full = source_for_path(FULL, full_path, format)
    sources: list[RepresentationSource[Any]] = [full]
    if pca_path is not None:
        sources.append(source_for_path(PCA, pca_path, format))
    elif derive_pca:
        sources.append(PcaSource(full, PCA, n_components=pca_components))

    return EmbeddingsAssembler().assemble([*sources, *extra])
