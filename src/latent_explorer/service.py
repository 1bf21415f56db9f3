"""
Application service: the boundary used by the command line and other
front ends.

Holds the loaded store and the selected metric, wires the core
components together, and turns results into display-ready views.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, Optional

from .config import ExplorerSettings, get_settings
from .errors import InvalidArgumentError, InvalidStateError, MissingDependencyError
from .lab import LabResult, SubspaceGrouping, VectorArithmeticLab, VectorExpression, VectorExpressionEvaluator
from .loader import JsonFormat, discover_pair, load_pair
from .logging import get_logger
from .metrics import DistanceMetric, available_metrics, get_metric
from .model import EmbeddingGroup, T
from .neighbors import NearestNeighbors, Neighbor
from .projection import CustomProjectionService, ProjectionScore
from .representation import Representation, RepresentationLike, as_representation
from .vector import Vector

logger = get_logger(__name__)


@dataclass(frozen=True)
class MetricOption:
    """A selectable distance metric."""
    id: str
    label: str

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class NeighborView(Generic[T]):
    id: T
    distance: float
    label: str


@dataclass(frozen=True)
class LabResultView(Generic[T]):
    vector: Vector
    neighbors: tuple[NeighborView[T], ...]


def format_neighbor(neighbor: Neighbor, metric_id: str) -> str:
    """``"<id>   |   dist=0.12345"``, plus the similarity for cosine."""
    label = f"{neighbor.id}   |   dist={neighbor.distance:.5f}"
    if metric_id == "cosine":
        label += f"   sim={1.0 - neighbor.distance:.5f}"
    return label


class ExplorerService(Generic[T]):
    """
    Orchestrates neighbor search, projection and vector arithmetic over one
    loaded store.

    Search, projection and arithmetic use the search representation
    ("full" by default); arithmetic paths are reported in the display
    representation ("pca" by default).
    """

    def __init__(self, settings: Optional[ExplorerSettings] = None):
        self.settings = settings or get_settings()
        self._search_rep = Representation.of(self.settings.search_representation)
        self._configured_display_rep = Representation.of(self.settings.display_representation)
        self._display_rep = self._configured_display_rep
        self._metric_id = self.settings.metric
        self._metric: DistanceMetric = get_metric(self._metric_id)

        self._group: Optional[EmbeddingGroup[T]] = None
        self._knn: Optional[NearestNeighbors[T]] = None
        self._projection: Optional[CustomProjectionService[T]] = None
        self._lab: Optional[VectorArithmeticLab[T]] = None
        self._grouping: Optional[SubspaceGrouping[T]] = None

    # --- Loading ---

    def load(self, group: EmbeddingGroup[T]) -> None:
        """Use an already assembled store."""
        if group is None:
            raise InvalidArgumentError("group must not be None")
        available = group.available_representations()
        if self._search_rep not in available:
            raise InvalidArgumentError(
                f"Search representation '{self._search_rep}' not in {sorted(r.name for r in available)}"
            )
        if self._configured_display_rep in available:
            self._display_rep = self._configured_display_rep
        else:
            logger.warning(
                "display_representation_missing",
                requested=self._configured_display_rep.name,
                fallback=self._search_rep.name,
            )
            self._display_rep = self._search_rep

        self._group = group
        self._projection = CustomProjectionService(group, self._search_rep)
        self._rebuild_search()
        logger.info("dataset_loaded", size=len(group), metric=self._metric_id)

    def load_files(self, path: str | Path, pca_path: Optional[str | Path] = None) -> None:
        """
        Load "full" and "pca" representations from files.

        When ``pca_path`` is omitted, a sibling ``pca_vectors.json`` is used
        if present, otherwise PCA is derived from the full vectors. Without
        scikit-learn the store holds "full" only and display falls back to it.
        """
        full, discovered = discover_pair(path)
        pca = pca_path if pca_path is not None else discovered
        fmt = JsonFormat(self.settings.id_field, self.settings.vector_field)
        try:
            storage = load_pair(full, pca, format=fmt, pca_components=self.settings.pca_components)
        except MissingDependencyError as e:
            if pca is not None:
                raise
            logger.warning("pca_unavailable", reason=str(e))
            storage = load_pair(full, format=fmt, derive_pca=False)
        self.load(storage)

    @property
    def is_loaded(self) -> bool:
        return self._group is not None

    @property
    def group(self) -> EmbeddingGroup[T]:
        self._ensure_loaded()
        return self._group

    def _ensure_loaded(self) -> None:
        if self._group is None:
            raise InvalidStateError("No dataset loaded.")

    def _rebuild_search(self) -> None:
        self._knn = NearestNeighbors(self._group, self._search_rep, self._metric)
        self._lab = VectorArithmeticLab(self._group, self._search_rep, self._metric)
        self._grouping = SubspaceGrouping(self._group, self._search_rep, self._metric)

    # --- Representations and metrics ---

    def available_representations(self) -> list[Representation]:
        self._ensure_loaded()
        return sorted(self._group.available_representations(), key=lambda r: r.name)

    def representation_dimension(self, rep: RepresentationLike) -> int:
        self._ensure_loaded()
        return self._group.dimension(rep)

    @property
    def display_representation(self) -> Representation:
        return self._display_rep

    def set_display_representation(self, rep: RepresentationLike) -> None:
        self._ensure_loaded()
        rep = as_representation(rep)
        if rep not in self._group.available_representations():
            raise InvalidArgumentError(f"Unknown representation: {rep}")
        self._configured_display_rep = rep
        self._display_rep = rep

    def available_metrics(self) -> list[MetricOption]:
        return [MetricOption(id=name, label=get_metric(name).name) for name in available_metrics()]

    @property
    def metric_id(self) -> str:
        return self._metric_id

    def set_metric(self, metric_id: str) -> None:
        """
        Switch the distance metric; neighbor search and arithmetic follow.

        Raises:
            InvalidArgumentError: If the metric id is unknown
        """
        self._metric = get_metric(metric_id)
        self._metric_id = self._metric.name
        if self._group is not None:
            self._rebuild_search()

    # --- Queries ---

    def contains(self, id: T) -> bool:
        return self._group is not None and self._group.contains(id)

    def nearest_neighbors(self, id: T, k: Optional[int] = None) -> list[NeighborView[T]]:
        self._ensure_loaded()
        k = self.settings.default_k if k is None else k
        return self._views(self._knn.top_k(id, k))

    def custom_projection_scale(
        self,
        a_id: T,
        b_id: T,
        top_n: int,
        include_anchors: bool = True,
        use_purity_filter: bool = True,
    ) -> list[ProjectionScore[T]]:
        """Purity-filtered scale (centered axis) or closest-to-axis scale."""
        self._ensure_loaded()
        if use_purity_filter:
            return self._projection.clean_scale_by_purity(a_id, b_id, top_n, include_anchors)
        return self._projection.clean_semantic_scale(a_id, b_id, top_n, include_anchors)

    def solve(self, expr: VectorExpression[T], k: Optional[int] = None) -> LabResultView[T]:
        self._ensure_loaded()
        k = self.settings.default_k if k is None else k
        return self._lab_view(self._lab.solve(expr, k))

    def subspace_grouping(
        self,
        selected: Iterable[T],
        k: Optional[int] = None,
        exclude_selected: bool = True,
    ) -> LabResultView[T]:
        self._ensure_loaded()
        k = self.settings.default_k if k is None else k
        return self._lab_view(self._grouping.group(selected, k, exclude_selected))

    def arithmetic_path(self, expr: VectorExpression[T]) -> list[Vector]:
        """Partial sums of ``expr`` in the display representation, for drawing."""
        self._ensure_loaded()
        return VectorExpressionEvaluator(self._group, self._display_rep).path(expr)

    def _views(self, neighbors: Iterable[Neighbor[T]]) -> list[NeighborView[T]]:
        return [
            NeighborView(id=n.id, distance=n.distance, label=format_neighbor(n, self._metric_id))
            for n in neighbors
        ]

    def _lab_view(self, result: LabResult[T]) -> LabResultView[T]:
        return LabResultView(vector=result.vector, neighbors=tuple(self._views(result.neighbors)))
