"""
latent-explorer: Explore high-dimensional embedding spaces.

Store several named representations per entity, then search neighbors,
project the vocabulary onto semantic axes, and solve vector analogies.
"""

__version__ = "0.1.0"

from .errors import (
    ExplorerError,
    InvalidArgumentError,
    NotFoundError,
    InvalidStateError,
    IndexOutOfRangeError,
    SourceFormatError,
    MissingDependencyError,
    ConfigurationError,
)
from .vector import Vector
from .representation import Representation, RepresentationRegistry
from .model import EmbeddingSingle, EmbeddingItem, EmbeddingGroup, EmbeddingStorage
from .assembler import RepresentationSource, InMemorySource, EmbeddingsAssembler
from .metrics import DistanceMetric, CosineDistance, EuclideanDistance, get_metric, available_metrics
from .neighbors import Neighbor, NearestNeighbors
from .projection import ProjectionAxis, ProjectionScore, CustomProjectionService
from .lab import (
    Term,
    VectorExpression,
    VectorExpressionEvaluator,
    LabResult,
    VectorArithmeticLab,
    SubspaceGrouping,
)
from .loader import JsonFormat, JsonSource, load_pair
from .service import ExplorerService

__all__ = [
    "ExplorerError",
    "InvalidArgumentError",
    "NotFoundError",
    "InvalidStateError",
    "IndexOutOfRangeError",
    "SourceFormatError",
    "MissingDependencyError",
    "ConfigurationError",
    "Vector",
    "Representation",
    "RepresentationRegistry",
    "EmbeddingSingle",
    "EmbeddingItem",
    "EmbeddingGroup",
    "EmbeddingStorage",
    "RepresentationSource",
    "InMemorySource",
    "EmbeddingsAssembler",
    "DistanceMetric",
    "CosineDistance",
    "EuclideanDistance",
    "get_metric",
    "available_metrics",
    "Neighbor",
    "NearestNeighbors",
    "ProjectionAxis",
    "ProjectionScore",
    "CustomProjectionService",
    "Term",
    "VectorExpression",
    "VectorExpressionEvaluator",
    "LabResult",
    "VectorArithmeticLab",
    "SubspaceGrouping",
    "JsonFormat",
    "JsonSource",
    "load_pair",
    "ExplorerService",
]
