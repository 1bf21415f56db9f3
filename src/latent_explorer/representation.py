"""
Canonical names for vector spaces ("full", "pca", ...).
"""

import re
import threading
from dataclasses import dataclass
from typing import Union

from .errors import InvalidArgumentError

_WHITESPACE = re.compile(r"\s+")


def normalize_name(raw: str) -> str:
    """Trim, lowercase and strip all internal whitespace."""
    return _WHITESPACE.sub("", raw.strip().lower())


@dataclass(frozen=True)
class Representation:
    """
    A named vector space.

    Build instances with ``Representation.of`` so the name is canonical;
    two representations are equal when their canonical names are.
    """
    name: str

    def __post_init__(self) -> None:
        if self.name is None or not isinstance(self.name, str) or not self.name.strip():
            raise InvalidArgumentError("representation name must be non-empty")
        object.__setattr__(self, "name", normalize_name(self.name))

    @classmethod
    def of(cls, raw_name: str) -> "Representation":
        return cls(raw_name)

    def __str__(self) -> str:
        return self.name


RepresentationLike = Union[Representation, str]


def as_representation(rep: RepresentationLike) -> Representation:
    """Accept a Representation or a raw name."""
    if isinstance(rep, Representation):
        return rep
    if rep is None:
        raise InvalidArgumentError("representation must not be None")
    return Representation.of(rep)


class RepresentationRegistry:
    """
    Scoped interning of representations.

    Within one registry, equal canonical names always resolve to the same
    instance. Registries are owned by whoever needs identity comparison;
    there is no process-wide pool.
    """

    def __init__(self):
        self._pool: dict[str, Representation] = {}
        self._lock = threading.Lock()

    def intern(self, raw_name: RepresentationLike) -> Representation:
        rep = as_representation(raw_name)
        with self._lock:
            return self._pool.setdefault(rep.name, rep)

    def __contains__(self, raw_name: RepresentationLike) -> bool:
        return as_representation(raw_name).name in self._pool

    def __len__(self) -> int:
        return len(self._pool)
