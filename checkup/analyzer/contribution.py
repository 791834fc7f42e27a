"""Contributions: the names a reference site proves used in its target.

A contribution is either a finite set of export names or ALL. ALL is
absorbing: `ALL | anything == ALL`.
"""
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Union


@dataclass(frozen=True)
class Finite:
    """A known, finite set of used export names."""
    names: FrozenSet[str] = frozenset()

    @classmethod
    def of(cls, names: Iterable[str]) -> "Finite":
        return cls(frozenset(names))

    @property
    def is_all(self) -> bool:
        return False

    def __contains__(self, name: str) -> bool:
        return name in self.names

    def __or__(self, other: "Contribution") -> "Contribution":
        if other.is_all:
            return other
        return Finite(self.names | other.names)

    def __repr__(self) -> str:
        return f"Finite({sorted(self.names)!r})"


class _All:
    """Every export of the target must be considered used."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def is_all(self) -> bool:
        return True

    def __contains__(self, name: str) -> bool:
        return True

    def __or__(self, other: "Contribution") -> "Contribution":
        return self

    def __ror__(self, other: "Contribution") -> "Contribution":
        return self

    def __repr__(self) -> str:
        return "ALL"

    def __reduce__(self):
        return (_All, ())


ALL = _All()
EMPTY = Finite()

Contribution = Union[Finite, _All]


def union(contributions: Iterable[Contribution]) -> Contribution:
    """Union of contributions, stopping early once ALL is reached."""
    result: Contribution = EMPTY
    for contribution in contributions:
        result = result | contribution
        if result.is_all:
            break
    return result
