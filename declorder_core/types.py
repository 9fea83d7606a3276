"""Value types shared by the scanner, the class file reader and the reorderer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

__all__ = ["TypeIdentity", "Member", "OrderedNames"]


@dataclass(frozen=True)
class TypeIdentity:
    """A possibly nested Java type: package plus simple names from the outside in."""

    package: str
    names: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.names:
            raise ValueError("a type identity needs at least one simple name")
        if any(not name for name in self.names):
            raise ValueError(f"empty simple name in {self.names!r}")

    @classmethod
    def of(cls, package: str, *names: str) -> "TypeIdentity":
        return cls(package=package, names=tuple(names))

    @classmethod
    def parse(cls, text: str) -> "TypeIdentity":
        """Parse ``com.example.Outer$Inner`` or ``com.example.Outer.Inner``.

        Without a ``$`` the first capitalized segment is taken as the top-level
        type, which matches the usual Java naming conventions.
        """
        text = text.strip()
        if not text:
            raise ValueError("empty type name")
        if "$" in text:
            head, *nested = text.split("$")
            package, _, top = head.rpartition(".")
            return cls(package=package, names=(top, *nested))

        parts = text.split(".")
        for index, part in enumerate(parts):
            if part[:1].isupper():
                return cls(package=".".join(parts[:index]), names=tuple(parts[index:]))
        return cls(package=".".join(parts[:-1]), names=(parts[-1],))

    @property
    def simple_name(self) -> str:
        return self.names[-1]

    @property
    def qualified_name(self) -> str:
        dotted = ".".join(self.names)
        return f"{self.package}.{dotted}" if self.package else dotted

    @property
    def binary_name(self) -> str:
        """Base name of the compiled artifact, e.g. ``Outer$Inner``."""
        return "$".join(self.names)

    @property
    def package_path(self) -> str:
        return self.package.replace(".", "/")

    @property
    def top_level(self) -> "TypeIdentity":
        return TypeIdentity(package=self.package, names=self.names[:1])

    def nested(self, name: str) -> "TypeIdentity":
        return TypeIdentity(package=self.package, names=(*self.names, name))

    def __str__(self) -> str:
        return self.qualified_name


@dataclass(frozen=True)
class Member:
    """An accessor declared by ``owner``. ``name`` is the matching key."""

    owner: TypeIdentity
    name: str
    full_signature: str = ""

    def __str__(self) -> str:
        return self.full_signature or f"{self.owner}.{self.name}()"


@dataclass(frozen=True)
class OrderedNames:
    """Method names of exactly one type, in declaration order."""

    owner: str
    names: tuple[str, ...]
    origin: str = "source"
    _positions: dict[str, int] = field(init=False, repr=False, compare=False, hash=False)

    def __post_init__(self) -> None:
        positions: dict[str, int] = {}
        for index, name in enumerate(self.names):
            positions.setdefault(name, index)
        object.__setattr__(self, "_positions", positions)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self._positions

    def index_of(self, name: str) -> int:
        """Position of the first declaration of ``name``; KeyError if absent."""
        return self._positions[name]

    def covers(self, names: Iterable[str]) -> bool:
        return all(name in self._positions for name in names)
