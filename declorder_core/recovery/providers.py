"""Where source files and class files come from.

A source provider answers "give me the source of the top-level type that
encloses this type"; a binary provider answers "give me the compiled class of
exactly this type". Either may answer ``None``; that only means the artifact
is not available to it.
"""

from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, Mapping, Protocol, Sequence

from ..types import TypeIdentity

__all__ = [
    "SourceArtifact",
    "BinaryArtifact",
    "SourceProvider",
    "BinaryProvider",
    "NoSource",
    "NoBinary",
    "DirectorySourceProvider",
    "DirectoryBinaryProvider",
    "ArchiveBinaryProvider",
    "ChainedSourceProvider",
    "ChainedBinaryProvider",
    "InMemorySourceProvider",
    "InMemoryBinaryProvider",
    "source_relative_path",
    "binary_relative_path",
]

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"


@dataclass
class SourceArtifact:
    """An open source file plus the encoding its bytes are in."""

    stream: BinaryIO
    encoding: str = DEFAULT_ENCODING
    location: str = "<memory>"

    def read_text(self) -> str:
        with self.stream as handle:
            return handle.read().decode(self.encoding)


@dataclass
class BinaryArtifact:
    """An open class file."""

    stream: BinaryIO
    location: str = "<memory>"

    def read_bytes(self) -> bytes:
        with self.stream as handle:
            return handle.read()


class SourceProvider(Protocol):
    def open_source(self, owner: TypeIdentity) -> SourceArtifact | None:
        ...


class BinaryProvider(Protocol):
    def open_binary(self, owner: TypeIdentity) -> BinaryArtifact | None:
        ...


def source_relative_path(owner: TypeIdentity) -> str:
    """``com/example/Outer.java`` for ``com.example.Outer.Inner``."""
    name = f"{owner.top_level.simple_name}.java"
    return f"{owner.package_path}/{name}" if owner.package else name


def binary_relative_path(owner: TypeIdentity) -> str:
    """``com/example/Outer$Inner.class`` for ``com.example.Outer.Inner``."""
    name = f"{owner.binary_name}.class"
    return f"{owner.package_path}/{name}" if owner.package else name


class NoSource:
    """Source is never available."""

    def open_source(self, owner: TypeIdentity) -> SourceArtifact | None:
        return None


class NoBinary:
    """Class files are never available."""

    def open_binary(self, owner: TypeIdentity) -> BinaryArtifact | None:
        return None


class DirectorySourceProvider:
    """Look for ``<root>/<package path>/<TopLevel>.java`` under each root in turn."""

    def __init__(self, roots: Iterable[Path | str], encoding: str = DEFAULT_ENCODING) -> None:
        self.roots = tuple(Path(root) for root in roots)
        self.encoding = encoding

    def open_source(self, owner: TypeIdentity) -> SourceArtifact | None:
        relative = source_relative_path(owner)
        for root in self.roots:
            candidate = root / relative
            if candidate.is_file():
                logger.debug("source for %s found at %s", owner, candidate)
                return SourceArtifact(candidate.open("rb"), self.encoding, str(candidate))
        return None


class DirectoryBinaryProvider:
    """Look for ``<root>/<package path>/<Outer$Inner>.class`` under each root in turn."""

    def __init__(self, roots: Iterable[Path | str]) -> None:
        self.roots = tuple(Path(root) for root in roots)

    def open_binary(self, owner: TypeIdentity) -> BinaryArtifact | None:
        relative = binary_relative_path(owner)
        for root in self.roots:
            candidate = root / relative
            if candidate.is_file():
                logger.debug("class file for %s found at %s", owner, candidate)
                return BinaryArtifact(candidate.open("rb"), str(candidate))
        return None


class ArchiveBinaryProvider:
    """Read class files out of a jar or zip archive."""

    def __init__(self, archive: Path | str) -> None:
        self.archive = Path(archive)

    def open_binary(self, owner: TypeIdentity) -> BinaryArtifact | None:
        if not self.archive.is_file():
            return None
        entry = binary_relative_path(owner)
        with zipfile.ZipFile(self.archive) as archive:
            try:
                data = archive.read(entry)
            except KeyError:
                return None
        logger.debug("class file for %s found in %s!%s", owner, self.archive, entry)
        return BinaryArtifact(io.BytesIO(data), f"{self.archive}!{entry}")


class ChainedSourceProvider:
    """The first provider that has the source wins."""

    def __init__(self, providers: Sequence[SourceProvider]) -> None:
        self.providers = tuple(providers)

    def open_source(self, owner: TypeIdentity) -> SourceArtifact | None:
        for provider in self.providers:
            artifact = provider.open_source(owner)
            if artifact is not None:
                return artifact
        return None


class ChainedBinaryProvider:
    """The first provider that has the class file wins."""

    def __init__(self, providers: Sequence[BinaryProvider]) -> None:
        self.providers = tuple(providers)

    def open_binary(self, owner: TypeIdentity) -> BinaryArtifact | None:
        for provider in self.providers:
            artifact = provider.open_binary(owner)
            if artifact is not None:
                return artifact
        return None


class InMemorySourceProvider:
    """Sources keyed by the qualified name of their top-level type."""

    def __init__(self, sources: Mapping[str, str], encoding: str = DEFAULT_ENCODING) -> None:
        self.sources = dict(sources)
        self.encoding = encoding

    def open_source(self, owner: TypeIdentity) -> SourceArtifact | None:
        key = owner.top_level.qualified_name
        text = self.sources.get(key)
        if text is None:
            return None
        return SourceArtifact(io.BytesIO(text.encode(self.encoding)), self.encoding, f"<memory:{key}>")


class InMemoryBinaryProvider:
    """Class file bytes keyed by the qualified name of exactly the type they compile."""

    def __init__(self, classes: Mapping[str, bytes]) -> None:
        self.classes = dict(classes)

    def open_binary(self, owner: TypeIdentity) -> BinaryArtifact | None:
        key = owner.qualified_name
        data = self.classes.get(key)
        if data is None:
            return None
        return BinaryArtifact(io.BytesIO(data), f"<memory:{key}>")
