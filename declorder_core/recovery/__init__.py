"""Order recovery: strategy selection, providers and the member reorderer."""

from .coordinator import OrderRecovery, recover_order
from .providers import (
    ArchiveBinaryProvider,
    BinaryArtifact,
    BinaryProvider,
    ChainedBinaryProvider,
    ChainedSourceProvider,
    DirectoryBinaryProvider,
    DirectorySourceProvider,
    InMemoryBinaryProvider,
    InMemorySourceProvider,
    NoBinary,
    NoSource,
    SourceArtifact,
    SourceProvider,
)
from .reorder import OrderSource, PropertyReorderer, contiguous_runs, reorder

__all__ = [
    "OrderRecovery",
    "recover_order",
    "ArchiveBinaryProvider",
    "BinaryArtifact",
    "BinaryProvider",
    "ChainedBinaryProvider",
    "ChainedSourceProvider",
    "DirectoryBinaryProvider",
    "DirectorySourceProvider",
    "InMemoryBinaryProvider",
    "InMemorySourceProvider",
    "NoBinary",
    "NoSource",
    "SourceArtifact",
    "SourceProvider",
    "OrderSource",
    "PropertyReorderer",
    "contiguous_runs",
    "reorder",
]
