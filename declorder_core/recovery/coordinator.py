"""Pick a recovery strategy for one type and run it, failing closed."""

from __future__ import annotations

import logging
from typing import Any

from ..classfile import read_class_file
from ..errors import ClassFormatError, IncompleteScanError
from ..events import EventBus
from ..source import DeclarationScanner, JavaLexer
from ..types import OrderedNames, TypeIdentity
from .providers import BinaryArtifact, BinaryProvider, NoBinary, NoSource, SourceArtifact, SourceProvider

__all__ = ["OrderRecovery", "recover_order"]

logger = logging.getLogger(__name__)


class OrderRecovery:
    """Recover the declaration order of a type's abstract methods.

    The source of the enclosing top-level type is preferred. Only if no
    provider has it is the class file of the type itself consulted. One
    strategy is tried per call and anything that goes wrong with it gives
    ``None``: there is never a partial answer.
    """

    def __init__(
        self,
        source_provider: SourceProvider | None = None,
        binary_provider: BinaryProvider | None = None,
        *,
        events: EventBus | None = None,
    ) -> None:
        self.source_provider = source_provider or NoSource()
        self.binary_provider = binary_provider or NoBinary()
        self.events = events

    def recover_order(self, owner: TypeIdentity) -> OrderedNames | None:
        origin = "source"
        binary: BinaryArtifact | None = None
        try:
            source = self.source_provider.open_source(owner)
            if source is not None:
                names = self._from_source(owner, source)
            else:
                origin = "binary"
                binary = self.binary_provider.open_binary(owner)
                names = self._from_binary(owner, binary) if binary is not None else None
        except Exception as exc:
            logger.warning("could not recover %s order of %s: %s", origin, owner, exc)
            self._emit("order_failed", owner=owner.qualified_name, origin=origin, error=str(exc))
            return None

        if origin == "binary" and binary is None:
            logger.debug("no source or class file available for %s", owner)
            self._emit("order_unavailable", owner=owner.qualified_name)
            return None
        if names is None:
            logger.debug("%s scan did not find %s", origin, owner)
            self._emit("order_failed", owner=owner.qualified_name, origin=origin, error="type not found")
            return None
        order = OrderedNames(owner=owner.qualified_name, names=tuple(names), origin=origin)
        logger.debug("recovered %s order of %s: %s", origin, owner, ", ".join(order))
        self._emit("order_recovered", owner=owner.qualified_name, origin=origin, names=list(order))
        return order

    def _from_source(self, owner: TypeIdentity, artifact: SourceArtifact) -> list[str] | None:
        logger.debug("scanning %s for %s", artifact.location, owner)
        lexer = JavaLexer(artifact.read_text())
        scanner = DeclarationScanner(owner.package)
        orders = scanner.scan(lexer)
        if lexer.truncated:
            raise IncompleteScanError(f"{artifact.location} ends inside a comment or literal")
        if not scanner.complete:
            raise IncompleteScanError(f"{artifact.location} has unbalanced braces")
        return orders.get(owner.qualified_name)

    def _from_binary(self, owner: TypeIdentity, artifact: BinaryArtifact) -> list[str]:
        logger.debug("reading %s for %s", artifact.location, owner)
        class_file = read_class_file(artifact.read_bytes())
        expected = owner.binary_name if not owner.package else f"{owner.package_path}/{owner.binary_name}"
        if class_file.name != expected:
            raise ClassFormatError(f"{artifact.location} declares {class_file.name}, expected {expected}")
        return [
            method.name
            for method in class_file.resolved_methods()
            if method.is_abstract_no_arg_accessor
        ]

    def _emit(self, event_name: str, **payload: Any) -> None:
        if self.events is not None:
            self.events.emit(event_name, payload)


def recover_order(
    owner: TypeIdentity,
    source_provider: SourceProvider | None = None,
    binary_provider: BinaryProvider | None = None,
) -> OrderedNames | None:
    """One-shot form of :meth:`OrderRecovery.recover_order`."""
    return OrderRecovery(source_provider, binary_provider).recover_order(owner)
