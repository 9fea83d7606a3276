"""Constant pool entries, method records and the parsed class file."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from ..errors import ClassFormatError
from .constants import ACC_ABSTRACT, BASE_TYPE_CHARS

__all__ = [
    "Utf8Entry",
    "ClassEntry",
    "NameAndTypeEntry",
    "OtherEntry",
    "ConstantPoolEntry",
    "ConstantPool",
    "MethodInfo",
    "ResolvedMethod",
    "ClassFile",
    "parse_method_descriptor",
]


@dataclass(frozen=True)
class Utf8Entry:
    value: str


@dataclass(frozen=True)
class ClassEntry:
    name_index: int


@dataclass(frozen=True)
class NameAndTypeEntry:
    name_index: int
    descriptor_index: int


@dataclass(frozen=True)
class OtherEntry:
    """Any entry whose content the reader does not need (numbers, refs, ...)."""

    tag: int


ConstantPoolEntry = Union[Utf8Entry, ClassEntry, NameAndTypeEntry, OtherEntry]


class ConstantPool:
    """1-based pool; slot 0 and the slot after a Long/Double hold ``None``."""

    def __init__(self, entries: list[ConstantPoolEntry | None]) -> None:
        self._entries = entries

    def __len__(self) -> int:
        return len(self._entries)

    def entry(self, index: int) -> ConstantPoolEntry:
        if not 0 < index < len(self._entries):
            raise ClassFormatError(f"constant pool index {index} out of range 1..{len(self._entries) - 1}")
        entry = self._entries[index]
        if entry is None:
            raise ClassFormatError(f"constant pool index {index} points at an unusable slot")
        return entry

    def utf8(self, index: int) -> str:
        entry = self.entry(index)
        if not isinstance(entry, Utf8Entry):
            raise ClassFormatError(f"constant pool index {index} is not a Utf8 entry")
        return entry.value

    def class_name(self, index: int) -> str:
        entry = self.entry(index)
        if not isinstance(entry, ClassEntry):
            raise ClassFormatError(f"constant pool index {index} is not a Class entry")
        return self.utf8(entry.name_index)


@dataclass(frozen=True)
class MethodInfo:
    access_flags: int
    name_index: int
    descriptor_index: int


@dataclass(frozen=True)
class ResolvedMethod:
    name: str
    descriptor: str
    access_flags: int
    parameters: tuple[str, ...]
    return_type: str

    @property
    def is_abstract(self) -> bool:
        return bool(self.access_flags & ACC_ABSTRACT)

    @property
    def is_abstract_no_arg_accessor(self) -> bool:
        return self.is_abstract and not self.parameters and self.return_type != "V"


@dataclass
class ClassFile:
    minor_version: int
    major_version: int
    access_flags: int
    this_class: int
    super_class: int
    pool: ConstantPool
    methods: list[MethodInfo] = field(default_factory=list)

    @property
    def name(self) -> str:
        """Internal name of this class, e.g. ``com/example/Outer$Inner``."""
        return self.pool.class_name(self.this_class)

    def resolve(self, method: MethodInfo) -> ResolvedMethod:
        name = self.pool.utf8(method.name_index)
        descriptor = self.pool.utf8(method.descriptor_index)
        parameters, return_type = parse_method_descriptor(descriptor)
        return ResolvedMethod(
            name=name,
            descriptor=descriptor,
            access_flags=method.access_flags,
            parameters=tuple(parameters),
            return_type=return_type,
        )

    def resolved_methods(self) -> list[ResolvedMethod]:
        return [self.resolve(method) for method in self.methods]


def parse_method_descriptor(descriptor: str) -> tuple[list[str], str]:
    """Split ``(IJLjava/lang/String;)[B`` into parameter and return descriptors."""
    if not descriptor.startswith("("):
        raise ClassFormatError(f"method descriptor {descriptor!r} does not start with '('")
    parameters: list[str] = []
    index = 1
    while index < len(descriptor) and descriptor[index] != ")":
        end = _field_type_end(descriptor, index)
        parameters.append(descriptor[index:end])
        index = end
    if index >= len(descriptor):
        raise ClassFormatError(f"method descriptor {descriptor!r} has no ')'")
    return_type = descriptor[index + 1 :]
    if return_type != "V" and (not return_type or _field_type_end(return_type, 0) != len(return_type)):
        raise ClassFormatError(f"method descriptor {descriptor!r} has a bad return type")
    return parameters, return_type


def _field_type_end(descriptor: str, index: int) -> int:
    start = index
    while index < len(descriptor) and descriptor[index] == "[":
        index += 1
    if index >= len(descriptor):
        raise ClassFormatError(f"truncated field type in {descriptor!r} at {start}")
    ch = descriptor[index]
    if ch in BASE_TYPE_CHARS:
        return index + 1
    if ch == "L":
        end = descriptor.find(";", index)
        if end < 0:
            raise ClassFormatError(f"unterminated class type in {descriptor!r} at {start}")
        return end + 1
    raise ClassFormatError(f"unexpected {ch!r} in descriptor {descriptor!r}")
