"""Shared fixtures: a tiny class file assembler and Java source samples."""

from __future__ import annotations

import struct
from typing import Callable, Iterable

import pytest

from declorder_core.classfile.constants import (
    ACC_ABSTRACT,
    ACC_PRIVATE,
    ACC_PUBLIC,
    CONSTANT_CLASS,
    CONSTANT_LONG,
    CONSTANT_UTF8,
    MAGIC,
)


class ClassFileBuilder:
    """Assemble just enough of a class file for the reader to chew on."""

    def __init__(self, name: str = "com/example/Foo", super_name: str = "java/lang/Object") -> None:
        self.name = name
        self.super_name = super_name
        self.major_version = 52
        self.interfaces: list[str] = []
        self._pool: list[bytes] = []
        self._next_slot = 1
        self._utf8: dict[str, int] = {}
        self._fields: list[bytes] = []
        self._methods: list[bytes] = []

    # ---------- constant pool ----------

    def _add(self, encoded: bytes, wide: bool = False) -> int:
        index = self._next_slot
        self._pool.append(encoded)
        self._next_slot += 2 if wide else 1
        return index

    def utf8(self, text: str) -> int:
        if text not in self._utf8:
            raw = text.encode("utf-8")
            self._utf8[text] = self._add(struct.pack(">BH", CONSTANT_UTF8, len(raw)) + raw)
        return self._utf8[text]

    def class_ref(self, name: str) -> int:
        return self._add(struct.pack(">BH", CONSTANT_CLASS, self.utf8(name)))

    def long_constant(self, value: int) -> int:
        return self._add(struct.pack(">Bq", CONSTANT_LONG, value), wide=True)

    def raw_entry(self, encoded: bytes) -> int:
        return self._add(encoded)

    # ---------- members ----------

    def _attribute(self, name: str, body: bytes) -> bytes:
        return struct.pack(">HI", self.utf8(name), len(body)) + body

    def add_field(self, name: str, descriptor: str, access: int = ACC_PRIVATE, constant_value: bool = False) -> None:
        attributes = []
        if constant_value:
            attributes.append(self._attribute("ConstantValue", struct.pack(">H", self.long_constant(42))))
        self._fields.append(
            struct.pack(">HHHH", access, self.utf8(name), self.utf8(descriptor), len(attributes))
            + b"".join(attributes)
        )

    def add_method(
        self,
        name: str,
        descriptor: str,
        access: int = ACC_PUBLIC | ACC_ABSTRACT,
        code: bytes | None = None,
        name_index: int | None = None,
        attributes: Iterable[tuple[str, bytes]] = (),
    ) -> None:
        encoded = [self._attribute(attr_name, body) for attr_name, body in attributes]
        if code is not None:
            # max_stack, max_locals, code, no exception table, no attributes
            body = struct.pack(">HHI", 2, 1, len(code)) + code + struct.pack(">HH", 0, 0)
            encoded.append(self._attribute("Code", body))
        if name_index is None:
            name_index = self.utf8(name)
        self._methods.append(
            struct.pack(">HHHH", access, name_index, self.utf8(descriptor), len(encoded))
            + b"".join(encoded)
        )

    def add_abstract(self, *signatures: str) -> "ClassFileBuilder":
        """Add abstract methods given as ``name:descriptor`` strings."""
        for signature in signatures:
            name, _, descriptor = signature.partition(":")
            self.add_method(name, descriptor)
        return self

    # ---------- output ----------

    def build(self) -> bytes:
        this_index = self.class_ref(self.name)
        super_index = self.class_ref(self.super_name)
        interface_indexes = [self.class_ref(name) for name in self.interfaces]
        parts = [
            struct.pack(">IHHH", MAGIC, 0, self.major_version, self._next_slot),
            *self._pool,
            struct.pack(">HHHH", ACC_PUBLIC | ACC_ABSTRACT, this_index, super_index, len(interface_indexes)),
            b"".join(struct.pack(">H", index) for index in interface_indexes),
            struct.pack(">H", len(self._fields)),
            *self._fields,
            struct.pack(">H", len(self._methods)),
            *self._methods,
            struct.pack(">H", 0),
        ]
        return b"".join(parts)


@pytest.fixture
def class_builder() -> Callable[..., ClassFileBuilder]:
    return ClassFileBuilder


@pytest.fixture
def accessor_class() -> Callable[[str, Iterable[str]], bytes]:
    """Class file bytes for ``name`` declaring the given no-arg accessors."""

    def build(name: str, accessors: Iterable[str]) -> bytes:
        builder = ClassFileBuilder(name)
        builder.add_method("<init>", "()V", access=ACC_PUBLIC, code=b"\x2a\xb1")
        for accessor in accessors:
            builder.add_method(accessor, "()Ljava/lang/String;")
        return builder.build()

    return build


ACCESSOR_SOURCE = """\
package com.example;

import java.util.List;

/** Mirrors a typical value class. */
public abstract class Person {
  public abstract String name();
  public abstract int age();
  abstract List<String> nicknames();

  public static Person create(String name, int age) {
    return null;
  }

  @Override public String toString() {
    return "Person{" + name() + "}";
  }

  abstract static class Address {
    abstract String street();
    abstract String city();
  }

  public abstract String[] aliases();
}
"""


@pytest.fixture
def accessor_source() -> str:
    return ACCESSOR_SOURCE
