"""Read method tables straight out of class file bytes.

No class loading and no bytecode library: the header, the constant pool and
the member tables are walked with :mod:`struct`. Fields and every attribute
are skipped by their self-declared lengths without looking inside, so class
files carrying attributes this reader has never heard of still parse.
"""

from __future__ import annotations

import logging
import struct
from typing import BinaryIO

from ..errors import ClassFormatError
from .constants import (
    CONSTANT_CLASS,
    CONSTANT_NAME_AND_TYPE,
    CONSTANT_UTF8,
    FIXED_ENTRY_WIDTHS,
    MAGIC,
    WIDE_TAGS,
)
from .types import (
    ClassEntry,
    ClassFile,
    ConstantPool,
    ConstantPoolEntry,
    MethodInfo,
    NameAndTypeEntry,
    OtherEntry,
    Utf8Entry,
)

__all__ = ["ClassFileReader", "read_class_file", "list_abstract_no_arg_methods"]

logger = logging.getLogger(__name__)

_U2 = struct.Struct(">H")
_U4 = struct.Struct(">I")


class ClassFileReader:
    """Sequential big-endian reader over one class file."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    # ------------------------------------------------------------------
    # Primitive reads
    # ------------------------------------------------------------------

    def _require(self, count: int, what: str) -> None:
        if self._pos + count > len(self._data):
            raise ClassFormatError(f"truncated {what}", self._pos)

    def read_u1(self, what: str = "u1") -> int:
        self._require(1, what)
        value = self._data[self._pos]
        self._pos += 1
        return value

    def read_u2(self, what: str = "u2") -> int:
        self._require(2, what)
        value = _U2.unpack_from(self._data, self._pos)[0]
        self._pos += 2
        return value

    def read_u4(self, what: str = "u4") -> int:
        self._require(4, what)
        value = _U4.unpack_from(self._data, self._pos)[0]
        self._pos += 4
        return value

    def read_bytes(self, count: int, what: str = "bytes") -> bytes:
        self._require(count, what)
        value = self._data[self._pos : self._pos + count]
        self._pos += count
        return value

    def skip(self, count: int, what: str = "bytes") -> None:
        self._require(count, what)
        self._pos += count

    # ------------------------------------------------------------------
    # Structures
    # ------------------------------------------------------------------

    def read(self) -> ClassFile:
        magic = self.read_u4("magic")
        if magic != MAGIC:
            raise ClassFormatError(f"bad magic 0x{magic:08X}", 0)
        minor = self.read_u2("minor version")
        major = self.read_u2("major version")
        pool = self._read_constant_pool()
        access_flags = self.read_u2("access flags")
        this_class = self.read_u2("this_class")
        super_class = self.read_u2("super_class")
        interfaces_count = self.read_u2("interfaces count")
        self.skip(2 * interfaces_count, "interfaces")
        self._skip_members("field")
        methods = self._read_methods()
        logger.debug(
            "read class file v%s.%s: %s pool slots, %s methods",
            major,
            minor,
            len(pool),
            len(methods),
        )
        return ClassFile(
            minor_version=minor,
            major_version=major,
            access_flags=access_flags,
            this_class=this_class,
            super_class=super_class,
            pool=pool,
            methods=methods,
        )

    def _read_constant_pool(self) -> ConstantPool:
        count = self.read_u2("constant pool count")
        if count == 0:
            raise ClassFormatError("constant pool count is 0", self._pos - 2)
        entries: list[ConstantPoolEntry | None] = [None] * count
        index = 1
        while index < count:
            offset = self._pos
            tag = self.read_u1("constant pool tag")
            if tag == CONSTANT_UTF8:
                length = self.read_u2("utf8 length")
                entries[index] = Utf8Entry(_decode_modified_utf8(self.read_bytes(length, "utf8 bytes")))
            elif tag == CONSTANT_CLASS:
                entries[index] = ClassEntry(self.read_u2("class name index"))
            elif tag == CONSTANT_NAME_AND_TYPE:
                name_index = self.read_u2("name index")
                entries[index] = NameAndTypeEntry(name_index, self.read_u2("descriptor index"))
            elif tag in FIXED_ENTRY_WIDTHS:
                self.skip(FIXED_ENTRY_WIDTHS[tag], f"constant tag {tag}")
                entries[index] = OtherEntry(tag)
            else:
                raise ClassFormatError(f"unknown constant pool tag {tag} at index {index}", offset)
            index += 2 if tag in WIDE_TAGS else 1
        if index != count:
            raise ClassFormatError("wide constant occupies the last pool slot", self._pos)
        return ConstantPool(entries)

    def _skip_attributes(self, owner: str) -> None:
        count = self.read_u2(f"{owner} attributes count")
        for _ in range(count):
            self.skip(2, f"{owner} attribute name")
            length = self.read_u4(f"{owner} attribute length")
            self.skip(length, f"{owner} attribute body")

    def _skip_members(self, kind: str) -> None:
        count = self.read_u2(f"{kind}s count")
        for _ in range(count):
            self.skip(6, f"{kind} header")
            self._skip_attributes(kind)

    def _read_methods(self) -> list[MethodInfo]:
        count = self.read_u2("methods count")
        methods: list[MethodInfo] = []
        for _ in range(count):
            access_flags = self.read_u2("method access flags")
            name_index = self.read_u2("method name index")
            descriptor_index = self.read_u2("method descriptor index")
            self._skip_attributes("method")
            methods.append(MethodInfo(access_flags, name_index, descriptor_index))
        return methods


def read_class_file(source: bytes | bytearray | BinaryIO) -> ClassFile:
    """Parse a class file given as bytes or as a binary stream."""
    data = source if isinstance(source, (bytes, bytearray)) else source.read()
    return ClassFileReader(bytes(data)).read()


def list_abstract_no_arg_methods(source: bytes | bytearray | BinaryIO) -> list[str]:
    """Names of the abstract, parameterless, non-void methods, in method table order.

    Raises :class:`ClassFormatError` if the bytes are not a well-formed class
    file or a method's name or descriptor does not resolve.
    """
    class_file = read_class_file(source)
    return [
        method.name
        for method in class_file.resolved_methods()
        if method.is_abstract_no_arg_accessor
    ]


def _decode_modified_utf8(raw: bytes) -> str:
    # The format encodes NUL as C0 80 and supplementary characters as two
    # 3-byte surrogates; normalise both to what Python's codec accepts. Lone
    # surrogates are legal in string constants and are kept as they are.
    try:
        text = raw.replace(b"\xc0\x80", b"\x00").decode("utf-8", "surrogatepass")
        return text.encode("utf-16", "surrogatepass").decode("utf-16", "surrogatepass")
    except UnicodeError as exc:
        raise ClassFormatError(f"invalid utf8 constant: {exc}") from exc
