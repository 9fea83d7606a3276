"""Tests for the struct-based class file reader."""

import io
import struct

import pytest

from declorder_core.classfile import (
    ClassFileReader,
    list_abstract_no_arg_methods,
    parse_method_descriptor,
    read_class_file,
)
from declorder_core.classfile.constants import ACC_ABSTRACT, ACC_PRIVATE, ACC_PUBLIC, ACC_STATIC
from declorder_core.errors import ClassFormatError


def test_abstract_no_arg_methods_in_table_order(class_builder) -> None:
    builder = class_builder("com/example/Foo")
    builder.add_method("<init>", "()V", access=ACC_PUBLIC, code=b"\x2a\xb7\x00\x01\xb1")
    builder.add_method("foo", "()Ljava/lang/String;")
    builder.add_method("withParam", "(I)Ljava/lang/String;")
    builder.add_method("bar", "()I")
    builder.add_method("helper", "()I", access=ACC_PUBLIC | ACC_STATIC, code=b"\x03\xac")

    assert list_abstract_no_arg_methods(builder.build()) == ["foo", "bar"]


def test_void_methods_are_not_accessors(class_builder) -> None:
    builder = class_builder().add_abstract("foo:()Ljava/lang/String;", "run:()V", "baz:()[J")
    assert list_abstract_no_arg_methods(builder.build()) == ["foo", "baz"]


def test_fields_long_constants_and_interfaces_are_skipped(class_builder) -> None:
    builder = class_builder("com/example/Wide")
    builder.interfaces = ["java/io/Serializable", "java/lang/Comparable"]
    builder.long_constant(1 << 40)
    builder.add_field("serialVersionUID", "J", constant_value=True)
    builder.add_field("name", "Ljava/lang/String;")
    builder.add_abstract("name:()Ljava/lang/String;", "count:()J")

    class_file = read_class_file(builder.build())
    assert class_file.name == "com/example/Wide"
    assert class_file.major_version == 52
    assert [method.name for method in class_file.resolved_methods()] == ["name", "count"]


def test_reads_from_binary_stream(accessor_class) -> None:
    data = accessor_class("p/Stream", ["b", "a"])
    assert list_abstract_no_arg_methods(io.BytesIO(data)) == ["b", "a"]


def test_unknown_attributes_are_skipped_by_length(class_builder) -> None:
    builder = class_builder()
    builder.add_method(
        "foo",
        "()Z",
        access=ACC_PUBLIC | ACC_ABSTRACT,
        attributes=[("Vendor", b"\x00\x01{}\xff" * 3), ("Signature", b"\x00\x01")],
    )
    builder.add_method("bar", "()Z", attributes=[("Empty", b"")])
    assert list_abstract_no_arg_methods(builder.build()) == ["foo", "bar"]


def test_resolved_method_details(class_builder) -> None:
    builder = class_builder().add_abstract("pair:(ILjava/lang/String;)[Ljava/lang/Object;")
    method = read_class_file(builder.build()).resolved_methods()[0]
    assert method.parameters == ("I", "Ljava/lang/String;")
    assert method.return_type == "[Ljava/lang/Object;"
    assert method.is_abstract
    assert not method.is_abstract_no_arg_accessor


def test_bad_magic() -> None:
    with pytest.raises(ClassFormatError, match="bad magic"):
        read_class_file(b"\xca\xfe\xba\xbf" + b"\x00" * 20)


@pytest.mark.parametrize("cut", [3, 9, 20, -3])
def test_truncated_input_fails(accessor_class, cut: int) -> None:
    data = accessor_class("p/Cut", ["foo"])
    with pytest.raises(ClassFormatError, match="truncated"):
        read_class_file(data[:cut])


def test_unknown_constant_tag(class_builder) -> None:
    builder = class_builder()
    builder.raw_entry(struct.pack(">B", 2))
    with pytest.raises(ClassFormatError, match="unknown constant pool tag 2"):
        read_class_file(builder.build())


def test_later_constant_tags_are_skipped(class_builder) -> None:
    builder = class_builder()
    builder.raw_entry(struct.pack(">BBH", 15, 6, 1))  # MethodHandle
    builder.raw_entry(struct.pack(">BHH", 18, 0, 1))  # InvokeDynamic
    builder.raw_entry(struct.pack(">BH", 19, 1))  # Module
    builder.add_abstract("foo:()I")
    assert list_abstract_no_arg_methods(builder.build()) == ["foo"]


def test_method_name_must_resolve_to_utf8(class_builder) -> None:
    builder = class_builder()
    class_index = builder.class_ref("java/lang/String")
    builder.add_method("ignored", "()I", name_index=class_index)
    with pytest.raises(ClassFormatError, match="not a Utf8 entry"):
        list_abstract_no_arg_methods(builder.build())


def test_method_name_index_out_of_range(class_builder) -> None:
    builder = class_builder()
    builder.add_method("ignored", "()I", name_index=999)
    with pytest.raises(ClassFormatError, match="out of range"):
        list_abstract_no_arg_methods(builder.build())


def test_index_into_second_slot_of_long_is_rejected(class_builder) -> None:
    builder = class_builder()
    long_index = builder.long_constant(7)
    builder.add_method("ignored", "()I", name_index=long_index + 1)
    with pytest.raises(ClassFormatError, match="unusable slot"):
        list_abstract_no_arg_methods(builder.build())


def test_error_reports_offset() -> None:
    reader = ClassFileReader(b"\xca\xfe")
    with pytest.raises(ClassFormatError) as excinfo:
        reader.read_u4("magic")
    assert excinfo.value.offset == 0
    assert "(at byte 0)" in str(excinfo.value)


def test_modified_utf8_names(class_builder) -> None:
    builder = class_builder()
    raw = "café".encode("utf-8")
    index = builder.raw_entry(struct.pack(">BH", 1, len(raw)) + raw)
    builder.add_method("unused", "()I", name_index=index)
    assert list_abstract_no_arg_methods(builder.build()) == ["café"]


@pytest.mark.parametrize(
    ("descriptor", "parameters", "return_type"),
    [
        ("()V", [], "V"),
        ("()Ljava/lang/String;", [], "Ljava/lang/String;"),
        ("(IJ[[D)Z", ["I", "J", "[[D"], "Z"),
        ("(Ljava/util/List;C)[I", ["Ljava/util/List;", "C"], "[I"),
    ],
)
def test_parse_method_descriptor(descriptor: str, parameters: list[str], return_type: str) -> None:
    assert parse_method_descriptor(descriptor) == (parameters, return_type)


@pytest.mark.parametrize("descriptor", ["I", "(I", "(Ljava/lang/String)V", "(Q)V", "()", "()II"])
def test_malformed_method_descriptor(descriptor: str) -> None:
    with pytest.raises(ClassFormatError):
        parse_method_descriptor(descriptor)


def test_lone_surrogate_string_constant_does_not_break_the_class(class_builder) -> None:
    builder = class_builder("p/Foo")
    lone = builder.raw_entry(struct.pack(">BH", 1, 3) + b"\xed\xa0\x80")
    pair = builder.raw_entry(struct.pack(">BH", 1, 6) + b"\xed\xa0\xbd\xed\xb8\x80")
    builder.add_abstract("foo:()Ljava/lang/String;", "bar:()I")

    class_file = read_class_file(builder.build())
    assert class_file.pool.utf8(lone) == "\ud800"
    assert class_file.pool.utf8(pair) == "\U0001f600"
    assert [method.name for method in class_file.resolved_methods()] == ["foo", "bar"]


def test_access_flags_decide_abstractness(class_builder) -> None:
    builder = class_builder("p/Flags")
    builder.add_method("native", "()I", access=ACC_PUBLIC)
    builder.add_method("hidden", "()I", access=ACC_PRIVATE | ACC_ABSTRACT)
    builder.add_method("shared", "()I", access=ACC_STATIC)
    methods = read_class_file(builder.build()).resolved_methods()
    assert [method.is_abstract for method in methods] == [False, True, False]
    assert list_abstract_no_arg_methods(builder.build()) == ["hidden"]
