"""Minimal class file reader used for binary order recovery."""

from .reader import ClassFileReader, list_abstract_no_arg_methods, read_class_file
from .types import ClassFile, ConstantPool, MethodInfo, ResolvedMethod, parse_method_descriptor

__all__ = [
    "ClassFileReader",
    "ClassFile",
    "ConstantPool",
    "MethodInfo",
    "ResolvedMethod",
    "list_abstract_no_arg_methods",
    "parse_method_descriptor",
    "read_class_file",
]
