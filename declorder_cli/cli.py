"""Command line surface over the declorder library."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from declorder_core import __version__
from declorder_core.classfile import read_class_file
from declorder_core.config import RecoverySettings, SettingsResolver
from declorder_core.errors import ClassFormatError, ConfigurationError
from declorder_core.events import Event, EventBus
from declorder_core.recovery import PropertyReorderer
from declorder_core.source import DeclarationScanner, JavaLexer, declared_package, tokenize
from declorder_core.types import Member, TypeIdentity

logger = logging.getLogger("declorder_cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="declorder",
        description="Recover the declaration order of abstract accessors from Java sources or class files.",
    )
    parser.add_argument("--version", action="version", version=f"declorder v{__version__}")
    parser.add_argument("--log-level", dest="log_level", help="logging level (default from settings)")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = False

    paths = argparse.ArgumentParser(add_help=False)
    paths.add_argument(
        "--source-path",
        action="append",
        dest="source_path",
        help="source root to search (repeatable)",
    )
    paths.add_argument(
        "--class-path",
        action="append",
        dest="class_path",
        help="class directory, .jar or .zip to search (repeatable)",
    )
    paths.add_argument("--encoding", help="source file encoding (default from settings)")

    formats = argparse.ArgumentParser(add_help=False)
    formats.add_argument("--format", choices=["text", "json"], default="text")

    tokens_cmd = subparsers.add_parser("tokens", parents=[formats], help="print the tokens of a Java file")
    tokens_cmd.add_argument("file", type=Path, help="Java source file")
    tokens_cmd.add_argument("--comments", action="store_true", help="include comment tokens")
    tokens_cmd.add_argument("--encoding", help="source file encoding (default from settings)")
    tokens_cmd.set_defaults(func=_handle_tokens)

    scan_cmd = subparsers.add_parser("scan", parents=[formats], help="list abstract methods per type in a Java file")
    scan_cmd.add_argument("file", type=Path, help="Java source file")
    scan_cmd.add_argument("--package", help="package name (default: the file's package declaration)")
    scan_cmd.add_argument("--encoding", help="source file encoding (default from settings)")
    scan_cmd.set_defaults(func=_handle_scan)

    methods_cmd = subparsers.add_parser("methods", parents=[formats], help="list abstract no-arg methods of a class file")
    methods_cmd.add_argument("file", type=Path, help="compiled .class file")
    methods_cmd.add_argument("--all", action="store_true", help="list every method with flags and descriptor")
    methods_cmd.set_defaults(func=_handle_methods)

    order_cmd = subparsers.add_parser("order", parents=[paths, formats], help="recover the method order of a type")
    order_cmd.add_argument("type", help="type name, e.g. com.example.Outer.Inner or com.example.Outer$Inner")
    order_cmd.set_defaults(func=_handle_order)

    reorder_cmd = subparsers.add_parser(
        "reorder",
        parents=[paths],
        help="reorder a JSON member list ([{owner, name, signature}]) read from a file or '-'",
    )
    reorder_cmd.add_argument("members", help="JSON file with the member list, or '-' for stdin")
    reorder_cmd.set_defaults(func=_handle_reorder)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0
    try:
        settings = _resolve_settings(args)
    except ConfigurationError as exc:
        print(f"[declorder] error: {exc}")
        return 1
    _configure_logging(args.log_level or settings.log_level)
    return func(args, settings)


def _resolve_settings(args: argparse.Namespace) -> RecoverySettings:
    resolver = SettingsResolver(
        cli_overrides={
            "source_path": getattr(args, "source_path", None),
            "class_path": getattr(args, "class_path", None),
            "encoding": getattr(args, "encoding", None),
            "log_level": getattr(args, "log_level", None),
        }
    )
    return resolver.resolve()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def _read_source(path: Path, encoding: str) -> str | None:
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"[declorder] error: cannot read {path}: {exc}")
        return None


def _handle_tokens(args: argparse.Namespace, settings: RecoverySettings) -> int:
    text = _read_source(args.file, settings.encoding)
    if text is None:
        return 1
    tokens = [token for token in tokenize(text) if args.comments or token.significant]
    if args.format == "json":
        payload = [{"line": token.line, "kind": token.kind.value, "text": token.text} for token in tokens]
        print(json.dumps(payload, indent=2))
        return 0
    for token in tokens:
        print(f"[declorder:tokens] {token.line:>5} {token.kind.value:<14} {token.text}")
    return 0


def _handle_scan(args: argparse.Namespace, settings: RecoverySettings) -> int:
    text = _read_source(args.file, settings.encoding)
    if text is None:
        return 1
    package = args.package if args.package is not None else declared_package(tokenize(text))
    lexer = JavaLexer(text)
    scanner = DeclarationScanner(package)
    orders = scanner.scan(lexer)
    complete = scanner.complete and not lexer.truncated
    if args.format == "json":
        print(json.dumps({"package": package, "complete": complete, "types": orders}, indent=2))
    else:
        for type_name, names in orders.items():
            print(f"[declorder:scan] {type_name}: {', '.join(names) or '-'}")
        if not complete:
            print(f"[declorder:scan] warning: {args.file} did not scan cleanly; the listing may be partial")
    return 0 if complete else 1


def _handle_methods(args: argparse.Namespace, _: RecoverySettings) -> int:
    try:
        class_file = read_class_file(args.file.read_bytes())
        methods = class_file.resolved_methods()
        class_name = class_file.name
    except (OSError, ClassFormatError) as exc:
        print(f"[declorder:methods] error: {args.file}: {exc}")
        return 1
    selected = methods if args.all else [method for method in methods if method.is_abstract_no_arg_accessor]
    if args.format == "json":
        payload: dict[str, Any] = {"class": class_name}
        if args.all:
            payload["methods"] = [
                {"name": method.name, "descriptor": method.descriptor, "access_flags": method.access_flags}
                for method in selected
            ]
        else:
            payload["methods"] = [method.name for method in selected]
        print(json.dumps(payload, indent=2))
        return 0
    print(f"[declorder:methods] {class_name}")
    for method in selected:
        if args.all:
            print(f"[declorder:methods] 0x{method.access_flags:04x} {method.name}{method.descriptor}")
        else:
            print(f"[declorder:methods] {method.name}")
    return 0


def _handle_order(args: argparse.Namespace, settings: RecoverySettings) -> int:
    try:
        owner = TypeIdentity.parse(args.type)
    except ValueError as exc:
        print(f"[declorder:order] error: {exc}")
        return 1
    order = settings.build_recovery().recover_order(owner)
    if order is None:
        if args.format == "json":
            print(json.dumps({"type": owner.qualified_name, "order": None}))
        else:
            print(f"[declorder:order] order of {owner} is unavailable")
        return 1
    if args.format == "json":
        print(json.dumps({"type": order.owner, "origin": order.origin, "order": list(order)}, indent=2))
        return 0
    print(f"[declorder:order] {order.owner} (from {order.origin})")
    for index, name in enumerate(order):
        print(f"[declorder:order] {index:>3} {name}")
    return 0


def _handle_reorder(args: argparse.Namespace, settings: RecoverySettings) -> int:
    try:
        raw = sys.stdin.read() if args.members == "-" else Path(args.members).read_text(encoding="utf-8")
        members = _parse_members(json.loads(raw))
    except (OSError, ValueError) as exc:
        print(f"[declorder:reorder] error: {exc}")
        return 1

    def log_skipped(event: Event) -> None:
        logger.info("kept %s as supplied: %s", event.owner, event.payload["reason"])

    events = EventBus()
    events.on("run_skipped", log_skipped)
    reorderer: PropertyReorderer[Member] = PropertyReorderer(settings.build_recovery(events), events=events)
    result = reorderer.reorder(members)
    payload = [
        {"owner": member.owner.qualified_name, "name": member.name, "signature": member.full_signature}
        for member in result
    ]
    print(json.dumps(payload, indent=2))
    return 0


def _parse_members(data: Any) -> list[Member]:
    if not isinstance(data, list):
        raise ValueError("member list must be a JSON array")
    members: list[Member] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict) or "owner" not in item or "name" not in item:
            raise ValueError(f"member #{index} needs 'owner' and 'name'")
        members.append(
            Member(
                owner=TypeIdentity.parse(str(item["owner"])),
                name=str(item["name"]),
                full_signature=str(item.get("signature", "")),
            )
        )
    return members
