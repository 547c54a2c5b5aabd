"""CLI entrypoint for the OID registry."""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
import sys
from typing import Optional

from oid_registry.config import generator_context, load_registry_config
from oid_registry.generators import (
    IMPLEMENTATION_KEYS,
    IMPLEMENTATIONS,
    decode_tag_payload,
    generate_implementation,
    write_download_bundle,
)
from oid_registry.session import RegistrySession
from oid_registry.store import JsonFileStore
from oid_registry.suggestions import SuggestionError, build_suggestion_client_from_config, suggest_child_nodes
from oid_registry.types import RegistryConfig
from oid_tree.builder import NodeDraft, NodeValidationError
from oid_tree.identifiers import describe_identifier
from oid_tree.tree import NODE_STATUSES, OidNode, find_by_id, find_by_identifier
from oid_tree.visualizer import format_node_line, node_to_dict, print_node_details, print_oid_tree


LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_INPUT_ERROR = 2
EXIT_SERVICE_ERROR = 3
EXIT_NOT_FOUND = 4


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Browse, search, and extend the OID registry.")
    parser.add_argument(
        "--log-level",
        default=os.getenv("OID_LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="Path to the registry store file. Defaults to OID_STORE_PATH.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    show_parser = sub.add_parser("show", help="Print the tree or one node's details")
    show_parser.add_argument("--node", type=str, default=None, help="Node id to show")
    show_parser.add_argument("--depth", type=int, default=None, help="Maximum tree depth to print")
    show_parser.add_argument("--json", action="store_true", help="Print JSON instead of text")

    search_parser = sub.add_parser("search", help="Search names, descriptions, ids, and identifiers")
    search_parser.add_argument("query", type=str, help="Substring to search for")

    path_parser = sub.add_parser("path", help="Show the path from the root to a node")
    path_parser.add_argument("node_id", type=str, help="Target node id")

    inspect_parser = sub.add_parser("inspect", help="Break an identifier down into arcs")
    inspect_parser.add_argument("identifier", type=str, help="Dotted identifier")

    add_parser = sub.add_parser("add", help="Append a child node under a parent")
    add_parser.add_argument("--parent", type=str, required=True, help="Parent node id")
    add_parser.add_argument("--name", type=str, required=True, help="Node name")
    add_parser.add_argument("--description", type=str, required=True, help="Node description")
    add_parser.add_argument("--kind", choices=["branch", "leaf"], default="leaf", help="Node type")
    add_parser.add_argument("--status", choices=list(NODE_STATUSES), default="active", help="Node status")
    add_parser.add_argument("--use-case", action="append", default=[], help="Use case; repeatable")

    generate_parser = sub.add_parser("generate", help="Print an integration snippet for a node")
    generate_parser.add_argument("node_id", type=str, help="Node id")
    generate_parser.add_argument(
        "--format",
        choices=[*IMPLEMENTATION_KEYS, "all"],
        default="all",
        help="Snippet format.",
    )

    export_parser = sub.add_parser("export", help="Write all snippets for a node to one text file")
    export_parser.add_argument("node_id", type=str, help="Node id")
    export_parser.add_argument("--output-dir", type=Path, default=Path("."), help="Output directory")

    suggest_parser = sub.add_parser("suggest", help="Ask an LLM for child node suggestions")
    suggest_parser.add_argument("--parent", type=str, required=True, help="Parent node id")
    suggest_parser.add_argument("--use-case", type=str, required=True, help="Use case description")
    suggest_parser.add_argument(
        "--accept",
        type=int,
        default=None,
        help="Add suggestion N (1-based) to the registry.",
    )

    scan_parser = sub.add_parser("scan", help="Decode a QR tagging payload and match it to the registry")
    scan_parser.add_argument("payload", type=Path, help="Payload file, or - for stdin")

    sub.add_parser("reset", help="Restore the seed registry")
    return parser


def _configure_logging(level: str) -> None:
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="[%(levelname)s] %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _require_node(session: RegistrySession, node_id: str) -> Optional[OidNode]:
    node = find_by_id(session.tree, node_id)
    if node is None:
        print(f"Node not found: {node_id}", file=sys.stderr)
    return node


def _cmd_show(session: RegistrySession, args: argparse.Namespace) -> int:
    if args.node is None:
        if args.json:
            print(json.dumps(node_to_dict(session.tree), ensure_ascii=False, indent=2))
        else:
            print_oid_tree(session.tree, max_depth=args.depth)
        return EXIT_OK

    node = _require_node(session, args.node)
    if node is None:
        return EXIT_NOT_FOUND
    session.select(node.id)
    if args.json:
        print(json.dumps(node_to_dict(node), ensure_ascii=False, indent=2))
    else:
        print_node_details(node, session.selected_path)
    return EXIT_OK


def _cmd_search(session: RegistrySession, args: argparse.Namespace) -> int:
    results = session.search(args.query)
    print(f"{len(results)} match(es) for {args.query!r}")
    for node in results:
        print(f"  {format_node_line(node)}")
    return EXIT_OK


def _cmd_path(session: RegistrySession, args: argparse.Namespace) -> int:
    node = _require_node(session, args.node_id)
    if node is None:
        return EXIT_NOT_FOUND
    session.select(node.id)
    for depth, step in enumerate(session.selected_path):
        print(f"{'  ' * depth}{format_node_line(step)}")
    return EXIT_OK


def _cmd_inspect(session: RegistrySession, args: argparse.Namespace) -> int:
    try:
        info = describe_identifier(args.identifier, session.root_prefix, tree=session.tree)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_INPUT_ERROR

    node = find_by_identifier(session.tree, info.identifier)

    print(f"identifier:   {info.identifier}")
    print(f"urn:          {info.urn}")
    print(f"arcs:         {'.'.join(str(arc) for arc in info.arcs)} (depth {info.depth})")
    print(f"authority:    {info.registration_authority}")
    print(f"in namespace: {info.in_namespace}")
    if info.pen is not None:
        print(f"pen:          {info.pen}")
    if info.branch_arc is not None:
        print(f"branch:       {info.branch_arc} ({info.branch_name or 'unregistered'})")
    print(f"registered:   {node.id if node is not None else 'no'}")
    return EXIT_OK


def _cmd_add(session: RegistrySession, args: argparse.Namespace) -> int:
    draft = NodeDraft(
        name=args.name,
        description=args.description,
        kind=args.kind,
        status=args.status,
        use_cases=list(args.use_case),
    )
    try:
        node = session.add_child(draft, parent_id=args.parent)
    except NodeValidationError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_INPUT_ERROR
    except OSError as exc:
        print(f"Failed to persist registry: {exc}", file=sys.stderr)
        return EXIT_IO_ERROR

    print(f"OID node added: {format_node_line(node)}")
    return EXIT_OK


def _cmd_generate(session: RegistrySession, args: argparse.Namespace, config: RegistryConfig) -> int:
    node = _require_node(session, args.node_id)
    if node is None:
        return EXIT_NOT_FOUND

    context = generator_context(config)
    keys = IMPLEMENTATION_KEYS if args.format == "all" else (args.format,)
    for impl in IMPLEMENTATIONS:
        if impl.key not in keys:
            continue
        print(f"# {impl.title} ({impl.language}): {impl.description}")
        print(generate_implementation(impl.key, node, context))
        print()
    return EXIT_OK


def _cmd_export(session: RegistrySession, args: argparse.Namespace, config: RegistryConfig) -> int:
    node = _require_node(session, args.node_id)
    if node is None:
        return EXIT_NOT_FOUND
    try:
        output_path = write_download_bundle(node, args.output_dir, generator_context(config))
    except OSError as exc:
        print(f"Failed to write implementations: {exc}", file=sys.stderr)
        return EXIT_IO_ERROR
    print(f"Implementations exported to: {output_path}")
    return EXIT_OK


def _cmd_suggest(session: RegistrySession, args: argparse.Namespace, config: RegistryConfig) -> int:
    parent = _require_node(session, args.parent)
    if parent is None:
        return EXIT_NOT_FOUND

    try:
        client, model = build_suggestion_client_from_config(config)
        suggestions = suggest_child_nodes(args.use_case, parent, client, model)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_INPUT_ERROR
    except SuggestionError as exc:
        LOGGER.warning("Suggestion request failed: %s", exc)
        print(f"Failed to get suggestions: {exc}", file=sys.stderr)
        return EXIT_SERVICE_ERROR

    for index, suggestion in enumerate(suggestions, start=1):
        print(f"{index}. {suggestion.name} [{suggestion.kind}]")
        print(f"   {suggestion.description}")
        for use_case in suggestion.use_cases:
            print(f"   - {use_case}")

    if args.accept is None:
        return EXIT_OK
    if not 1 <= args.accept <= len(suggestions):
        print(f"--accept must be between 1 and {len(suggestions)}.", file=sys.stderr)
        return EXIT_INPUT_ERROR

    try:
        node = session.add_child(suggestions[args.accept - 1].to_draft(), parent_id=parent.id)
    except NodeValidationError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_INPUT_ERROR
    except OSError as exc:
        print(f"Failed to persist registry: {exc}", file=sys.stderr)
        return EXIT_IO_ERROR
    print(f"OID node added: {format_node_line(node)}")
    return EXIT_OK


def _cmd_scan(session: RegistrySession, args: argparse.Namespace) -> int:
    try:
        text = sys.stdin.read() if str(args.payload) == "-" else args.payload.read_text(encoding="utf-8")
    except OSError as exc:
        print(f"Failed to read payload: {exc}", file=sys.stderr)
        return EXIT_IO_ERROR

    try:
        payload = decode_tag_payload(text, session.root_prefix)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_INPUT_ERROR

    print(f"identifier:   {payload.identifier}")
    print(f"name:         {payload.name}")
    print(f"issuer:       {payload.issuer or 'unknown'}")
    print(f"timestamp:    {payload.timestamp or 'unknown'}")
    print(f"in namespace: {payload.in_namespace}")
    node = find_by_identifier(session.tree, payload.identifier)
    if node is None:
        print("registered:   no")
        return EXIT_NOT_FOUND
    print(f"registered:   {format_node_line(node)}")
    if node.name != payload.name:
        LOGGER.warning("Payload name %r differs from registry name %r.", payload.name, node.name)
    return EXIT_OK


def _cmd_reset(session: RegistrySession) -> int:
    try:
        session.reset()
    except OSError as exc:
        print(f"Failed to persist registry: {exc}", file=sys.stderr)
        return EXIT_IO_ERROR
    print("Registry reset to seed tree.")
    return EXIT_OK


def run_cli(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    config = load_registry_config(load_dotenv=True)
    store_path = args.store or config.store_path
    LOGGER.debug(
        "Runtime config loaded. root_prefix=%s store=%s organization=%s",
        config.root_prefix,
        store_path,
        config.organization_name,
    )

    session = RegistrySession(JsonFileStore(store_path), root_prefix=config.root_prefix)
    try:
        session.load()
    except OSError as exc:
        print(f"Failed to read registry store: {exc}", file=sys.stderr)
        return EXIT_IO_ERROR

    if args.command == "show":
        return _cmd_show(session, args)
    if args.command == "search":
        return _cmd_search(session, args)
    if args.command == "path":
        return _cmd_path(session, args)
    if args.command == "inspect":
        return _cmd_inspect(session, args)
    if args.command == "add":
        return _cmd_add(session, args)
    if args.command == "generate":
        return _cmd_generate(session, args, config)
    if args.command == "export":
        return _cmd_export(session, args, config)
    if args.command == "suggest":
        return _cmd_suggest(session, args, config)
    if args.command == "scan":
        return _cmd_scan(session, args)
    return _cmd_reset(session)


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
