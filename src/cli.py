"""Command-line interface for depwarden."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from artifacts import load_graph, write_result
from artifacts.write import render_result
from contract.validation import GraphContractError, validate_graph
from rules.compiled import compile_rule_set
from rules.config import ConfigError, load_rule_set
from validate import evaluate
from verify.verify import verify_determinism


def _add_graph_path(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("graph", help="Dependency graph JSON document")


def _add_rules_path(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--rules",
        required=True,
        help="Rule set file (.json or .toml)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="depwarden")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log engine progress to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser(
        "validate", help="Validate a dependency graph against a rule set"
    )
    _add_graph_path(validate_parser)
    _add_rules_path(validate_parser)
    validate_parser.add_argument(
        "--out",
        default=None,
        help="Write the annotated graph here (default: stdout)",
    )
    validate_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Threads for the matching pass (default: rule set engine.workers)",
    )

    check_rules_parser = subparsers.add_parser(
        "check-rules", help="Load and compile a rule set"
    )
    check_rules_parser.add_argument("rules", help="Rule set file (.json or .toml)")

    check_graph_parser = subparsers.add_parser(
        "check-graph", help="Check a graph document against the graph contract"
    )
    _add_graph_path(check_graph_parser)

    verify_parser = subparsers.add_parser(
        "verify", help="Verify that validation results are deterministic"
    )
    _add_graph_path(verify_parser)
    _add_rules_path(verify_parser)

    return parser


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _resolve(path: str) -> Path:
    return Path(path).expanduser().resolve()


def _handle_validate(
    graph_path: str, rules_path: str, out: str | None, workers: int | None
) -> int:
    rule_set = load_rule_set(_resolve(rules_path))
    graph = load_graph(_resolve(graph_path))

    result = evaluate(graph, rule_set, workers=workers)

    for violation in result.violations:
        line = (
            f"{violation.rule.severity} {violation.rule.name}: "
            f"{violation.from_} -> {violation.to}"
        )
        if violation.cycle:
            line += f" (cycle: {' -> '.join(violation.cycle)})"
        if violation.via:
            line += f" (via: {' -> '.join(violation.via)})"
        sys.stderr.write(line + "\n")

    if out is None:
        sys.stdout.buffer.write(render_result(result.graph) + b"\n")
    else:
        write_result(_resolve(out), result.graph)

    return 1 if result.graph.summary.error else 0


def _handle_check_rules(rules_path: str) -> int:
    rule_set = load_rule_set(_resolve(rules_path))
    compiled = compile_rule_set(rule_set)
    sys.stdout.write(
        f"{len(compiled.forbidden)} forbidden, {len(compiled.allowed)} allowed rules\n"
    )
    return 0


def _handle_check_graph(graph_path: str) -> int:
    result = validate_graph(load_graph(_resolve(graph_path)))
    for warning in result.warnings:
        sys.stderr.write(f"warning: {warning.location}: {warning.message}\n")
    if result.errors:
        for error in result.errors:
            sys.stderr.write(f"{error.location}: {error.message}\n")
        return 1
    return 0


def _handle_verify(graph_path: str, rules_path: str) -> int:
    rule_set = load_rule_set(_resolve(rules_path))
    graph = load_graph(_resolve(graph_path))
    result = verify_determinism(graph, rule_set)
    if not result.ok:
        for section in result.mismatches:
            sys.stderr.write(f"mismatches: {section}\n")
        if result.input_mutated:
            sys.stderr.write("input graph was modified\n")
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        if args.command == "validate":
            return _handle_validate(args.graph, args.rules, args.out, args.workers)

        if args.command == "check-rules":
            return _handle_check_rules(args.rules)

        if args.command == "check-graph":
            return _handle_check_graph(args.graph)

        if args.command == "verify":
            return _handle_verify(args.graph, args.rules)
    except (ConfigError, GraphContractError, OSError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
