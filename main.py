"""shapeql: compile, validate and inspect JSON shape definitions.

Usage:
    python main.py --shape FILE --mode edges --focus IRI [--order -ex:name] [--offset N] [--limit N]
    python main.py --shape FILE --mode stats|items --focus IRI [--path ex:p/ex:q]
    python main.py --shape FILE --mode validate --focus IRI --data FILE [--format turtle]
    python main.py --shape FILE --mode outline --focus IRI
    python main.py --shape FILE --mode optimize

Guards are resolved with --context axis=value[,value...] (repeatable).
"""
from __future__ import annotations

import argparse
import logging
import os
import sys

logger = logging.getLogger("shapeql")

MODES = ["edges", "stats", "items", "validate", "outline", "optimize"]


def parse_context(entries: list[str]) -> dict[str, set[str]]:
    """Parse ``axis=v1,v2`` entries into an axis assignment."""
    context: dict[str, set[str]] = {}

    for entry in entries or []:
        axis, sep, values = entry.partition("=")
        if not sep or not axis.strip():
            raise ValueError(f"malformed context entry {entry!r}: expected axis=value[,value...]")
        context.setdefault(axis.strip(), set()).update(
            value.strip() for value in values.split(",") if value.strip()
        )

    return context


def run(args: argparse.Namespace) -> tuple[str, int]:
    """Execute a command.

    Returns:
        (output text, exit status)
    """
    from shapeql.compiler.sparql import compile_query
    from shapeql.config import CompilerConfig
    from shapeql.parser.json_parser import parse_shape_file
    from shapeql.probe.optimizer import optimize
    from shapeql.probe.outliner import outline
    from shapeql.probe.redactor import redact
    from shapeql.schema.common import parse_path
    from shapeql.schema.query import Edges, Items, Stats, parse_order
    from shapeql.serializer.json_serializer import serialize_json, serialize_trace

    shape = redact(parse_shape_file(args.shape), parse_context(args.context))

    if args.mode == "optimize":
        return serialize_json(optimize(shape)), 0

    if not args.focus:
        raise ValueError(f"--focus is required in {args.mode} mode")

    if args.mode == "validate":
        from shapeql.parser.rdf_parser import parse_data_file
        from shapeql.validator.validator import validate

        if not args.data:
            raise ValueError("--data is required in validate mode")

        trace = validate(shape, _focus(args.focus), parse_data_file(args.data, format=args.format))
        return serialize_trace(trace), 0 if trace.is_empty() else 1

    if args.mode == "outline":
        graph = outline(optimize(shape), _focus(args.focus))
        return graph.serialize(format=args.format), 0

    config = CompilerConfig.from_env()

    if args.sampling is not None:
        config = CompilerConfig(
            sampling=args.sampling,
            container=config.container,
            label=config.label,
            prefixes=config.prefixes,
        )

    if args.mode == "edges":
        query = Edges(shape, tuple(parse_order(order) for order in args.order or []), args.offset, args.limit)
    elif args.mode == "stats":
        query = Stats(shape, parse_path(args.path))
    elif args.mode == "items":
        query = Items(shape, parse_path(args.path))
    else:
        raise ValueError(f"Unknown mode: {args.mode!r}")

    return compile_query(args.focus, query, config), 0


def _focus(value: str):
    from rdflib import URIRef

    return URIRef(value)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Linked-data shapes to SPARQL compiler and validator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--shape", "-s",
        required=True,
        help="JSON shape file",
    )
    parser.add_argument(
        "--mode", "-m",
        choices=MODES,
        required=True,
        help="Operation to perform",
    )
    parser.add_argument(
        "--focus", "-f",
        help="Focus IRI (container for queries, resource for validation and outlines)",
    )
    parser.add_argument(
        "--data", "-d",
        help="RDF data file to validate",
    )
    parser.add_argument(
        "--format",
        default="turtle",
        help="RDF format of data and outlines (default: turtle)",
    )
    parser.add_argument(
        "--order",
        action="append",
        help="Sort criterion, e.g. +ex:name or -ex:address/ex:city (repeatable)",
    )
    parser.add_argument(
        "--offset",
        type=int,
        default=0,
        help="Number of resources to skip",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=0,
        help="Maximum number of resources (0 for no limit)",
    )
    parser.add_argument(
        "--path",
        default="",
        help="Property path for stats and items queries, e.g. ex:address/ex:city",
    )
    parser.add_argument(
        "--context", "-c",
        action="append",
        help="Guard assignment axis=value[,value...] (repeatable)",
    )
    parser.add_argument(
        "--sampling",
        type=int,
        help="Maximum number of resources sampled by queries (overrides SHAPEQL_SAMPLING)",
    )
    parser.add_argument(
        "--output", "-o",
        help="Output file path (default: stdout)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug messages",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        result, status = run(args)
    except (ValueError, TypeError, OSError, RuntimeError) as e:
        logger.debug("command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.output:
        os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(result)
    else:
        print(result)

    return status


if __name__ == "__main__":
    sys.exit(main())
