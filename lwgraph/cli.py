# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
lwgraph Command Line Interface

    lwgraph check MODEL.json [--steps N]
    lwgraph run MODEL.json INPUTS.json [--output NAME]

`check` dry-runs every declared output on zero-filled inputs of the
declared widths. `run` evaluates one output on the inputs file, which
holds {"inputs": {...}, "input_sequences": {...}}.
"""

from __future__ import annotations

import argparse
import json
import sys
import time

from lwgraph.errors import EvaluationError, LwGraphError
from lwgraph.observability import GraphLogger, Verbosity


def main(argv=None):
    """Main entry point for the lwgraph CLI."""
    parser = argparse.ArgumentParser(
        prog="lwgraph",
        description="lwgraph - frozen neural network evaluation",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Increase log verbosity (repeat for debug output)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit log lines as JSON",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    check_parser = subparsers.add_parser(
        "check",
        help="Build a model and dry-run every output on zero inputs",
    )
    check_parser.add_argument("model", help="JSON model description")
    check_parser.add_argument(
        "--steps",
        type=int,
        default=5,
        help="Time steps used for input sequences (default: 5)",
    )

    run_parser = subparsers.add_parser(
        "run",
        help="Evaluate a model on inputs from a JSON file",
    )
    run_parser.add_argument("model", help="JSON model description")
    run_parser.add_argument("inputs", help="JSON file with inputs and input_sequences")
    run_parser.add_argument(
        "--output",
        default=None,
        help="Output to evaluate (default: the model's default output)",
    )
    run_parser.add_argument(
        "--default",
        default="",
        help="Default output name, required when the model has several",
    )

    args = parser.parse_args(argv)

    if args.version:
        from lwgraph import __version__

        print(f"lwgraph v{__version__}")
        return 0

    logger = GraphLogger.get()
    if args.verbose:
        logger.set_verbosity(min(Verbosity.WARNING + args.verbose, Verbosity.DEBUG))
    logger.set_json_format(args.json_logs)

    if args.command == "check":
        return _run_guarded(_check, args)

    if args.command == "run":
        return _run_guarded(_evaluate, args)

    parser.print_help()
    return 0


def _run_guarded(command, args) -> int:
    try:
        return command(args)
    except LwGraphError as e:
        GraphLogger.get().error(e.message, component="cli", operation=args.command)
        print(str(e), file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _check(args) -> int:
    from lwgraph.core import DummySource, Graph
    from lwgraph.parse import parse_json_graph

    with open(args.model) as f:
        config = parse_json_graph(f)

    graph = Graph(config.nodes, config.layers)
    source = DummySource(
        [len(node.variables) for node in config.inputs],
        [(args.steps, len(node.variables)) for node in config.input_sequences],
    )

    print(graph.summary())
    failed = 0
    for name, output in config.outputs.items():
        result = graph.try_compute(source, output.node_index)
        if not result.ok():
            print(f"  {name}: FAILED {result.status.message}")
            failed += 1
        elif len(result.value) != len(output.labels):
            print(
                f"  {name}: FAILED {len(result.value)} values "
                f"for {len(output.labels)} labels"
            )
            failed += 1
        else:
            print(f"  {name}: ok, {len(output.labels)} outputs")
    return 1 if failed else 0


def _evaluate(args) -> int:
    from lwgraph.lightweight import LightweightGraph

    with open(args.model) as f:
        graph = LightweightGraph.from_json(f, default_output=args.default)
    with open(args.inputs) as f:
        try:
            data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise EvaluationError(f"invalid JSON inputs file: {e}") from e
    if not isinstance(data, dict):
        raise EvaluationError("inputs file must be a JSON object")

    start_time = time.perf_counter()
    values = graph.evaluate(
        data.get("inputs", {}),
        data.get("input_sequences", {}),
        args.output,
    )
    GraphLogger.get().info(
        "Evaluated",
        component="cli",
        operation="run",
        duration_ms=(time.perf_counter() - start_time) * 1000,
        output=args.output or graph.default_output,
    )
    print(json.dumps(values, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
