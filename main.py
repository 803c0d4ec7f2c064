#!/usr/bin/env python3
"""Main Entry Point and CLI Integration.

This module provides the command-line interface of the component dependency
manager. It loads configuration, reads a command transcript, applies it to a
fresh dependency graph and optionally validates or visualizes the result.
"""

import argparse
import sys
import uuid
from pathlib import Path
from typing import TextIO

import structlog

from src.config import DepGraphConfig, load_config
from src.console.dispatcher import CommandDispatcher, CommandSyntaxError
from src.console.transcript import TranscriptFormatError, read_transcript
from src.graph.dependency_graph import DependencyGraph
from src.graph.validator import GraphValidator
from src.log_config import bind_run_id, clear_context, configure_logging

logger = structlog.get_logger(__name__)


def process_transcript(
    stream: TextIO,
    config: DepGraphConfig,
    out: TextIO,
) -> tuple[DependencyGraph, int]:
    """Apply every command of a transcript to a new dependency graph.

    Args:
        stream: Transcript to read commands from
        config: Loaded configuration
        out: Stream receiving the transcript output

    Returns:
        The resulting graph and the exit code (0 for success, 1 for a fatal
        usage error or malformed transcript)
    """
    graph = DependencyGraph()
    dispatcher = CommandDispatcher(
        graph,
        output=lambda line: print(line, file=out),
        echo_commands=config.console.echo_commands,
        trace_declarations=config.console.trace_declarations,
    )

    try:
        ended = dispatcher.run(
            read_transcript(stream, expect_count_header=config.console.expect_count_header),
        )
    except CommandSyntaxError as e:
        logger.error("fatal_command_error", command=e.command)
        print(e.message, file=out)
        return graph, 1
    except TranscriptFormatError as e:
        logger.error("malformed_transcript", header=e.header)
        print(e.message, file=out)
        return graph, 1

    logger.info(
        "transcript_processed",
        ended_by_command=ended,
        commands=dispatcher.commands_processed,
        **graph.get_stats(),
    )
    return graph, 0


def run(args: argparse.Namespace, stdin: TextIO = sys.stdin, out: TextIO = sys.stdout) -> int:
    """Run the dependency manager.

    Args:
        args: Parsed command-line arguments
        stdin: Stream used when no input file is given
        out: Stream receiving the transcript output

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    configure_logging(args.log_level or "WARNING")
    bind_run_id(uuid.uuid4().hex[:12])

    try:
        config = load_config(args.config)
        if args.log_level:
            config.logging_level = args.log_level
        if args.no_count_header:
            config.console.expect_count_header = False
        configure_logging(config.logging_level, json_logs=config.json_logs)

        if args.input:
            with Path(args.input).open(encoding="utf-8") as stream:
                graph, exit_code = process_transcript(stream, config, out)
        else:
            graph, exit_code = process_transcript(stdin, config, out)

        if exit_code:
            return exit_code

        if args.check:
            report = GraphValidator().validate(graph)
            print(report.summary(), file=out)
            if not report.is_valid:
                exit_code = 1

        if args.graph_format:
            print(GraphValidator().generate_visualization(graph, args.graph_format), file=out)

    except FileNotFoundError as e:
        logger.exception("file_not_found", error=str(e))
        exit_code = 1

    # UnicodeDecodeError is a ValueError; keep it ahead of the config handler
    except UnicodeDecodeError as e:
        logger.exception("unreadable_transcript", error=str(e))
        exit_code = 1

    except ValueError as e:
        logger.exception("configuration_validation_error", error=str(e))
        exit_code = 1

    finally:
        clear_context()

    return exit_code


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list, defaults to sys.argv[1:]

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Component dependency manager - DEPEND/INSTALL/REMOVE/LIST command processor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Read a counted transcript from stdin
  python main.py < commands.txt

  # Read plain command lines from a file
  python main.py --input commands.txt --no-count-header

  # Validate the final graph and print it as Mermaid
  python main.py --input commands.txt --check --graph-format mermaid
        """,
    )

    parser.add_argument(
        "-c",
        "--config",
        type=str,
        default=None,
        help="Path to configuration YAML file (default: depgraph.yaml if present)",
    )

    parser.add_argument(
        "-i",
        "--input",
        type=str,
        default=None,
        help="Transcript file to read commands from (default: stdin)",
    )

    parser.add_argument(
        "--no-count-header",
        action="store_true",
        help="Input has no leading command count line",
    )

    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate the final graph and print the report",
    )

    parser.add_argument(
        "--graph-format",
        type=str,
        choices=["mermaid", "dot"],
        default=None,
        help="Print the final graph in the given format",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug output (DEBUG level)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set logging level (default: from configuration, WARNING)",
    )

    args = parser.parse_args(argv)

    if args.debug:
        args.log_level = "DEBUG"

    return args


def main() -> None:
    """Main entry point for the dependency manager."""
    args = parse_args()
    sys.exit(run(args))


if __name__ == "__main__":
    main()
