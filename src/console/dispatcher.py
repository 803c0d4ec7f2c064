"""Line command dispatcher driving the dependency graph engine.

This module tokenizes command lines (DEPEND, INSTALL, REMOVE, LIST, END),
validates their argument counts, applies them to a DependencyGraph and
writes the resulting transcript lines.
"""

from collections.abc import Callable, Iterable
from typing import ClassVar

import structlog

from src.graph.dependency_graph import DependencyGraph
from src.graph.events import EventKind, GraphEvent
from src.log_config import bind_context, unbind_context

logger = structlog.get_logger(__name__)

DEPEND_CMD = "DEPEND"
INSTALL_CMD = "INSTALL"
REMOVE_CMD = "REMOVE"
LIST_CMD = "LIST"
END_CMD = "END"

# Parent plus at least one dependency
MIN_DEPEND_ARGS = 2

END_MESSAGE = "Encountered END command. Exiting program."


class CommandSyntaxError(Exception):
    """Exception raised when a command has the wrong number of arguments.

    This is a fatal usage error: the whole run stops with a failure outcome.
    """

    def __init__(self, message: str, command: str):
        """Initialize the exception with a usage message.

        Args:
            message: Explanation including an example of the correct syntax
            command: Name of the malformed command
        """
        super().__init__(message)
        self.message = message
        self.command = command


class CommandDispatcher:
    """Dispatcher applying text commands to a dependency graph.

    Example:
        >>> dispatcher = CommandDispatcher(DependencyGraph())
        >>> dispatcher.execute("DEPEND TELNET TCPIP NETCARD")
        True
        >>> dispatcher.execute("END")
        False

    Attributes:
        graph: The DependencyGraph commands are applied to
        output: Callable receiving each transcript line
        echo_commands: Whether each command line is written before it runs
        trace_declarations: Whether accepted dependency edges are written
    """

    USAGE: ClassVar[dict[str, str]] = {
        DEPEND_CMD: (
            "DEPEND command is incomplete. Requires a parent component and its "
            "dependency. Eg) DEPEND TELNET TCPIP"
        ),
        INSTALL_CMD: "Invalid syntax for INSTALL command. Eg) INSTALL TELNET",
        REMOVE_CMD: "Invalid syntax for REMOVE command. Eg) REMOVE TELNET",
    }

    def __init__(
        self,
        graph: DependencyGraph,
        output: Callable[[str], None] = print,
        echo_commands: bool = True,
        trace_declarations: bool = False,
    ):
        """Initialize the dispatcher.

        Args:
            graph: Graph the commands are applied to
            output: Callable receiving each transcript line
            echo_commands: Write each command line before running it
            trace_declarations: Write a line for every accepted dependency edge
        """
        self.graph = graph
        self.output = output
        self.echo_commands = echo_commands
        self.trace_declarations = trace_declarations
        self.commands_processed = 0

    def run(self, lines: Iterable[str]) -> bool:
        """Execute lines until they run out or END is reached.

        Args:
            lines: Command lines; empty lines are skipped

        Returns:
            True if an END command stopped the run, False if input ran out

        Raises:
            CommandSyntaxError: If a command has the wrong number of arguments
        """
        for line_number, line in enumerate(lines, 1):
            if not line or not line.strip():
                continue

            bind_context(line_number=line_number)
            try:
                if not self.execute(line):
                    return True
            finally:
                unbind_context("line_number")

        logger.info("input_exhausted", commands_processed=self.commands_processed)
        return False

    def execute(self, line: str) -> bool:
        """Execute a single command line.

        Args:
            line: Raw command line, e.g. ``INSTALL TELNET``

        Returns:
            False if the command was END, True otherwise

        Raises:
            CommandSyntaxError: If a command has the wrong number of arguments
        """
        line = line.rstrip("\r\n")
        if self.echo_commands:
            self.output(line)

        tokens = line.split()
        if not tokens:
            return True

        command, args = tokens[0], tokens[1:]
        self.commands_processed += 1

        bind_context(command=command)
        try:
            logger.debug("command_received", args=args)
            return self._dispatch(command, args)
        finally:
            unbind_context("command")

    def _dispatch(self, command: str, args: list[str]) -> bool:
        if command == DEPEND_CMD:
            self._require(command, len(args) >= MIN_DEPEND_ARGS)
            self._emit(self.graph.declare_dependency(args[0], args[1:]))
        elif command == INSTALL_CMD:
            self._require(command, len(args) == 1)
            self._emit(self.graph.install(args[0]))
        elif command == REMOVE_CMD:
            self._require(command, len(args) == 1)
            self._emit(self.graph.remove(args[0]))
        elif command == LIST_CMD:
            for component in self.graph.list_installed():
                self.output(component)
        elif command == END_CMD:
            logger.info("end_command_received", commands_processed=self.commands_processed)
            self.output(END_MESSAGE)
            return False
        else:
            logger.warning("unknown_command")
            self.output(f"Unable to process unknown command {command}")

        return True

    def _require(self, command: str, condition: bool) -> None:
        if not condition:
            logger.error("invalid_command_syntax")
            raise CommandSyntaxError(self.USAGE[command], command)

    def _emit(self, events: list[GraphEvent]) -> None:
        for event in events:
            if event.kind is EventKind.DECLARED and not self.trace_declarations:
                continue
            self.output(event.render())
