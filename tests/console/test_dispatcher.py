"""Unit tests for CommandDispatcher.

Tests cover:
- Transcript echo and event rendering
- Argument count validation
- END and unknown commands
- The TELNET scenario end to end
"""

import pytest

from src.console.dispatcher import END_MESSAGE, CommandDispatcher, CommandSyntaxError
from src.graph.dependency_graph import DependencyGraph


@pytest.fixture
def transcript() -> list[str]:
    """Collected transcript lines."""
    return []


@pytest.fixture
def dispatcher(transcript) -> CommandDispatcher:
    """Dispatcher writing into the transcript fixture."""
    return CommandDispatcher(DependencyGraph(), output=transcript.append)


class TestCommandExecution:
    """Test execution of individual commands."""

    def test_echoes_command_line(self, dispatcher, transcript):
        """Test each command line is written before its output."""
        dispatcher.execute("INSTALL FOO")

        assert transcript == ["INSTALL FOO", "Installing FOO"]

    def test_echo_disabled(self, transcript):
        """Test commands are not echoed when disabled."""
        dispatcher = CommandDispatcher(
            DependencyGraph(),
            output=transcript.append,
            echo_commands=False,
        )
        dispatcher.execute("INSTALL FOO")

        assert transcript == ["Installing FOO"]

    def test_depend_is_silent_by_default(self, dispatcher, transcript):
        """Test accepted edges produce no output."""
        assert dispatcher.execute("DEPEND TELNET TCPIP NETCARD") is True

        assert transcript == ["DEPEND TELNET TCPIP NETCARD"]
        assert dispatcher.graph.dependencies_of("TELNET") == {"TCPIP", "NETCARD"}

    def test_trace_declarations(self, transcript):
        """Test accepted edges are written when tracing is enabled."""
        dispatcher = CommandDispatcher(
            DependencyGraph(),
            output=transcript.append,
            echo_commands=False,
            trace_declarations=True,
        )
        dispatcher.execute("DEPEND TELNET TCPIP")

        assert transcript == ["TELNET depends on TCPIP"]

    def test_cycle_rejection_message(self, dispatcher, transcript):
        """Test rejected edges are reported with the offending pair."""
        dispatcher.execute("DEPEND A B")
        dispatcher.execute("DEPEND B A")

        assert transcript[-1] == "A depends on B, ignoring command"

    def test_self_dependency_message(self, dispatcher, transcript):
        """Test a self dependency is reported."""
        dispatcher.execute("DEPEND X X")

        assert transcript[-1] == "X depends on X, ignoring command"

    def test_extra_whitespace_is_ignored(self, dispatcher, transcript):
        """Test tokens are split on any whitespace."""
        dispatcher.execute("DEPEND   A \t B\n")

        assert dispatcher.graph.dependencies_of("A") == {"B"}
        assert transcript == ["DEPEND   A \t B"]

    def test_list_prints_installed(self, dispatcher, transcript):
        """Test LIST prints one component per line."""
        dispatcher.execute("DEPEND A B")
        dispatcher.execute("INSTALL A")
        transcript.clear()

        dispatcher.execute("LIST")

        assert transcript == ["LIST", "A", "B"]

    def test_end_stops(self, dispatcher, transcript):
        """Test END returns False and prints the exit message."""
        assert dispatcher.execute("END") is False
        assert transcript == ["END", END_MESSAGE]

    def test_unknown_command_continues(self, dispatcher, transcript):
        """Test unknown commands are reported and not fatal."""
        assert dispatcher.execute("UPGRADE FOO") is True
        assert transcript == ["UPGRADE FOO", "Unable to process unknown command UPGRADE"]

    def test_command_names_are_case_sensitive(self, dispatcher, transcript):
        """Test lowercase command names are unknown."""
        dispatcher.execute("install FOO")

        assert transcript[-1] == "Unable to process unknown command install"
        assert dispatcher.graph.installed == set()


class TestCommandSyntax:
    """Test argument count validation."""

    @pytest.mark.parametrize(
        ("line", "command"),
        [
            ("DEPEND", "DEPEND"),
            ("DEPEND TELNET", "DEPEND"),
            ("INSTALL", "INSTALL"),
            ("INSTALL A B", "INSTALL"),
            ("REMOVE", "REMOVE"),
            ("REMOVE A B", "REMOVE"),
        ],
    )
    def test_wrong_argument_count_raises(self, dispatcher, line, command):
        """Test malformed commands raise CommandSyntaxError."""
        with pytest.raises(CommandSyntaxError) as exc_info:
            dispatcher.execute(line)

        assert exc_info.value.command == command
        assert "Eg)" in exc_info.value.message

    def test_syntax_error_leaves_graph_untouched(self, dispatcher):
        """Test nothing is applied when validation fails."""
        with pytest.raises(CommandSyntaxError):
            dispatcher.execute("INSTALL A B")

        assert dispatcher.graph.installed == set()


class TestRun:
    """Test running a sequence of lines."""

    def test_run_skips_empty_lines(self, dispatcher, transcript):
        """Test empty lines are neither echoed nor counted."""
        ended = dispatcher.run(["", "INSTALL A", "   ", "LIST"])

        assert ended is False
        assert transcript == ["INSTALL A", "Installing A", "LIST", "A"]
        assert dispatcher.commands_processed == 2

    def test_run_stops_at_end(self, dispatcher, transcript):
        """Test lines after END are not processed."""
        ended = dispatcher.run(["INSTALL A", "END", "INSTALL B"])

        assert ended is True
        assert dispatcher.graph.installed == {"A"}
        assert transcript[-1] == END_MESSAGE

    def test_run_propagates_syntax_error(self, dispatcher):
        """Test a fatal error stops the run."""
        with pytest.raises(CommandSyntaxError):
            dispatcher.run(["INSTALL A", "REMOVE", "INSTALL B"])

        assert dispatcher.graph.installed == {"A"}

    def test_telnet_scenario(self, dispatcher, transcript):
        """Test the full scenario transcript."""
        dispatcher.run(
            [
                "DEPEND TELNET TCPIP NETCARD",
                "INSTALL TELNET",
                "INSTALL TELNET",
                "REMOVE TCPIP",
                "REMOVE TELNET",
                "LIST",
                "END",
            ],
        )

        assert transcript == [
            "DEPEND TELNET TCPIP NETCARD",
            "INSTALL TELNET",
            "Installing NETCARD",
            "Installing TCPIP",
            "Installing TELNET",
            "INSTALL TELNET",
            "NETCARD is already installed.",
            "TCPIP is already installed.",
            "TELNET is already installed.",
            "REMOVE TCPIP",
            "TCPIP is still needed.",
            "REMOVE TELNET",
            "Removed TELNET",
            "Removed NETCARD",
            "Removed TCPIP",
            "LIST",
            "END",
            END_MESSAGE,
        ]
