"""Console module turning text commands into dependency graph operations."""

from src.console.dispatcher import CommandDispatcher, CommandSyntaxError
from src.console.transcript import TranscriptFormatError, read_transcript

__all__ = [
    "CommandDispatcher",
    "CommandSyntaxError",
    "TranscriptFormatError",
    "read_transcript",
]
