"""Reading command transcripts.

A transcript starts with a line holding the number of commands, followed by
the command lines themselves. Missing trailing lines are tolerated; lines
beyond the announced count are ignored.
"""

from collections.abc import Iterator
from typing import TextIO

import structlog

logger = structlog.get_logger(__name__)


class TranscriptFormatError(Exception):
    """Exception raised when the command count header cannot be parsed."""

    def __init__(self, message: str, header: str | None = None):
        """Initialize the exception with a descriptive message.

        Args:
            message: Description of the format error
            header: The offending header line, if one was read
        """
        super().__init__(message)
        self.message = message
        self.header = header


def read_transcript(stream: TextIO, expect_count_header: bool = True) -> Iterator[str]:
    """Yield command lines from a transcript stream.

    Args:
        stream: Text stream to read from
        expect_count_header: If True, the first line is the number of commands

    Yields:
        Command lines without their trailing newline

    Raises:
        TranscriptFormatError: If the count header is missing or not a
            non-negative integer
    """
    if not expect_count_header:
        for line in stream:
            yield line.rstrip("\r\n")
        return

    header = stream.readline()
    if not header:
        msg = "Transcript is empty; expected a command count on the first line"
        raise TranscriptFormatError(msg)

    try:
        count = int(header.strip())
    except ValueError as e:
        msg = f"Invalid command count: {header.strip()!r}"
        raise TranscriptFormatError(msg, header) from e

    if count < 0:
        msg = f"Command count must not be negative: {count}"
        raise TranscriptFormatError(msg, header)

    logger.debug("transcript_header_read", count=count)

    for read in range(count):
        line = stream.readline()
        if not line:
            logger.warning("transcript_truncated", expected=count, read=read)
            return
        yield line.rstrip("\r\n")
