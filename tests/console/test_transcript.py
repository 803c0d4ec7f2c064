"""Unit tests for transcript reading."""

import io

import pytest

from src.console.transcript import TranscriptFormatError, read_transcript


class TestReadTranscript:
    """Test reading counted and plain transcripts."""

    def test_reads_counted_lines(self):
        """Test the header limits the number of lines read."""
        stream = io.StringIO("2\nINSTALL A\nLIST\nINSTALL B\n")

        assert list(read_transcript(stream)) == ["INSTALL A", "LIST"]

    def test_header_with_whitespace(self):
        """Test the count header is stripped."""
        stream = io.StringIO("  1 \r\nLIST\r\n")

        assert list(read_transcript(stream)) == ["LIST"]

    def test_truncated_transcript(self):
        """Test fewer lines than announced are tolerated."""
        stream = io.StringIO("5\nINSTALL A\n")

        assert list(read_transcript(stream)) == ["INSTALL A"]

    def test_zero_count(self):
        """Test a zero count yields nothing."""
        assert list(read_transcript(io.StringIO("0\nLIST\n"))) == []

    def test_without_header(self):
        """Test every line is a command when no header is expected."""
        stream = io.StringIO("INSTALL A\n\nLIST")

        assert list(read_transcript(stream, expect_count_header=False)) == [
            "INSTALL A",
            "",
            "LIST",
        ]

    @pytest.mark.parametrize("content", ["INSTALL A\n", "-1\n", "two\n"])
    def test_invalid_header(self, content):
        """Test a non-numeric or negative header raises."""
        with pytest.raises(TranscriptFormatError) as exc_info:
            list(read_transcript(io.StringIO(content)))

        assert exc_info.value.header == content

    def test_empty_stream(self):
        """Test an empty transcript raises."""
        with pytest.raises(TranscriptFormatError, match="empty"):
            list(read_transcript(io.StringIO("")))
