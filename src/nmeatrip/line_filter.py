#!/usr/bin/env python3
"""
Line filtering for raw NMEA log streams.
"""

from typing import IO, Iterable, Iterator, List, Union
import io
import logging
import re

from .sentence import is_timestamp

logger = logging.getLogger(__name__)

LINE_BREAK = re.compile(r"\r\n|\r|\n")


class NmeaTripError(Exception):
    """Base class for errors raised by nmeatrip."""

    pass


class StreamReadError(NmeaTripError):
    """Raised when the input stream cannot be read or decoded."""

    pass


class LineFilter:
    """
    Lazy, single-pass view of a log stream without blank and $GNZDA lines.

    Lines keep their original order and lose only their line terminator.
    Counters are updated as the filter is consumed.
    """

    def __init__(
        self,
        stream: Union[IO[str], IO[bytes], Iterable[Union[str, bytes]]],
        encoding: str = "utf-8",
    ):
        """Initializes a LineFilter.

        Args:
            stream: Text or binary stream, or any iterable of lines
            encoding: Encoding used for lines that arrive as bytes
        """
        self.stream = stream
        self.encoding = encoding
        self.lines_read = 0
        self.blank_skipped = 0
        self.timestamp_skipped = 0
        self._consumed = False

    @property
    def lines_kept(self) -> int:
        return self.lines_read - self.blank_skipped - self.timestamp_skipped

    def __iter__(self) -> Iterator[str]:
        if self._consumed:
            raise RuntimeError("LineFilter can only be iterated once")
        self._consumed = True
        for line in self._read_lines():
            self.lines_read += 1
            if not line.strip():
                self.blank_skipped += 1
                continue
            if is_timestamp(line):
                self.timestamp_skipped += 1
                continue
            yield line
        logger.debug(
            f"Read {self.lines_read} lines, skipped {self.blank_skipped} blank "
            f"and {self.timestamp_skipped} timestamp lines"
        )

    def _read_lines(self) -> Iterator[str]:
        """
        Yield decoded lines from the stream, translating read failures.

        A line ends at "\\n", "\\r" or "\\r\\n". Binary file objects are read
        through a TextIOWrapper, which is detached once reading stops so the
        underlying stream stays with its owner.
        """
        text = None
        try:
            if isinstance(self.stream, (io.BufferedIOBase, io.RawIOBase)):
                text = io.TextIOWrapper(
                    self.stream, encoding=self.encoding, newline=None
                )
                iterator = iter(text)
            else:
                iterator = iter(self.stream)
        except LookupError as e:
            logger.error(f"Unknown encoding for GPS log: {self.encoding}")
            raise StreamReadError(f"Cannot read GPS log: {e}") from e

        try:
            while True:
                try:
                    raw = next(iterator)
                    chunk = (
                        raw.decode(self.encoding) if isinstance(raw, bytes) else raw
                    )
                except StopIteration:
                    return
                except (OSError, UnicodeDecodeError, LookupError) as e:
                    logger.error(
                        f"Failed to read GPS log after {self.lines_read} lines: {e}"
                    )
                    raise StreamReadError(f"Cannot read GPS log: {e}") from e
                yield from split_lines(chunk)
        finally:
            if text is not None and not text.closed:
                text.detach()


def split_lines(chunk: str) -> List[str]:
    """
    Split a chunk of text into lines without their terminators.

    A single trailing terminator ends the last line rather than starting an
    empty one.
    """
    if chunk.endswith("\r\n"):
        chunk = chunk[:-2]
    elif chunk.endswith(("\r", "\n")):
        chunk = chunk[:-1]
    return LINE_BREAK.split(chunk)


def filter_lines(
    stream: Union[IO[str], IO[bytes], Iterable[Union[str, bytes]]],
    encoding: str = "utf-8",
) -> Iterator[str]:
    """
    Yield the lines of a log stream that are relevant to distance estimation.

    Args:
        stream: Text or binary stream, or any iterable of lines
        encoding: Encoding used for lines that arrive as bytes

    Returns:
        Iterator over non-blank, non-$GNZDA lines in stream order

    Raises:
        StreamReadError: If reading or decoding the stream fails
    """
    return iter(LineFilter(stream, encoding))
