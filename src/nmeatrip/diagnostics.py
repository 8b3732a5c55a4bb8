#!/usr/bin/env python3
"""
Per-line diagnostics for malformed NMEA sentences.

Parsing never raises on bad input. Instead each problem is reported as a
Diagnostic to a sink, which is any callable accepting one Diagnostic. The
default sink logs it; DiagnosticCollector keeps them for later inspection.
"""

from typing import Callable, Iterator, List, NamedTuple, Optional
from enum import Enum
import logging

logger = logging.getLogger(__name__)


class DiagnosticKind(Enum):
    """Enumeration for recoverable per-line problems."""

    MALFORMED_POSITION = "malformed_position"
    MALFORMED_SPEED = "malformed_speed"
    MALFORMED_COORDINATE = "malformed_coordinate"

    def __str__(self) -> str:
        return self.value


class Diagnostic(NamedTuple):
    """A recoverable problem found in a single log line."""

    kind: DiagnosticKind
    line: str
    message: str


DiagnosticSink = Callable[[Diagnostic], None]


def log_diagnostic(diagnostic: Diagnostic) -> None:
    """Default sink: log the offending line at ERROR level."""
    logger.error(f"{diagnostic.message}: {diagnostic.line}")


def report(
    sink: Optional[DiagnosticSink], kind: DiagnosticKind, line: str, message: str
) -> None:
    """Send a diagnostic to the given sink, or to the logging sink if None."""
    (sink or log_diagnostic)(Diagnostic(kind, line, message))


class DiagnosticCollector:
    """A sink that keeps every diagnostic it receives, in order."""

    def __init__(self, forward: Optional[DiagnosticSink] = None):
        """Initializes a DiagnosticCollector.

        Args:
            forward: Optional sink that also receives each diagnostic,
                e.g. log_diagnostic to keep logging while collecting.
        """
        self.diagnostics: List[Diagnostic] = []
        self.forward = forward

    def __call__(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        if self.forward is not None:
            self.forward(diagnostic)

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)

    def count(self, kind: DiagnosticKind) -> int:
        """Number of collected diagnostics of the given kind."""
        return sum(1 for d in self.diagnostics if d.kind == kind)
