#!/usr/bin/env python3
"""
Trip distance accumulation over filtered NMEA log lines.

A $GNVTG speed report with a positive speed marks the vehicle as moving. The
segment between the line immediately before it and the line immediately
after it is counted, provided both are $GPGGA position fixes. Neighbours are
taken from the filtered sequence, so removed blank and $GNZDA lines never
separate a speed report from its fixes.
"""

from dataclasses import dataclass
from typing import IO, Iterable, Iterator, Optional, Tuple, Union
import logging
import math

from .config import TripConfig
from .diagnostics import DiagnosticKind, DiagnosticSink, report
from .geometry import Position, haversine_distance
from .line_filter import LineFilter
from .sentence import (
    PositionFix,
    extract_speed,
    is_speed_report,
    parse_number,
    parse_position_fix,
)

logger = logging.getLogger(__name__)

SUMMARY_TEMPLATE = "Total distance: {total:.3f} kilometers."


@dataclass
class TripResult:
    """Outcome of one accumulation pass."""

    total_km: float = 0.0
    speed_reports: int = 0
    moving_reports: int = 0
    segments: int = 0
    unanchored: int = 0  # moving reports at the first or last line
    unbracketed: int = 0  # moving reports without a fix on both sides


def iter_windows(
    lines: Iterable[str],
) -> Iterator[Tuple[Optional[str], str, Optional[str]]]:
    """
    Yield (previous, current, next) for every line in order.

    previous is None for the first line and next is None for the last one.
    Only three lines are held at any time.
    """
    previous: Optional[str] = None
    current: Optional[str] = None
    started = False
    for upcoming in lines:
        if started:
            yield previous, current, upcoming  # type: ignore[misc]
            previous = current
        current = upcoming
        started = True
    if started:
        yield previous, current, None  # type: ignore[misc]


def fix_to_position(
    fix: PositionFix, line: str, sink: Optional[DiagnosticSink] = None
) -> Optional[Position]:
    """Convert coordinate tokens to float degrees, or None if they are not numbers."""
    try:
        position = Position(
            latitude=parse_number(fix.latitude),
            longitude=parse_number(fix.longitude),
        )
    except ValueError:
        report(
            sink,
            DiagnosticKind.MALFORMED_COORDINATE,
            line,
            "Invalid GPGGA sentence (coordinate is not a number)",
        )
        return None
    if not (math.isfinite(position.latitude) and math.isfinite(position.longitude)):
        report(
            sink,
            DiagnosticKind.MALFORMED_COORDINATE,
            line,
            "Invalid GPGGA sentence (coordinate is not finite)",
        )
        return None
    return position


def segment_distance(
    start_line: str, end_line: str, sink: Optional[DiagnosticSink] = None
) -> Optional[float]:
    """
    Distance between the fixes of two lines.

    Returns:
        Distance in kilometers, or None if either line is not a usable fix
    """
    start_fix = parse_position_fix(start_line, sink)
    end_fix = parse_position_fix(end_line, sink)
    if start_fix is None or end_fix is None:
        return None

    start = fix_to_position(start_fix, start_line, sink)
    end = fix_to_position(end_fix, end_line, sink)
    if start is None or end is None:
        return None

    return haversine_distance(start, end)


def accumulate_distance(
    lines: Iterable[str], sink: Optional[DiagnosticSink] = None
) -> TripResult:
    """
    Sum the distance covered while the vehicle was reported moving.

    Args:
        lines: Filtered log lines, in log order
        sink: Receives diagnostics for malformed sentences (logged if None)

    Returns:
        TripResult with the total in kilometers and pass counters
    """
    result = TripResult()
    for previous, line, upcoming in iter_windows(lines):
        if not is_speed_report(line):
            continue
        result.speed_reports += 1
        if extract_speed(line, sink) <= 0:
            continue
        result.moving_reports += 1

        if previous is None or upcoming is None:
            result.unanchored += 1
            continue

        distance = segment_distance(previous, upcoming, sink)
        if distance is None:
            result.unbracketed += 1
            continue

        result.total_km += distance
        result.segments += 1

    logger.debug(
        f"Counted {result.segments} moving segments out of "
        f"{result.moving_reports} moving speed reports"
    )
    return result


def calculate_total_distance(
    lines: Iterable[str], sink: Optional[DiagnosticSink] = None
) -> float:
    """Total distance in kilometers covered while moving."""
    return accumulate_distance(lines, sink).total_km


def format_summary(total_km: float) -> str:
    return SUMMARY_TEMPLATE.format(total=total_km)


def measure_gps_log(
    stream: Union[IO, Iterable],
    config: Optional[TripConfig] = None,
    sink: Optional[DiagnosticSink] = None,
) -> Tuple[TripResult, LineFilter]:
    """
    Filter and accumulate a whole GPS log stream in a single pass.

    The stream is closed before returning, whether or not processing
    succeeded. Iterables without a close() method, such as a list of lines,
    are accepted too.

    Args:
        stream: Readable text or binary stream, or any iterable of lines
        config: Processing configuration (defaults apply if None)
        sink: Receives diagnostics for malformed sentences (logged if None)

    Returns:
        Tuple of (TripResult, LineFilter) so callers can report line counters

    Raises:
        StreamReadError: If reading the stream fails; no partial total is
            returned
    """
    config = config or TripConfig()
    try:
        line_filter = LineFilter(stream, encoding=config.encoding)
        result = accumulate_distance(line_filter, sink)
    finally:
        close = getattr(stream, "close", None)
        if close is not None:
            close()
    logger.info(f"Total distance: {result.total_km:.3f} km")
    return result, line_filter


def process_gps_log(
    stream: Union[IO, Iterable],
    config: Optional[TripConfig] = None,
    sink: Optional[DiagnosticSink] = None,
) -> str:
    """
    Process a GPS log stream and return the human-readable summary.

    Raises:
        StreamReadError: If reading the stream fails
    """
    result, _ = measure_gps_log(stream, config, sink)
    return format_summary(result.total_km)
