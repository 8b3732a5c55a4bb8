#!/usr/bin/env python3
"""
Parsers for the NMEA 0183 sentences that matter for trip distance.

Fields are read by position after splitting on commas. Coordinate tokens are
kept exactly as they appear in the sentence; they are only converted to
numbers when a distance is computed.
"""

from typing import Optional, NamedTuple
import logging
import math

from .diagnostics import DiagnosticKind, DiagnosticSink, report

logger = logging.getLogger(__name__)

POSITION_PREFIX = "$GPGGA"
SPEED_PREFIX = "$GNVTG"
TIMESTAMP_PREFIX = "$GNZDA"

FIELD_SEPARATOR = ","
LATITUDE_FIELD = 2
LONGITUDE_FIELD = 4
SPEED_KMH_FIELD = 7


class PositionFix(NamedTuple):
    """Latitude and longitude tokens taken verbatim from a $GPGGA sentence."""

    latitude: str
    longitude: str


def is_position_fix(line: str) -> bool:
    return line.startswith(POSITION_PREFIX)


def is_speed_report(line: str) -> bool:
    return line.startswith(SPEED_PREFIX)


def is_timestamp(line: str) -> bool:
    return line.startswith(TIMESTAMP_PREFIX)


def parse_number(token: str) -> float:
    """
    Parse a numeric sentence field as a float.

    Digit-group underscores are rejected; float() would otherwise read
    "1_0" as 10.

    Raises:
        ValueError: If the token is not a number
    """
    if "_" in token:
        raise ValueError(f"could not convert string to float: {token!r}")
    return float(token)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity."""
    whole = math.floor(value)
    # value - whole is exact, unlike value + 0.5 which can round up 0.49999999999999994
    if value - whole >= 0.5:
        whole += 1
    return whole


def parse_position_fix(
    line: str, sink: Optional[DiagnosticSink] = None
) -> Optional[PositionFix]:
    """
    Parse a $GPGGA sentence into a PositionFix.

    Lines of any other sentence type return None without a diagnostic.

    Args:
        line: A single log line
        sink: Receives a MALFORMED_POSITION diagnostic when the sentence is
            a $GPGGA but its coordinate fields are missing or empty

    Returns:
        PositionFix, or None if the line is not a usable position sentence
    """
    if not is_position_fix(line):
        return None

    tokens = line.split(FIELD_SEPARATOR)
    if len(tokens) <= LONGITUDE_FIELD:
        report(
            sink,
            DiagnosticKind.MALFORMED_POSITION,
            line,
            "Invalid GPGGA sentence (missing coordinate fields)",
        )
        return None

    latitude = tokens[LATITUDE_FIELD]
    longitude = tokens[LONGITUDE_FIELD]
    if not latitude or not longitude:
        report(
            sink,
            DiagnosticKind.MALFORMED_POSITION,
            line,
            "Invalid GPGGA sentence (empty latitude or longitude)",
        )
        return None

    return PositionFix(latitude=latitude, longitude=longitude)


def extract_speed(line: str, sink: Optional[DiagnosticSink] = None) -> int:
    """
    Extract the ground speed in km/h from a $GNVTG sentence.

    The prefix is not checked here. Any line that lacks a numeric speed field
    yields 0, which keeps it from contributing any distance.

    Args:
        line: A single log line, normally a $GNVTG sentence
        sink: Receives a MALFORMED_SPEED diagnostic when the field is missing
            or not a finite number

    Returns:
        Speed rounded half-up to the nearest whole km/h, or 0 on failure
    """
    tokens = line.split(FIELD_SEPARATOR)
    if len(tokens) <= SPEED_KMH_FIELD:
        report(
            sink,
            DiagnosticKind.MALFORMED_SPEED,
            line,
            "Invalid GNVTG sentence (missing speed field)",
        )
        return 0

    try:
        speed = parse_number(tokens[SPEED_KMH_FIELD])
    except ValueError:
        report(
            sink,
            DiagnosticKind.MALFORMED_SPEED,
            line,
            "Invalid GNVTG sentence (speed is not a number)",
        )
        return 0

    if not math.isfinite(speed):
        report(
            sink,
            DiagnosticKind.MALFORMED_SPEED,
            line,
            "Invalid GNVTG sentence (speed is not finite)",
        )
        return 0

    return round_half_up(speed)
