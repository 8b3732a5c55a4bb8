#!/usr/bin/env python3
"""
nmeatrip - Trip distance estimation from NMEA 0183 GPS logs.

This package filters raw GPS log lines, parses position fixes and speed
reports, and sums the great-circle distance covered while moving.
"""
import importlib.metadata

__version__ = importlib.metadata.version("nmeatrip")

# Import main classes for public API
from .config import TripConfig
from .diagnostics import Diagnostic, DiagnosticCollector, DiagnosticKind
from .distance import (
    TripResult,
    accumulate_distance,
    calculate_total_distance,
    format_summary,
    measure_gps_log,
    process_gps_log,
)
from .geometry import Position, haversine_distance
from .line_filter import LineFilter, NmeaTripError, StreamReadError, filter_lines
from .sentence import PositionFix, extract_speed, parse_position_fix

__all__ = [
    "TripConfig",
    "Diagnostic",
    "DiagnosticCollector",
    "DiagnosticKind",
    "TripResult",
    "accumulate_distance",
    "calculate_total_distance",
    "format_summary",
    "measure_gps_log",
    "process_gps_log",
    "Position",
    "haversine_distance",
    "LineFilter",
    "NmeaTripError",
    "StreamReadError",
    "filter_lines",
    "PositionFix",
    "extract_speed",
    "parse_position_fix",
]
