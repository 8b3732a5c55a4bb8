"""
Module for collecting and logging metrics related to GPS log processing.
"""

import logging
from typing import NamedTuple, Optional

from .config import TripConfig
from .diagnostics import DiagnosticCollector, DiagnosticKind
from .distance import TripResult
from .line_filter import LineFilter

logger = logging.getLogger(__name__)


class TripMetrics(NamedTuple):
    """Container for trip processing metrics."""

    lines_read: int
    lines_kept: int
    blank_skipped: int
    timestamp_skipped: int
    speed_reports: int
    moving_reports: int
    segments: int
    unanchored: int
    unbracketed: int
    malformed_positions: int
    malformed_speeds: int
    malformed_coordinates: int
    total_km: float


def collect_metrics(
    line_filter: LineFilter,
    result: TripResult,
    diagnostics: Optional[DiagnosticCollector] = None,
) -> TripMetrics:
    """
    Collect metrics from one processed log.

    Args:
        line_filter: The consumed LineFilter holding line counters
        result: TripResult of the accumulation pass
        diagnostics: Collected diagnostics, if any were collected

    Returns:
        TripMetrics containing all collected metrics
    """

    def count(kind: DiagnosticKind) -> int:
        return diagnostics.count(kind) if diagnostics is not None else 0

    return TripMetrics(
        lines_read=line_filter.lines_read,
        lines_kept=line_filter.lines_kept,
        blank_skipped=line_filter.blank_skipped,
        timestamp_skipped=line_filter.timestamp_skipped,
        speed_reports=result.speed_reports,
        moving_reports=result.moving_reports,
        segments=result.segments,
        unanchored=result.unanchored,
        unbracketed=result.unbracketed,
        malformed_positions=count(DiagnosticKind.MALFORMED_POSITION),
        malformed_speeds=count(DiagnosticKind.MALFORMED_SPEED),
        malformed_coordinates=count(DiagnosticKind.MALFORMED_COORDINATE),
        total_km=result.total_km,
    )


def log_metrics(metrics: TripMetrics, config: TripConfig) -> None:
    """
    Log detailed metrics after processing a log.

    Args:
        metrics: TripMetrics containing collected metrics
        config: TripConfig; nothing is logged unless metrics are enabled
    """
    if not config.metrics:
        return

    logger.debug("=== NMEATRIP_METRICS ===")
    for key, value in metrics._asdict().items():
        if isinstance(value, float):
            logger.debug(f"{key}={value:.6f}")
        else:
            logger.debug(f"{key}={value}")
    logger.debug("=== END_NMEATRIP_METRICS ===")
