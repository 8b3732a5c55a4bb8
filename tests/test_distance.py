#!/usr/bin/env python3
"""
Tests for trip distance accumulation and log processing.
"""

import io
from pathlib import Path

import pytest

from nmeatrip.config import TripConfig
from nmeatrip.diagnostics import DiagnosticCollector, DiagnosticKind
from nmeatrip.distance import (
    TripResult,
    accumulate_distance,
    calculate_total_distance,
    format_summary,
    iter_windows,
    measure_gps_log,
    process_gps_log,
)
from nmeatrip.geometry import Position, haversine_distance
from nmeatrip.line_filter import StreamReadError, filter_lines

FIXTURES = Path(__file__).parent / "fixtures"


def gga(lat: str, lon: str) -> str:
    return f"$GPGGA,123519,{lat},N,{lon},E,1,08,0.9,545.4,M,46.9,M,,*47"


def vtg(speed: str) -> str:
    return f"$GNVTG,054.7,T,034.4,M,005.5,N,{speed},K*48"


class TrackingStream(io.StringIO):
    """StringIO that remembers whether close() was called."""

    was_closed = False

    def close(self):
        self.was_closed = True
        super().close()


class TestIterWindows:
    def test_empty(self):
        assert list(iter_windows([])) == []

    def test_single_line(self):
        assert list(iter_windows(["a"])) == [(None, "a", None)]

    def test_three_lines(self):
        assert list(iter_windows(["a", "b", "c"])) == [
            (None, "a", "b"),
            ("a", "b", "c"),
            ("b", "c", None),
        ]


class TestAccumulateDistance:
    def test_moving_segment(self):
        lines = [gga("10.0000", "20.0000"), vtg("10.0"), gga("10.0100", "20.0100")]
        expected = haversine_distance(Position(10.0, 20.0), Position(10.01, 20.01))
        assert calculate_total_distance(lines) == pytest.approx(expected)
        assert calculate_total_distance(lines) == pytest.approx(1.5606, abs=1e-3)

    def test_tokens_are_parsed_as_plain_degrees(self):
        lines = [gga("1000.0000", "2000.0000"), vtg("10.0"), gga("1000.0100", "2000.0100")]
        expected = haversine_distance(
            Position(1000.0, 2000.0), Position(1000.01, 2000.01)
        )
        assert calculate_total_distance(lines) == expected

    def test_zero_speed_contributes_nothing(self):
        lines = [gga("10.0000", "20.0000"), vtg("0"), gga("10.0100", "20.0100")]
        result = accumulate_distance(lines)
        assert result.total_km == 0.0
        assert result.speed_reports == 1
        assert result.moving_reports == 0

    def test_speed_rounding_to_zero_contributes_nothing(self):
        lines = [gga("10.0000", "20.0000"), vtg("0.4"), gga("10.0100", "20.0100")]
        assert calculate_total_distance(lines) == 0.0

    def test_single_moving_report_has_no_neighbours(self):
        result = accumulate_distance([vtg("10.0")])
        assert result.total_km == 0.0
        assert result.unanchored == 1

    def test_moving_report_at_edges(self):
        lines = [vtg("10.0"), gga("10.0", "20.0"), gga("10.1", "20.1"), vtg("10.0")]
        result = accumulate_distance(lines)
        assert result.total_km == 0.0
        assert result.moving_reports == 2
        assert result.unanchored == 2

    def test_malformed_neighbour_is_skipped_and_reported(self):
        sink = DiagnosticCollector()
        lines = [
            "$GPGGA,123519,10.0000,N",
            vtg("10.0"),
            gga("10.0100", "20.0100"),
            vtg("20.0"),
            gga("10.0200", "20.0200"),
        ]
        result = accumulate_distance(lines, sink)
        expected = haversine_distance(Position(10.01, 20.01), Position(10.02, 20.02))
        assert result.total_km == pytest.approx(expected)
        assert result.segments == 1
        assert result.unbracketed == 1
        assert sink.count(DiagnosticKind.MALFORMED_POSITION) == 1

    def test_non_fix_neighbour_is_not_a_diagnostic(self):
        sink = DiagnosticCollector()
        lines = ["$GPRMC,1,2,3", vtg("10.0"), gga("10.0", "20.0")]
        result = accumulate_distance(lines, sink)
        assert result.total_km == 0.0
        assert result.unbracketed == 1
        assert len(sink) == 0

    def test_non_numeric_coordinate_is_skipped_and_reported(self):
        sink = DiagnosticCollector()
        lines = [gga("north", "20.0"), vtg("10.0"), gga("10.0", "20.0")]
        result = accumulate_distance(lines, sink)
        assert result.total_km == 0.0
        assert sink.count(DiagnosticKind.MALFORMED_COORDINATE) == 1

    def test_underscored_coordinate_is_skipped_and_reported(self):
        sink = DiagnosticCollector()
        lines = [gga("1_0.0", "20.0"), vtg("10.0"), gga("10.0", "20.0")]
        assert calculate_total_distance(lines, sink) == 0.0
        assert sink.count(DiagnosticKind.MALFORMED_COORDINATE) == 1

    def test_malformed_speed_is_reported(self):
        sink = DiagnosticCollector()
        lines = [gga("10.0", "20.0"), "$GNVTG,,T,,M,,N,,K*4E", gga("10.1", "20.1")]
        assert calculate_total_distance(lines, sink) == 0.0
        assert sink.count(DiagnosticKind.MALFORMED_SPEED) == 1

    def test_neighbours_are_exactly_one_line_away(self):
        # A second fix between the speed report and the next fix is what counts
        lines = [
            gga("10.0", "20.0"),
            vtg("10.0"),
            gga("10.1", "20.0"),
            gga("50.0", "50.0"),
        ]
        expected = haversine_distance(Position(10.0, 20.0), Position(10.1, 20.0))
        assert calculate_total_distance(lines) == pytest.approx(expected)

    def test_shared_fix_between_two_reports(self):
        lines = [
            gga("10.0", "20.0"),
            vtg("10.0"),
            gga("10.1", "20.0"),
            vtg("10.0"),
            gga("10.2", "20.0"),
        ]
        expected = haversine_distance(
            Position(10.0, 20.0), Position(10.1, 20.0)
        ) + haversine_distance(Position(10.1, 20.0), Position(10.2, 20.0))
        result = accumulate_distance(lines)
        assert result.total_km == pytest.approx(expected)
        assert result.segments == 2

    def test_only_malformed_sentences(self):
        lines = ["$GPGGA,1", "$GNVTG,x", "$GPGGA,,,,", "$GNVTG"]
        assert calculate_total_distance(lines, DiagnosticCollector()) == 0.0

    def test_empty_input(self):
        assert accumulate_distance([]) == TripResult()

    def test_deterministic(self):
        lines = [gga("10.0", "20.0"), vtg("10.0"), gga("10.1", "20.3")] * 5
        assert calculate_total_distance(lines) == calculate_total_distance(lines)


class TestFormatSummary:
    def test_three_decimals(self):
        assert format_summary(1.56063) == "Total distance: 1.561 kilometers."

    def test_zero(self):
        assert format_summary(0.0) == "Total distance: 0.000 kilometers."


class TestProcessGpsLog:
    def test_scenario_moving(self):
        stream = io.StringIO(
            "\n".join([gga("10.0000", "20.0000"), vtg("10.0"), gga("10.0100", "20.0100")])
        )
        assert process_gps_log(stream) == "Total distance: 1.561 kilometers."

    def test_scenario_stationary(self):
        stream = io.StringIO(
            "\n".join([gga("10.0000", "20.0000"), vtg("0"), gga("10.0100", "20.0100")])
        )
        assert process_gps_log(stream) == "Total distance: 0.000 kilometers."

    def test_timestamps_do_not_separate_neighbours(self):
        stream = io.StringIO(
            "\n".join(
                [
                    gga("10.0000", "20.0000"),
                    "$GNZDA,123519.00,18,10,2026,00,00*7A",
                    "",
                    vtg("10.0"),
                    "$GNZDA,123520.00,18,10,2026,00,00*7A",
                    gga("10.0100", "20.0100"),
                ]
            )
        )
        assert process_gps_log(stream) == "Total distance: 1.561 kilometers."

    def test_empty_stream(self):
        assert process_gps_log(io.StringIO("")) == "Total distance: 0.000 kilometers."

    def test_stream_is_closed(self):
        stream = TrackingStream(gga("10.0", "20.0"))
        process_gps_log(stream)
        assert stream.was_closed

    def test_read_failure_aborts_and_closes(self, failing_stream):
        stream = failing_stream(
            [gga("10.0", "20.0") + "\n", vtg("10.0") + "\n", gga("10.1", "20.1") + "\n"]
        )
        with pytest.raises(StreamReadError):
            process_gps_log(stream)
        assert stream.closed

    def test_binary_stream(self):
        data = "\r\n".join(
            [gga("10.0000", "20.0000"), vtg("10.0"), gga("10.0100", "20.0100")]
        ).encode("ascii")
        assert process_gps_log(io.BytesIO(data)) == "Total distance: 1.561 kilometers."

    def test_binary_stream_with_bare_cr_line_endings(self):
        data = b"$GPGGA,,10.0000,,20.0000\r$GNVTG,,,,,,,10.0,K\r$GPGGA,,10.0100,,20.0100\r"
        assert process_gps_log(io.BytesIO(data)) == "Total distance: 1.561 kilometers."

    def test_list_of_lines(self):
        lines = [gga("10.0000", "20.0000"), vtg("10.0"), gga("10.0100", "20.0100")]
        assert process_gps_log(lines) == "Total distance: 1.561 kilometers."

    def test_fixture_log(self):
        sink = DiagnosticCollector()
        with open(FIXTURES / "sample.nmea", "rb") as f:
            result, line_filter = measure_gps_log(f, TripConfig(), sink)

        expected = haversine_distance(
            Position(4807.038, 1131.000), Position(4807.048, 1131.010)
        ) + haversine_distance(
            Position(4807.058, 1131.020), Position(4807.068, 1131.030)
        )
        assert result.total_km == pytest.approx(expected)
        assert result.speed_reports == 5
        assert result.moving_reports == 3
        assert result.segments == 2
        assert result.unbracketed == 1
        assert result.unanchored == 0

        assert line_filter.lines_read == 16
        assert line_filter.timestamp_skipped == 3
        assert line_filter.blank_skipped == 2
        assert line_filter.lines_kept == 11

        assert sink.count(DiagnosticKind.MALFORMED_SPEED) == 1
        assert sink.count(DiagnosticKind.MALFORMED_POSITION) == 1

    def test_fixture_log_matches_filtered_accumulation(self):
        with open(FIXTURES / "sample.nmea", "r", encoding="utf-8") as f:
            direct = calculate_total_distance(filter_lines(f), DiagnosticCollector())
        with open(FIXTURES / "sample.nmea", "rb") as f:
            result, _ = measure_gps_log(f, sink=DiagnosticCollector())
        assert direct == result.total_km
