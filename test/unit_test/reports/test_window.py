"""Unit tests for the reporting window and timestamp parsing."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from opsboard.reports.window import job_timestamp, parse_timestamp, previous_day_window

SAO_PAULO = ZoneInfo("America/Sao_Paulo")


@pytest.fixture
def window():
    return previous_day_window(datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc), "America/Sao_Paulo")


class TestPreviousDayWindow:
    def test_covers_previous_local_day(self, window):
        assert window.start == datetime(2026, 3, 9, 0, 0, tzinfo=SAO_PAULO)
        assert window.end == datetime(2026, 3, 10, 0, 0, tzinfo=SAO_PAULO)
        assert window.label == "09/03/2026"
        assert window.key == "2026-03-09@America/Sao_Paulo"

    def test_local_date_differs_from_utc_date(self):
        # 01:00 UTC on the 10th is still the 9th in Sao Paulo
        w = previous_day_window(datetime(2026, 3, 10, 1, 0, tzinfo=timezone.utc), "America/Sao_Paulo")
        assert w.label == "08/03/2026"

    def test_naive_reference_is_utc(self):
        w = previous_day_window(datetime(2026, 3, 10, 1, 0), "America/Sao_Paulo")
        assert w.label == "08/03/2026"

    def test_half_open(self, window):
        assert window.contains(window.start)
        assert not window.contains(window.end)
        assert not window.contains(None)


class TestParseTimestamp:
    def test_bacula_format_is_local(self):
        assert parse_timestamp("2026-03-09 10:00:00", SAO_PAULO) == datetime(2026, 3, 9, 10, tzinfo=SAO_PAULO)

    def test_iso_with_offset(self):
        parsed = parse_timestamp("2026-03-09T13:00:00Z", SAO_PAULO)
        assert parsed == datetime(2026, 3, 9, 13, tzinfo=timezone.utc)

    def test_epoch_seconds(self):
        epoch = int(datetime(2026, 3, 9, 13, tzinfo=timezone.utc).timestamp())
        assert parse_timestamp(epoch, SAO_PAULO) == datetime(2026, 3, 9, 13, tzinfo=timezone.utc)
        assert parse_timestamp(str(epoch), SAO_PAULO) == datetime(2026, 3, 9, 13, tzinfo=timezone.utc)

    def test_epoch_milliseconds(self):
        epoch_ms = int(datetime(2026, 3, 9, 13, tzinfo=timezone.utc).timestamp()) * 1000
        assert parse_timestamp(epoch_ms, SAO_PAULO) == datetime(2026, 3, 9, 13, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "   ", "yesterday", True, 0, {"a": 1}])
    def test_unparseable(self, value):
        assert parse_timestamp(value, SAO_PAULO) is None


class TestJobTimestamp:
    def test_first_parseable_field_wins(self):
        job = {"starttime": None, "endtime": "garbage", "realendtime": "2026-03-09 05:00:00", "schedtime": "2026-01-01"}
        assert job_timestamp(job, SAO_PAULO) == datetime(2026, 3, 9, 5, tzinfo=SAO_PAULO)

    def test_snake_case_fields(self):
        job = {"start_time": "2026-03-09T08:00:00-03:00"}
        assert job_timestamp(job, SAO_PAULO).hour == 8

    def test_no_timestamp(self):
        assert job_timestamp({"jobid": 1}, SAO_PAULO) is None

    def test_boundaries(self, window):
        inside = job_timestamp({"starttime": "2026-03-09 23:59:59"}, SAO_PAULO)
        before = job_timestamp({"starttime": "2026-03-08 23:59:59"}, SAO_PAULO)
        after = job_timestamp({"starttime": "2026-03-10 00:00:00"}, SAO_PAULO)
        assert window.contains(inside)
        assert not window.contains(before)
        assert not window.contains(after)
