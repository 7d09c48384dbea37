from datetime import datetime, timedelta, timezone

import pytest

from src.blinko_ics.ics.civil_time import CivilZone, parse_instant
from src.blinko_ics.ics.resolver import creation_instant, resolve, update_instant

NOW = datetime(2024, 1, 20, 12, 0, tzinfo=timezone.utc)
CREATED = "2024-01-14T00:00:00Z"  # 2024-01-14 08:00 in UTC+8


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestApiAndMetadataFields:
    def test_api_dates_win_over_content(self):
        todo = {
            "content": "9:00-10:00 Standup",
            "createdAt": CREATED,
            "startDate": "2024-02-01T01:00:00Z",
            "endDate": "2024-02-01T03:00:00Z",
        }
        r = resolve(todo, NOW)
        assert r.start == utc(2024, 2, 1, 1, 0)
        assert r.end == utc(2024, 2, 1, 3, 0)
        assert r.source == "api_both"

    def test_api_start_only_keeps_default_end(self):
        todo = {"createdAt": "2024-01-10T10:00:00Z", "startDate": "2024-01-10T08:00:00Z"}
        r = resolve(todo, NOW)
        assert r.start == utc(2024, 1, 10, 8, 0)
        assert r.end == utc(2024, 1, 10, 11, 0)
        assert r.source == "api_startDate"

    def test_api_start_after_default_end_is_corrected(self):
        r = resolve({"startDate": "2024-02-01T01:00:00Z", "createdAt": CREATED}, NOW)
        assert r.start == utc(2024, 2, 1, 1, 0)
        assert r.end == utc(2024, 2, 1, 2, 0)

    def test_api_end_only_runs_from_creation(self):
        todo = {"createdAt": "2024-01-10T00:00:00Z", "endDate": "2024-01-12T00:00:00Z"}
        r = resolve(todo, NOW)
        assert r.start == utc(2024, 1, 10, 0, 0)
        assert r.end == utc(2024, 1, 12, 0, 0)
        assert r.source == "api_endDate"

    def test_api_end_before_creation_is_corrected(self):
        r = resolve({"createdAt": "2024-01-10T00:00:00Z", "endDate": "2024-01-09T00:00:00Z"}, NOW)
        assert r.start == utc(2024, 1, 10, 0, 0)
        assert r.end == utc(2024, 1, 10, 1, 0)

    def test_metadata_dates(self):
        todo = {
            "metadata": {"startDate": "2024-03-01T00:00:00Z", "endDate": "2024-03-01T02:00:00Z"},
            "content": "15:00 ignored",
        }
        r = resolve(todo, NOW)
        assert r.start == utc(2024, 3, 1, 0, 0)
        assert r.end == utc(2024, 3, 1, 2, 0)
        assert r.source == "metadata_both"

    def test_api_slot_beats_metadata_slot_independently(self):
        todo = {
            "startDate": "2024-03-01T00:00:00Z",
            "metadata": {"startDate": "2024-05-05T00:00:00Z", "endDate": "2024-03-01T04:00:00Z"},
        }
        r = resolve(todo, NOW)
        assert r.start == utc(2024, 3, 1, 0, 0)
        assert r.end == utc(2024, 3, 1, 4, 0)
        assert r.source == "api_startDate"

    def test_blank_api_value_falls_through_to_metadata(self):
        todo = {"startDate": "  ", "metadata": {"startDate": "2024-03-01T00:00:00Z"}}
        r = resolve(todo, NOW)
        assert r.start == utc(2024, 3, 1, 0, 0)
        assert r.source == "metadata_startDate"

    def test_metadata_that_is_not_an_object_is_ignored(self):
        todo = {"metadata": "startDate=2024-03-01", "createdAt": CREATED, "content": "plain"}
        r = resolve(todo, NOW)
        assert r.source == "default"
        assert r.start == utc(2024, 1, 14, 0, 0)

    def test_unparseable_start_falls_back_to_creation(self):
        todo = {"startDate": "not-a-date", "createdAt": CREATED}
        r = resolve(todo, NOW)
        assert r.start == utc(2024, 1, 14, 0, 0)
        assert r.end == utc(2024, 1, 14, 1, 0)
        assert r.source == "api_startDate"

    def test_end_before_start_is_corrected(self):
        todo = {"startDate": "2024-02-01T10:00:00Z", "endDate": "2024-02-01T09:00:00Z"}
        r = resolve(todo, NOW)
        assert r.start == utc(2024, 2, 1, 10, 0)
        assert r.end == utc(2024, 2, 1, 11, 0)

    def test_naive_api_date_is_civil_time(self):
        r = resolve({"startDate": "2024-02-01T09:00:00"}, NOW)
        assert r.start == utc(2024, 2, 1, 1, 0)


class TestContentExpressions:
    def test_time_range_on_creation_date(self):
        r = resolve({"content": "* [ ] 9:00-10:00 Standup", "createdAt": CREATED}, NOW)
        assert r.start == utc(2024, 1, 14, 1, 0)
        assert r.end == utc(2024, 1, 14, 2, 0)
        assert r.source == "content_time_range"

    def test_creation_date_is_taken_in_civil_zone(self):
        # 20:00 UTC on the 14th is already the 15th in UTC+8
        r = resolve({"content": "9:00-10:00", "createdAt": "2024-01-14T20:00:00Z"}, NOW)
        assert r.start == utc(2024, 1, 15, 1, 0)
        assert r.end == utc(2024, 1, 15, 2, 0)

    def test_overnight_range_rolls_end_to_next_day(self):
        r = resolve({"content": "Deploy 22:00-1:00", "createdAt": CREATED}, NOW)
        assert r.start == utc(2024, 1, 14, 14, 0)
        assert r.end == utc(2024, 1, 14, 17, 0)
        assert r.end > r.start

    def test_single_time(self):
        r = resolve({"content": "Call mom 15:30", "createdAt": CREATED}, NOW)
        assert r.start == utc(2024, 1, 14, 7, 30)
        assert r.end == utc(2024, 1, 14, 8, 30)
        assert r.source == "content_single_time"

    def test_full_date_time(self):
        r = resolve({"content": "2024-01-15 14:00 Meeting", "createdAt": CREATED}, NOW)
        assert r.start == utc(2024, 1, 15, 6, 0)
        assert r.end == utc(2024, 1, 15, 7, 0)
        assert r.source == "content_date_time"

    def test_short_date_time(self):
        r = resolve({"content": "Dentist 2024-3-5 9:05", "createdAt": CREATED}, NOW)
        assert r.start == utc(2024, 3, 5, 1, 5)
        assert r.source == "content_date_time"

    def test_invalid_calendar_date_falls_back_to_default(self):
        r = resolve({"content": "2024-13-45 10:00 nope", "createdAt": CREATED}, NOW)
        assert r.source == "default"
        assert r.start == utc(2024, 1, 14, 0, 0)

    def test_out_of_range_clock_is_not_a_time(self):
        r = resolve({"content": "at 25:00 maybe", "createdAt": CREATED}, NOW)
        assert r.source == "default"

    def test_content_ignored_when_any_field_present(self):
        r = resolve({"content": "9:00-10:00", "endDate": "2024-02-01T05:00:00Z"}, NOW)
        assert r.source == "api_endDate"

    def test_injected_zone_changes_wall_clock_reading(self):
        utc_zone = CivilZone(tzid="UTC", offset=timedelta(0), abbreviation="UTC")
        r = resolve({"content": "9:00-10:00", "createdAt": CREATED}, NOW, utc_zone)
        assert r.start == utc(2024, 1, 14, 9, 0)
        assert r.end == utc(2024, 1, 14, 10, 0)


class TestDefaults:
    def test_default_uses_creation_instant(self):
        r = resolve({"content": "Buy milk", "createdAt": CREATED}, NOW)
        assert r.start == utc(2024, 1, 14, 0, 0)
        assert r.end == r.start + timedelta(hours=1)
        assert r.source == "default"

    def test_default_uses_now_without_timestamps(self):
        r = resolve({"content": "Buy milk"}, NOW)
        assert r.start == NOW
        assert r.end == NOW + timedelta(hours=1)
        assert r.source == "default"

    def test_naive_reference_instant_is_utc(self):
        naive = datetime(2024, 1, 20, 17, 30)
        aware = naive.replace(tzinfo=timezone.utc)
        r = resolve({"content": "9:00-10:00"}, naive)
        assert r == resolve({"content": "9:00-10:00"}, aware)
        # 17:30 UTC is already the 21st in UTC+8
        assert r.start == utc(2024, 1, 21, 1, 0)
        assert resolve({}, naive).start == aware
        assert update_instant({}, naive) == aware

    def test_creation_falls_back_to_updated(self):
        todo = {"createdAt": "garbage", "updatedAt": "2024-01-10T00:00:00Z"}
        assert creation_instant(todo, NOW) == utc(2024, 1, 10, 0, 0)

    def test_update_falls_back_to_created(self):
        assert update_instant({"createdAt": CREATED}, NOW) == utc(2024, 1, 14, 0, 0)
        assert update_instant({}, NOW) == NOW

    @pytest.mark.parametrize(
        "todo",
        [
            {},
            {"content": None},
            {"content": 42},
            {"content": "23:59-23:59"},
            {"content": "0:00-0:00", "createdAt": CREATED},
            {"startDate": "2024-01-01T00:00:00Z", "endDate": "2024-01-01T00:00:00Z"},
            {"startDate": "junk", "endDate": "junk"},
            {"endDate": "2024-01-01T00:00:00Z", "createdAt": "2030-01-01T00:00:00Z"},
            {"metadata": {"startDate": 1705276800000}},
            {"metadata": None, "createdAt": "0001-01-01T00:00:00Z"},
            {"startDate": "9999-12-31T23:59:59Z"},
            {"content": "2024-02-30 10:00 leap"},
        ],
    )
    def test_end_is_always_after_start(self, todo):
        r = resolve(todo, NOW)
        assert r.end > r.start


class TestParseInstant:
    def test_iso_with_z(self):
        assert parse_instant("2024-01-14T00:00:00.000Z") == utc(2024, 1, 14, 0, 0)

    def test_date_only_is_civil_midnight(self):
        assert parse_instant("2024-01-14") == utc(2024, 1, 13, 16, 0)

    def test_epoch_milliseconds(self):
        assert parse_instant(1705276800000) == utc(2024, 1, 15, 0, 0)

    def test_rejects_garbage(self):
        assert parse_instant("tomorrow") is None
        assert parse_instant("") is None
        assert parse_instant(True) is None
        assert parse_instant({"a": 1}) is None
