# Tests for date parsing utilities

from datetime import datetime, timedelta, timezone

from adlookup.utils.date_parser import (
    FILETIME_NEVER,
    filetime_to_datetime,
    format_timestamp,
    parse_generalized_time,
)


class TestFiletimeToDatetime:
    """Tests for filetime_to_datetime."""

    def test_epoch_offset(self):
        # 1970-01-01 00:00:00 UTC
        result = filetime_to_datetime(116444736000000000)
        assert result.astimezone(timezone.utc) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_result_is_aware(self):
        assert filetime_to_datetime(133586946000000000).tzinfo is not None

    def test_sub_second_precision(self):
        result = filetime_to_datetime(116444736000000000 + 15)
        assert result.astimezone(timezone.utc).microsecond == 1

    def test_negative(self):
        assert filetime_to_datetime(-1) is None

    def test_overflow(self):
        assert filetime_to_datetime(FILETIME_NEVER[1] - 1) is None


class TestParseGeneralizedTime:
    """Tests for parse_generalized_time."""

    def test_ad_format(self):
        result = parse_generalized_time("20240427123000.0Z")
        assert result.astimezone(timezone.utc) == datetime(2024, 4, 27, 12, 30, tzinfo=timezone.utc)

    def test_without_fraction(self):
        result = parse_generalized_time("20240427123000Z")
        assert result.astimezone(timezone.utc) == datetime(2024, 4, 27, 12, 30, tzinfo=timezone.utc)

    def test_fraction_kept(self):
        assert parse_generalized_time("20240427123000.5Z").microsecond == 500000

    def test_offset(self):
        result = parse_generalized_time("20240427153000+0300")
        assert result.astimezone(timezone.utc) == datetime(2024, 4, 27, 12, 30, tzinfo=timezone.utc)

    def test_not_generalized_time(self):
        assert parse_generalized_time("yesterday") is None
        assert parse_generalized_time("2024-04-27") is None

    def test_invalid_date(self):
        assert parse_generalized_time("20241399999999.0Z") is None


class TestFormatTimestamp:
    """Tests for format_timestamp."""

    def test_offset_included(self):
        dt = datetime(2024, 4, 27, 15, 30, tzinfo=timezone(timedelta(hours=3)))
        assert format_timestamp(dt) == "2024-04-27T15:30:00+03:00"

    def test_naive_treated_as_utc(self):
        result = format_timestamp(datetime(2024, 4, 27, 12, 30))
        parsed = datetime.fromisoformat(result)
        assert parsed.astimezone(timezone.utc) == datetime(2024, 4, 27, 12, 30, tzinfo=timezone.utc)
