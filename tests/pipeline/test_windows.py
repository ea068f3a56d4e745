import pytest
from datetime import date, datetime, timedelta, timezone

from pydantic import ValidationError

from rfi_tracker.pipeline.windows import Granularity, TimeWindow, canonical_window, coerce_anchor

pytestmark = pytest.mark.unit


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestCanonicalWindow:

    def test_year_window(self):
        window = canonical_window("2018-06-10", "Year")
        assert window.start == _utc(2018, 1, 1)
        assert window.end == _utc(2019, 1, 1)
        assert str(window) == "[2018-01-01, 2019-01-01)"

    def test_month_window_december_rolls_year(self):
        window = canonical_window(date(2021, 12, 14), Granularity.MONTH)
        assert window.start == _utc(2021, 12, 1)
        assert window.end == _utc(2022, 1, 1)

    def test_month_window_end_of_month(self):
        assert str(canonical_window("2021-01-31", "Month")) == "[2021-01-01, 2021-02-01)"

    def test_day_window(self):
        window = canonical_window("2021-04-26", "Day")
        assert window.end - window.start == timedelta(days=1)

    def test_leap_february(self):
        window = canonical_window("2020-02-29", "Month")
        assert window.end == _utc(2020, 3, 1)

    @pytest.mark.parametrize("granularity", ["Day", "Month", "Year"])
    def test_boundary_belongs_to_window_it_starts(self, granularity):
        window = canonical_window("2019-01-01", granularity)
        assert window.start == _utc(2019, 1, 1)
        assert window.contains(_utc(2019, 1, 1))
        assert not canonical_window("2018-12-31", granularity).contains(_utc(2019, 1, 1))

    def test_contains_is_half_open(self):
        window = canonical_window("2018-06-10", "Year")
        assert window.contains(_utc(2018, 12, 31, 23, 59, 59))
        assert not window.contains(window.end)
        assert window.contains(datetime(2018, 1, 1))

    def test_anchor_converted_to_utc(self):
        # 01:00 on Jan 1 in UTC+3 is still Dec 31 in UTC
        anchor = datetime(2022, 1, 1, 1, 0, tzinfo=timezone(timedelta(hours=3)))
        assert canonical_window(anchor, "Day").start == _utc(2021, 12, 31)

    def test_window_is_stable(self):
        assert canonical_window("2018-06-10", "Month") == canonical_window("2018-06-30", "Month")


class TestTimeWindowValidation:

    def test_rejects_unaligned_start(self):
        with pytest.raises(ValidationError, match="not aligned"):
            TimeWindow(start=_utc(2018, 6, 2), end=_utc(2018, 7, 2), granularity="Month")

    def test_rejects_wrong_end(self):
        with pytest.raises(ValidationError, match="successor"):
            TimeWindow(start=_utc(2018, 6, 1), end=_utc(2018, 8, 1), granularity="Month")

    def test_naive_bounds_are_utc(self):
        window = TimeWindow(start=datetime(2018, 1, 1), end=datetime(2019, 1, 1), granularity="Year")
        assert window.start.tzinfo == timezone.utc

    def test_iso_range(self):
        start, end = canonical_window("2021-04-26", "Day").iso_range()
        assert start.startswith("2021-04-26T00:00:00")
        assert end.startswith("2021-04-27T00:00:00")


class TestGranularity:

    @pytest.mark.parametrize("value", ["month", "MONTH", " Month ", Granularity.MONTH])
    def test_parse_forgiving(self, value):
        assert Granularity.parse(value) is Granularity.MONTH

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown granularity"):
            Granularity.parse("Week")

    def test_adjectives(self):
        assert [g.adjective for g in Granularity] == ["daily", "monthly", "yearly"]


class TestCoerceAnchor:

    def test_date_string(self):
        assert coerce_anchor("2021-12-14") == date(2021, 12, 14)

    def test_datetime_string_with_zone(self):
        assert coerce_anchor("2021-04-26T02:46:00Z") == date(2021, 4, 26)

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            coerce_anchor(20211214)
