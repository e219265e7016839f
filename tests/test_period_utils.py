from datetime import date

import pytest

from gstledger.services.gst.period_utils import calculate_month_range


def test_month_range_regular_month():
    assert calculate_month_range(2024, 3) == (date(2024, 3, 1), date(2024, 3, 31))


def test_month_range_leap_february():
    assert calculate_month_range(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert calculate_month_range(2023, 2)[1] == date(2023, 2, 28)


@pytest.mark.parametrize("year,month", [(2024, 0), (2024, 13), (None, 5)])
def test_month_range_rejects_invalid_input(year, month):
    with pytest.raises(ValueError):
        calculate_month_range(year, month)
