from __future__ import annotations

from datetime import date

import pytest

from school_attendance.common.datetime_utils import day_name, month_range, parse_iso_date
from school_attendance.common.validators import coerce_int, optional_int
from school_attendance.core.exceptions import ValidationError


def test_day_name_matches_schedule_labels():
    assert day_name(date(2026, 10, 5)) == "Senin"
    assert day_name(date(2026, 10, 11)) == "Minggu"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2026-10", (date(2026, 10, 1), date(2026, 10, 31))),
        ("2026-02", (date(2026, 2, 1), date(2026, 2, 28))),
        ((2028, 2), (date(2028, 2, 1), date(2028, 2, 29))),
        (date(2026, 4, 17), (date(2026, 4, 1), date(2026, 4, 30))),
    ],
)
def test_month_range(value, expected):
    assert month_range(value) == expected


def test_month_range_rejects_garbage():
    with pytest.raises(ValidationError):
        month_range("2026/10")


def test_parse_iso_date():
    assert parse_iso_date("2026-10-05") == date(2026, 10, 5)
    with pytest.raises(ValueError):
        parse_iso_date("05-10-2026")


def test_int_coercion():
    assert optional_int("3", "kelas") == 3
    assert optional_int("", "kelas") is None
    with pytest.raises(ValidationError):
        optional_int("tiga", "kelas")
    assert coerce_int(" 4 ") == 4
    assert coerce_int("x") is None
    assert coerce_int(True) is None
