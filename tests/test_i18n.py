from datetime import date

import pytest

from ludoteca.app.i18n.loader import MESSAGES, get_available_langs, has_key, load_messages, t
from ludoteca.app.utils.dates import add_months, iter_months, weeks_in_month
from ludoteca.app.utils.schedule_helper import day_name, day_name_full


def test_both_languages_loaded():
    assert get_available_langs() == ["ca", "es"]


def test_languages_have_the_same_keys():
    assert set(MESSAGES["es"]) == set(MESSAGES["ca"])


def test_unknown_key_falls_back_to_key():
    assert t("nope:missing", "ca") == "nope:missing"
    assert not has_key("nope:missing")


def test_format_arguments():
    assert t("slots:generate_success", "es", 3) == "Se han generado 3 slots"
    # Wrong argument count leaves the template untouched
    assert t("slots:generate_success", "es") == "Se han generado %s slots"


def test_day_names():
    monday = date(2024, 7, 1)
    assert day_name(monday, "es") == t("day:mon", "es")
    assert day_name_full(monday, "ca") == t("day:mon:full", "ca")


def test_custom_file(tmp_path):
    path = tmp_path / "messages.txt"
    path.write_text('# comment\nes:hello| "Hola\\nmundo"\nnot a line\n', encoding="utf-8")
    try:
        load_messages(path)
        assert t("hello", "es") == "Hola\nmundo"
        assert get_available_langs() == ["es"]
    finally:
        load_messages()


def test_missing_file(tmp_path):
    try:
        with pytest.raises(RuntimeError):
            load_messages(tmp_path / "absent.txt")
    finally:
        load_messages()


class TestDates:

    def test_add_months_crosses_years(self):
        assert add_months(date(2024, 11, 20), 3) == date(2025, 2, 1)
        assert add_months(date(2024, 1, 31), -1) == date(2023, 12, 1)

    def test_iter_months(self):
        assert list(iter_months(date(2024, 11, 5), date(2025, 1, 2))) == [(2024, 11), (2024, 12), (2025, 1)]

    def test_weeks_overlap_month_edges(self):
        weeks = weeks_in_month(2024, 9)
        assert weeks[0] == (date(2024, 8, 26), date(2024, 9, 1))
        assert weeks[-1] == (date(2024, 9, 30), date(2024, 10, 6))
