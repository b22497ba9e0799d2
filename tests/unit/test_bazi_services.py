from datetime import date

import pytest

from app.services.divination.bazi_services import (
    analyze_dayun,
    analyze_elements,
    analyze_liunian,
    calculate_bazi_chart,
    calculate_day_pillar,
    calculate_hour_pillar,
    calculate_month_pillar,
    calculate_ten_god,
    calculate_year_pillar,
    generate_basic_reading,
    generate_enhanced_reading,
)
from app.data.bazi import heavenly_stems


def test_year_pillar_cycle():
    assert calculate_year_pillar(1984).name == "甲子"
    assert calculate_year_pillar(2024).name == "甲辰"
    assert calculate_year_pillar(1983).name == "癸亥"
    pillar = calculate_year_pillar(1994)
    assert pillar.stem["name"] == "甲"
    assert pillar.branch["name"] == "戌"


def test_month_pillar():
    assert calculate_month_pillar(1984, 1).name == "甲寅"
    assert calculate_month_pillar(1985, 1).name == "丙寅"


def test_day_pillar_reference_and_offset():
    assert calculate_day_pillar(date(2000, 1, 1)).name == "丙辰"
    assert calculate_day_pillar(date(2000, 1, 11)).name == "丙寅"
    # sixty-day cycle
    assert calculate_day_pillar(date(2000, 3, 1)).name == calculate_day_pillar(date(2000, 1, 1)).name


def test_hour_pillar_branches():
    assert calculate_hour_pillar(0, 0).name == "甲子"
    assert calculate_hour_pillar(0, 23).branch["name"] == "子"
    assert calculate_hour_pillar(0, 12).name == "庚午"


def test_missing_hour_defaults_to_noon():
    assert calculate_bazi_chart(date(1990, 6, 15)).hour == calculate_bazi_chart(date(1990, 6, 15), 12).hour


@pytest.mark.parametrize(
    "birth_date,hour",
    [
        (date(1990, 6, 15), 8),
        (date(1994, 2, 4), None),
        (date(1900, 1, 1), 0),
        (date(1984, 12, 31), 23),
        (date(2000, 2, 29), 13),
        (date(2023, 7, 7), 5),
    ],
)
def test_element_tally_covers_eight_characters(birth_date, hour):
    chart = calculate_bazi_chart(birth_date, hour)
    elements = analyze_elements(chart)
    assert sum(elements.distribution.values()) == 8
    assert elements.dominant in elements.distribution
    assert all(elements.distribution[element] == 0 for element in elements.lacking)


def test_ten_gods():
    jia, yi, bing, geng, xin = (heavenly_stems[i] for i in (0, 1, 2, 6, 7))
    assert calculate_ten_god(jia, jia) == "比肩"
    assert calculate_ten_god(jia, yi) == "劫财"
    assert calculate_ten_god(jia, bing) == "食神"
    assert calculate_ten_god(jia, geng) == "七杀"
    assert calculate_ten_god(jia, xin) == "正官"


def test_dayun_direction_depends_on_gender():
    birth = date(1984, 5, 5)  # yang year
    chart = calculate_bazi_chart(birth)
    male = analyze_dayun(chart, birth, "male", current_year=2010)
    female = analyze_dayun(chart, birth, "female", current_year=2010)
    assert male.current["age"] == "20-29岁"
    assert male.current["gan"] != female.current["gan"]


def test_liunian_uses_current_year():
    chart = calculate_bazi_chart(date(1990, 6, 15))
    liunian = analyze_liunian(chart, current_year=2024)
    assert liunian.current == {"gan": "甲", "zhi": "辰", "year": 2024}
    assert liunian.key_events


def test_basic_and_enhanced_readings():
    basic = generate_basic_reading(date(1990, 6, 15), hour=8)
    assert basic.personality and basic.advice
    assert basic.ten_gods is None

    enhanced = generate_enhanced_reading(date(1990, 6, 15), hour=8, gender="female", question="今年财运如何", current_year=2025)
    assert enhanced.ten_gods is not None
    assert enhanced.dayun is not None and enhanced.liunian is not None
    assert enhanced.elements.balance
    assert "【" in enhanced.detailed_interpretation


@pytest.mark.parametrize("gender", ["male", "female", "other", None])
def test_enhanced_tally_is_eight_for_every_gender(gender):
    reading = generate_enhanced_reading(date(1994, 8, 20), hour=17, gender=gender, current_year=2025)
    assert sum(reading.elements.distribution.values()) == 8
