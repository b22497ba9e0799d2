from datetime import date

import pytest

from app.services.divination import astrology_services
from app.services.divination.astrology_services import (
    analyze_moon_phase,
    calculate_zodiac_sign,
    generate_basic_reading,
    generate_enhanced_reading,
    resolve_zodiac_sign,
)


@pytest.mark.parametrize(
    "month,day,expected",
    [
        (3, 21, "Aries"),
        (4, 19, "Aries"),
        (4, 20, "Taurus"),
        (6, 21, "Cancer"),
        (12, 21, "Sagittarius"),
        (12, 22, "Capricorn"),
        (1, 1, "Capricorn"),
        (1, 19, "Capricorn"),
        (1, 20, "Aquarius"),
        (2, 29, "Pisces"),
        (3, 20, "Pisces"),
    ],
)
def test_zodiac_boundaries(month, day, expected):
    assert resolve_zodiac_sign(month, day)["name_en"] == expected


def test_calculate_from_date():
    assert calculate_zodiac_sign(date(1990, 8, 1))["name"] == "狮子座"


def test_basic_reading_is_stable_for_a_day():
    today = date(2025, 3, 14)
    first = generate_basic_reading(date(1992, 10, 5), today=today)
    second = generate_basic_reading(date(1992, 10, 5), today=today)
    assert first.fortune == second.fortune
    assert first.lucky_elements == second.lucky_elements
    assert first.lucky_elements.color in astrology_services.LUCKY_COLORS
    assert 1 <= first.lucky_elements.number <= 9
    assert first.advice


def test_moon_phase_on_reference_new_moon():
    assert analyze_moon_phase(astrology_services.REFERENCE_NEW_MOON).phase == "新月"


def test_moon_phase_before_reference_wraps():
    phase = analyze_moon_phase(date(2023, 12, 31))
    assert phase.phase in [name for name, _, _ in astrology_services.MOON_PHASES]


def test_enhanced_reading_uses_question_house():
    reading = generate_enhanced_reading(date(1992, 10, 5), question="我的事业什么时候能升职？", today=date(2025, 3, 14))
    assert reading.question_analysis.category == "career"
    assert reading.house_analysis.relevant_house == 10
    assert reading.moon_phase is not None
    assert reading.detailed_interpretation
    assert reading.lucky_elements.time
