from datetime import datetime

import pytest

from app.data.iching import hexagrams
from app.services.divination.iching_services import (
    cast,
    cast_by_numbers,
    cast_by_time,
    generate_basic_reading,
    generate_enhanced_reading,
)


def test_numbers_cast():
    index, changing = cast_by_numbers([1, 1, 1])
    assert hexagrams[index]["chinese_name"] == "乾"
    assert changing == [1]


def test_numbers_wrap_and_table_modulo():
    index, changing = cast_by_numbers([16, 8, 12])
    assert index == 63 % len(hexagrams)
    assert changing == [6]


def test_numbers_need_three():
    with pytest.raises(ValueError):
        cast_by_numbers([3, 5])


def test_time_cast():
    index, changing = cast_by_time(datetime(2024, 1, 1, 0, 0))
    assert index == 0
    assert changing == [3]


def test_unknown_method():
    with pytest.raises(ValueError):
        cast("coins")


def test_basic_reading_transformed_hexagram():
    reading = generate_basic_reading("numbers", numbers=[1, 1, 1])
    assert reading.primary_hexagram["chinese_name"] == "乾"
    assert reading.transformed_hexagram["chinese_name"] == "坤"
    assert "【本卦】乾卦" in reading.interpretation
    assert reading.advice


def test_enhanced_reading_sections():
    reading = generate_enhanced_reading(
        "time", moment=datetime(2024, 4, 10, 9, 30), question="换工作是否合适"
    )
    assert reading.related_hexagrams is not None
    assert reading.line_analysis is not None
    assert reading.seasonal_influence is not None
    assert reading.wuxing_analysis is not None
    assert reading.question_analysis.category == "career"
    assert reading.detailed_interpretation
