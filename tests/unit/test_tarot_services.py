import pytest

from app.services.divination.tarot_services import (
    TAROT_SPREADS,
    generate_basic_reading,
    generate_enhanced_reading,
    normalize_spread_type,
)


@pytest.mark.parametrize("spread_type", list(TAROT_SPREADS))
def test_one_card_per_position(spread_type):
    reading = generate_basic_reading(spread_type, seed=12345)
    positions = TAROT_SPREADS[spread_type]["positions"]
    assert [drawn.position for drawn in reading.cards] == positions
    ids = [drawn.card["id"] for drawn in reading.cards]
    assert len(set(ids)) == len(ids)


def test_seeded_draw_is_repeatable():
    first = generate_basic_reading("celtic_cross", name="Mia", seed=99)
    second = generate_basic_reading("celtic_cross", name="Mia", seed=99)
    assert [(d.card["id"], d.is_reversed) for d in first.cards] == [(d.card["id"], d.is_reversed) for d in second.cards]


def test_name_changes_the_draw():
    first = generate_basic_reading("celtic_cross", name="Mia", seed=99)
    second = generate_basic_reading("celtic_cross", name="Leo", seed=99)
    assert [d.card["id"] for d in first.cards] != [d.card["id"] for d in second.cards]


def test_spread_aliases():
    assert normalize_spread_type("three-card") == "three_card"
    assert normalize_spread_type("celticCross") == "celtic_cross"
    with pytest.raises(ValueError):
        normalize_spread_type("horseshoe")


def test_basic_interpretation_sections():
    reading = generate_basic_reading("three_card", question="我的未来如何", seed=7)
    assert reading.interpretation.startswith("关于您的问题")
    assert "【综合解读】" in reading.interpretation
    assert "【建议】" in reading.interpretation


def test_enhanced_reading_analysis():
    reading = generate_enhanced_reading("three_card", question="我和对象的感情会好吗", seed=7)
    assert reading.question_analysis.category == "love"
    balance = reading.element_balance
    assert balance.fire + balance.water + balance.air + balance.earth <= len(reading.cards)
    assert reading.numerology is not None
    assert "【指引与建议】" in reading.interpretation
