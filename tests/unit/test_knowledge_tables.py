from app.data.bazi import FIVE_ELEMENTS, earthly_branches, generates, heavenly_stems
from app.data.iching import get_hexagram_by_id, get_hexagram_by_index, hexagrams, trigrams
from app.data.tarot import get_card_by_id, tarot_cards
from app.data.zodiac import get_sign_by_name, zodiac_signs


def test_table_sizes():
    assert len(zodiac_signs) == 12
    assert len(tarot_cards) == 32
    assert len(heavenly_stems) == 10
    assert len(earthly_branches) == 12
    assert len(hexagrams) == 11
    assert len(trigrams) == 8


def test_stems_and_branches_are_in_cycle_order():
    assert heavenly_stems[0]["name"] == "甲"
    assert earthly_branches[0]["name"] == "子"
    assert set(generates) == set(FIVE_ELEMENTS)


def test_lookups():
    assert get_sign_by_name("Leo")["name"] == "狮子座"
    assert get_sign_by_name("狮子座")["name_en"] == "Leo"
    assert get_sign_by_name("Ophiuchus") is None
    first = tarot_cards[0]
    assert get_card_by_id(first["id"]) is first
    assert get_hexagram_by_id(1)["chinese_name"] == "乾"
    assert get_hexagram_by_id(64)["number"] == 64
    assert get_hexagram_by_id(7) is None


def test_hexagram_index_wraps():
    assert get_hexagram_by_index(len(hexagrams)) is hexagrams[0]
    assert get_hexagram_by_index(-1) is hexagrams[-1]


def test_trigrams_carry_wuxing():
    assert all(trigram["wuxing"] in FIVE_ELEMENTS for trigram in trigrams.values())
