# app/services/divination/tarot_services.py
import logging
import re
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from app.data.tarot import tarot_cards
from app.services.divination.question_analyzer import (
    QuestionAnalysis,
    analyze_question,
    contextual_opening,
)
from app.services.divination.seeded_random import SeededRandom, tarot_seed

logger = logging.getLogger(__name__)

TAROT_SPREADS = {
    "three_card": {
        "name": "三张牌阵",
        "positions": ["过去", "现在", "未来"],
    },
    "celtic_cross": {
        "name": "凯尔特十字",
        "positions": [
            "当前状况",
            "挑战",
            "潜意识",
            "过去",
            "可能性",
            "近期未来",
            "你的态度",
            "外部影响",
            "希望与恐惧",
            "最终结果",
        ],
    },
    "single_card": {
        "name": "单张牌",
        "positions": ["指引"],
    },
    "relationship": {
        "name": "关系牌阵",
        "positions": ["你", "对方", "关系", "挑战", "建议"],
    },
}

SPREAD_ALIASES = {
    "three-card": "three_card",
    "threeCard": "three_card",
    "celtic-cross": "celtic_cross",
    "celticCross": "celtic_cross",
    "single-card": "single_card",
    "singleCard": "single_card",
}

SUIT_ELEMENTS = {
    "wands": "火（权杖）",
    "cups": "水（圣杯）",
    "swords": "风（宝剑）",
    "pentacles": "土（星币）",
}

NUMBER_MEANINGS = {
    1: "新开始、独立、领导力",
    2: "平衡、合作、二元性",
    3: "创造、表达、成长",
    4: "稳定、结构、基础",
    5: "变化、自由、冒险",
    6: "和谐、责任、爱",
    7: "智慧、内省、灵性",
    8: "力量、成就、物质",
    9: "完成、智慧、人道",
    10: "完满、循环、新周期",
    11: "直觉、启示、灵性觉醒",
    22: "大师数字、实现梦想、建造",
}

COURT_VALUES = (("王牌", 1), ("侍从", 11), ("骑士", 12), ("王后", 13), ("国王", 14))

CATEGORY_INTROS = {
    "love": "从感情的角度来看，",
    "career": "从事业发展的角度来看，",
    "wealth": "从财运的角度来看，",
    "health": "从健康的角度来看，",
    "decision": "关于您面临的选择，",
    "general": "从整体运势来看，",
}

GENERIC_ADVICE = [
    "相信自己的直觉，它会为您指明方向",
    "塔罗牌是一面镜子，最终的选择权在您手中",
    "保持开放的心态，接受生命的指引",
]


class DrawnCard(BaseModel):
    card: Dict[str, Any]
    position: str
    is_reversed: bool

    @property
    def orientation(self) -> str:
        return "逆位" if self.is_reversed else "正位"

    @property
    def meaning(self) -> Dict[str, Any]:
        return self.card["reversed"] if self.is_reversed else self.card["upright"]


class ElementBalance(BaseModel):
    fire: int = 0
    water: int = 0
    air: int = 0
    earth: int = 0
    dominant: str = "balanced"
    lacking: List[str] = []
    interpretation: str = ""


class CardCombination(BaseModel):
    cards: List[str]
    meaning: str
    relevance: str


class Numerology(BaseModel):
    total_value: int
    reduced_value: int
    meaning: str


class TarotReading(BaseModel):
    spread: str
    spread_type: str
    cards: List[DrawnCard]
    interpretation: str
    question_analysis: Optional[QuestionAnalysis] = None
    element_balance: Optional[ElementBalance] = None
    card_combinations: List[CardCombination] = []
    numerology: Optional[Numerology] = None


def normalize_spread_type(spread_type: str) -> str:
    key = SPREAD_ALIASES.get(spread_type, spread_type)
    if key not in TAROT_SPREADS:
        raise ValueError("Invalid spread type")
    return key


def draw_cards(spread_type: str, rng: SeededRandom) -> List[DrawnCard]:
    """Shuffle the deck with the given generator and deal one card per spread position."""
    spread = TAROT_SPREADS[normalize_spread_type(spread_type)]
    deck = rng.shuffle(tarot_cards)

    drawn = []
    for index, position in enumerate(spread["positions"]):
        drawn.append(DrawnCard(card=deck[index], position=position, is_reversed=rng.chance()))
    return drawn


def _describe_card(drawn: DrawnCard) -> str:
    card = drawn.card
    return f"{card['name']} ({card['name_en']}) - {drawn.orientation}"


def _numbered(points: List[str]) -> str:
    return "\n".join(f"{index}. {point}" for index, point in enumerate(points, start=1))


def _basic_overall(cards: List[DrawnCard], spread_type: str) -> str:
    if spread_type == "three_card":
        past, present, future = cards
        overall = f"从过去的{past.card['name']}来看，"
        if past.is_reversed:
            overall += f"您可能经历了{past.meaning['keywords'][0]}的时期。"
        else:
            overall += f"您经历了{past.meaning['keywords'][0]}的阶段。"

        overall += f"目前，{present.card['name']}显示您正处于"
        if present.is_reversed:
            overall += f"{present.meaning['keywords'][0]}的状态中。"
        else:
            overall += f"{present.meaning['keywords'][0]}的状态。"

        overall += f"展望未来，{future.card['name']}预示着"
        if future.is_reversed:
            overall += f"您需要注意{future.meaning['keywords'][0]}的挑战。"
        else:
            overall += f"{future.meaning['keywords'][0]}的发展趋势。"
        return overall

    if spread_type == "single_card":
        drawn = cards[0]
        keywords = "、".join(drawn.meaning["keywords"])
        lead = "注意" if drawn.is_reversed else "关注"
        suffix = "的方面" if drawn.is_reversed else ""
        return f"{drawn.card['name']}为您带来的指引是：{lead}{keywords}{suffix}，{drawn.meaning['meaning']}"

    overall = "从整体牌面来看，"
    majors = [c for c in cards if c.card["suit"] == "major"]
    if len(majors) > len(cards) / 2:
        overall += "大阿卡纳牌的出现表明这是一个重要的人生阶段，涉及深层次的转变和成长。"
    else:
        overall += "小阿卡纳牌占主导，表明这些是日常生活中可以掌控的事务。"
    overall += "各个位置的牌相互呼应，为您描绘出一幅完整的画面。"
    return overall


def _basic_advice(cards: List[DrawnCard]) -> List[str]:
    points = []
    for drawn in cards:
        if drawn.card["suit"] != "major":
            continue
        keyword = drawn.meaning["keywords"][0]
        if drawn.is_reversed:
            points.append(f"关注{drawn.card['name']}逆位所提示的{keyword}问题")
        else:
            points.append(f"把握{drawn.card['name']}带来的{keyword}机会")

    points.append("保持开放的心态，接受生命的指引")
    points.append("相信自己的直觉，它会为您指明方向")
    points.append("记住，塔罗牌只是一面镜子，最终的选择权在您手中")
    return points


def generate_basic_reading(
    spread_type: str,
    name: Optional[str] = None,
    birth_date: Optional[date] = None,
    question: Optional[str] = None,
    seed: Optional[int] = None,
) -> TarotReading:
    spread_type = normalize_spread_type(spread_type)
    spread = TAROT_SPREADS[spread_type]
    rng = SeededRandom(tarot_seed(name, birth_date, seed))
    cards = draw_cards(spread_type, rng)

    interpretation = ""
    if question:
        interpretation += f"关于您的问题：\"{question}\"\n\n"
    interpretation += f"使用{spread['name']}为您进行占卜。\n\n"

    blocks = []
    for drawn in cards:
        blocks.append(
            f"【{drawn.position}】{_describe_card(drawn)}\n"
            f"关键词：{'、'.join(drawn.meaning['keywords'])}\n"
            f"含义：{drawn.meaning['meaning']}\n"
        )
    interpretation += "\n".join(blocks)

    interpretation += "\n\n【综合解读】\n" + _basic_overall(cards, spread_type)
    interpretation += "\n\n【建议】\n" + _numbered(_basic_advice(cards))

    return TarotReading(
        spread=spread["name"],
        spread_type=spread_type,
        cards=cards,
        interpretation=interpretation,
    )


def analyze_element_balance(cards: List[DrawnCard]) -> ElementBalance:
    counts = {"fire": 0, "water": 0, "air": 0, "earth": 0}
    suit_keys = {"wands": "fire", "cups": "water", "swords": "air", "pentacles": "earth"}
    names = {suit_keys[suit]: label for suit, label in SUIT_ELEMENTS.items()}

    # Major arcana carry no suit element.
    for drawn in cards:
        key = suit_keys.get(drawn.card["suit"])
        if key:
            counts[key] += 1

    max_count = 0
    dominant = "balanced"
    lacking = []
    for key, count in counts.items():
        if count > max_count:
            max_count = count
            dominant = names[key]
        if count == 0 and len(cards) > 3:
            lacking.append(names[key])

    if max_count > len(cards) / 2:
        interpretation = f"牌阵中{dominant}元素占主导，"
        if "火" in dominant:
            interpretation += "显示出强烈的行动力、热情和创造力。这是采取主动、追求目标的好时机。"
        elif "水" in dominant:
            interpretation += "显示出丰富的情感、直觉和想象力。关注内心感受和人际关系很重要。"
        elif "风" in dominant:
            interpretation += "显示出清晰的思维、沟通和分析能力。理性思考和有效沟通是关键。"
        elif "土" in dominant:
            interpretation += "显示出务实、稳定和物质层面的关注。脚踏实地、循序渐进会带来成功。"
    else:
        interpretation = "牌阵中各元素较为平衡，显示出全面发展的趋势。"

    if lacking:
        interpretation += f"\n\n需要注意的是，牌阵中缺少{'和'.join(lacking)}元素，"
        interpretation += "建议在相关方面多加关注和补充。"

    return ElementBalance(dominant=dominant, lacking=lacking, interpretation=interpretation, **counts)


def analyze_card_combinations(cards: List[DrawnCard], analysis: QuestionAnalysis) -> List[CardCombination]:
    combinations = []

    majors = [c for c in cards if c.card["suit"] == "major"]
    if len(majors) >= 2:
        combinations.append(CardCombination(
            cards=[c.card["name"] for c in majors],
            meaning="多张大阿卡纳牌的出现表明这是人生中的重要时刻，涉及深层次的转变和成长。",
            relevance="这些重大主题将主导当前的情况发展。",
        ))

    if len(cards) == 3:
        past, present, future = cards
        if past.is_reversed and not present.is_reversed:
            combinations.append(CardCombination(
                cards=[past.card["name"], present.card["name"]],
                meaning="从过去的困境中走出，当前状况正在好转。",
                relevance="这种积极的转变值得珍惜和巩固。",
            ))
        if not present.is_reversed and not future.is_reversed:
            combinations.append(CardCombination(
                cards=[present.card["name"], future.card["name"]],
                meaning="当前的积极状态将延续到未来，前景乐观。",
                relevance="保持现在的方向和努力，会有好的结果。",
            ))

    if analysis.category == "love":
        love_cards = [
            c for c in cards
            if "恋人" in c.card["name"] or "圣杯" in c.card["name"] or c.card["suit"] == "cups"
        ]
        if love_cards:
            combinations.append(CardCombination(
                cards=[c.card["name"] for c in love_cards],
                meaning="这些牌直接关联到您的感情问题。",
                relevance="它们揭示了感情状况的核心动态。",
            ))

    if analysis.category == "career":
        career_cards = [
            c for c in cards
            if "战车" in c.card["name"] or "权杖" in c.card["name"] or c.card["suit"] == "wands"
        ]
        if career_cards:
            combinations.append(CardCombination(
                cards=[c.card["name"] for c in career_cards],
                meaning="这些牌与您的事业发展密切相关。",
                relevance="它们指示了职业道路上的机遇和挑战。",
            ))

    return combinations


def _card_number(card: Dict[str, Any]) -> int:
    if card["suit"] == "major":
        # English names of the major arcana do not start with a numeral.
        head = card["name_en"].split(" ")[0]
        return int(head) if head.isdigit() else 0

    for marker, value in COURT_VALUES:
        if marker in card["name"]:
            return value
    match = re.search(r"\d+", card["name"])
    return int(match.group(0)) if match else 0


def reduce_number(value: int) -> int:
    while value > 22 and value not in (11, 22):
        value = sum(int(digit) for digit in str(value))
    return value


def analyze_numerology(cards: List[DrawnCard]) -> Numerology:
    total = sum(_card_number(drawn.card) for drawn in cards)
    reduced = reduce_number(total)
    meaning = NUMBER_MEANINGS.get(reduced) or NUMBER_MEANINGS.get(reduced % 10) or "转变与成长"
    return Numerology(
        total_value=total,
        reduced_value=reduced,
        meaning=f"牌阵的数字能量为{reduced}，代表{meaning}。这个数字揭示了当前情况的核心主题。",
    )


def _contextual_meaning(drawn: DrawnCard, analysis: QuestionAnalysis) -> str:
    meaning = drawn.meaning
    keyword = meaning["keywords"][0]
    text = f"含义：{meaning['meaning']}\n"

    if analysis.category == "love" and "现在" in drawn.position:
        verb = "可能面临" if drawn.is_reversed else "正在经历"
        text += f"在感情方面：这张牌显示您当前的感情状态{verb}{keyword}的阶段。"
    elif analysis.category == "career" and "未来" in drawn.position:
        verb = "需要注意" if drawn.is_reversed else "迎来"
        text += f"在事业方面：这预示着您的职业发展将{verb}{keyword}的机会。"
    elif analysis.category == "wealth":
        verb = "提醒您谨慎" if drawn.is_reversed else "支持您"
        text += f"在财运方面：{keyword}的能量{verb}在金钱事务上的决策。"
    return text


def _contextual_overall(cards: List[DrawnCard], analysis: QuestionAnalysis, balance: ElementBalance) -> str:
    overall = CATEGORY_INTROS.get(analysis.category, "从整体来看，")

    majors = [c for c in cards if c.card["suit"] == "major"]
    reversed_cards = [c for c in cards if c.is_reversed]

    if len(majors) > len(cards) / 2:
        overall += "大阿卡纳牌的主导表明这是一个重要的转折点，涉及深层次的变化。"

    if len(reversed_cards) > len(cards) / 2:
        overall += "较多的逆位牌提示您需要内省和调整，某些方面可能存在阻碍或延迟。"
    elif not reversed_cards:
        overall += "所有牌都是正位，显示能量流动顺畅，事态发展积极。"

    if balance.dominant != "balanced":
        overall += f"{balance.dominant}元素的主导影响着整体局势的发展方向。"

    if analysis.timeframe == "future":
        overall += "从牌面来看，未来的发展趋势是可以把握的，关键在于您当下的选择和行动。"
    elif analysis.timeframe == "present":
        overall += "当前的情况需要您保持清醒的认知，及时做出调整。"

    return overall


def _contextual_advice(analysis: QuestionAnalysis, balance: ElementBalance) -> List[str]:
    points = []

    if analysis.category == "love":
        points.append("在感情中保持真诚和开放的沟通")
        points.append("倾听内心的声音，同时也要理解对方的感受")
    elif analysis.category == "career":
        points.append("把握当前的机会，展现您的能力和价值")
        points.append("保持专业态度，同时不忘初心")
    elif analysis.category == "wealth":
        points.append("理性分析财务状况，避免冲动决策")
        points.append("长期规划比短期收益更重要")

    for element in balance.lacking:
        if "火" in element:
            points.append("增加行动力和热情，不要过于被动")
        elif "水" in element:
            points.append("多关注情感需求，培养同理心")
        elif "风" in element:
            points.append("加强理性思考和沟通能力")
        elif "土" in element:
            points.append("注重实际行动，脚踏实地")

    if analysis.urgency == "high":
        points.append("当前情况需要及时处理，但也要避免过于焦虑")

    if analysis.sentiment == "negative":
        points.append("保持积极的心态，困难是暂时的")
        points.append("寻求支持和帮助，不要独自承担")

    points.extend(GENERIC_ADVICE)
    return points


def generate_enhanced_reading(
    spread_type: str,
    name: Optional[str] = None,
    birth_date: Optional[date] = None,
    question: Optional[str] = None,
    seed: Optional[int] = None,
) -> TarotReading:
    """
    Draw a spread and interpret it against the question: element balance of the suits,
    notable card combinations, a numerology value and category-aware advice.
    """
    analysis = analyze_question(question)
    spread_type = normalize_spread_type(spread_type)
    spread = TAROT_SPREADS[spread_type]
    rng = SeededRandom(tarot_seed(name, birth_date, seed))
    cards = draw_cards(spread_type, rng)

    balance = analyze_element_balance(cards)
    combinations = analyze_card_combinations(cards, analysis)
    numerology = analyze_numerology(cards)
    logger.debug(f"Tarot draw {spread_type}: {[c.card['name'] for c in cards]}, category={analysis.category}")

    if question:
        interpretation = contextual_opening(question, analysis)
    else:
        interpretation = f"使用{spread['name']}为您进行占卜。\n\n"

    interpretation += "【牌面解读】\n\n"
    blocks = []
    for drawn in cards:
        blocks.append(
            f"{drawn.position}：{_describe_card(drawn)}\n"
            f"关键词：{'、'.join(drawn.meaning['keywords'])}\n"
            + _contextual_meaning(drawn, analysis)
        )
    interpretation += "\n".join(blocks)

    interpretation += "\n\n【元素能量分析】\n" + balance.interpretation

    if combinations:
        interpretation += "\n\n【牌面组合洞察】\n"
        for index, combo in enumerate(combinations, start=1):
            interpretation += f"{index}. {combo.meaning}\n   {combo.relevance}\n"

    interpretation += "\n\n【数字能量】\n" + numerology.meaning
    interpretation += "\n\n【综合解读】\n" + _contextual_overall(cards, analysis, balance)
    interpretation += "\n\n【指引与建议】\n" + _numbered(_contextual_advice(analysis, balance))

    return TarotReading(
        spread=spread["name"],
        spread_type=spread_type,
        cards=cards,
        interpretation=interpretation,
        question_analysis=analysis,
        element_balance=balance,
        card_combinations=combinations,
        numerology=numerology,
    )
